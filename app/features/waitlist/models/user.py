from sqlalchemy import Column, Integer, String

from app.platform.db.base import BaseModel


class User(BaseModel):
    __tablename__ = "users"
    email = Column(String(255), unique=True, nullable=False, index=True)
    name = Column(String(255), nullable=False)
    referral_code = Column(String(8), unique=True, nullable=False, index=True)
    # Holds another user's referral_code; only stored when that user exists
    referred_by_code = Column(String(8), nullable=True, index=True)
    referral_count = Column(Integer, default=0, server_default="0", nullable=False)
    rank = Column(Integer, nullable=False, index=True)

    def __repr__(self):
        return f"<User(id={self.id}, email={self.email}, referral_code={self.referral_code}, rank={self.rank})>"
