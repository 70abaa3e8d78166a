from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Fields are snake_case in Python and camelCase on the wire."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
        str_strip_whitespace=True,
    )


class SignupIn(CamelModel):
    email: EmailStr
    name: str = Field(..., min_length=1, max_length=255)
    referred_by_code: Optional[str] = None

    @field_validator("email")
    @classmethod
    def normalize_email(cls, value: str) -> str:
        return value.lower()

    @field_validator("referred_by_code")
    @classmethod
    def normalize_referral_code(cls, value: Optional[str]) -> Optional[str]:
        if not value:
            return None
        return value.upper()


class CreateProfileIn(SignupIn):
    user_id: str = Field(..., min_length=1)


class UserOut(CamelModel):
    id: str
    email: str
    name: str
    referral_code: str
    referred_by_code: Optional[str] = None
    referral_count: int
    rank: int
    created_at: datetime
    updated_at: Optional[datetime] = None


class LeaderboardEntry(CamelModel):
    name: str
    email: str
    referral_code: str
    referral_count: int
    rank: int
