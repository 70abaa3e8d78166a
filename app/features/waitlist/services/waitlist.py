from datetime import datetime
from typing import Optional

from fastapi import HTTPException, status
from sqlalchemy import func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.features.waitlist.models.user import User
from app.features.waitlist.utils.rank import calculate_rank
from app.features.waitlist.utils.referral_code_generator import generate_referral_code
from app.platform.logger import get_logger

logger = get_logger("waitlist")


def build_referral_link(base_url: str, referral_code: str) -> str:
    return f"{base_url.rstrip('/')}/?ref={referral_code}"


class WaitlistService:
    """
    Signup, referral crediting and leaderboard queries over the ``users`` table.

    Ranks are a gamification signal, not a ledger. Two signups racing on the
    user count can end up with the same signup position; that is accepted.
    Referral credits use an in-database increment so concurrent referred
    signups never lose a count.
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    async def count_users(self, created_before: Optional[datetime] = None) -> int:
        query = select(func.count()).select_from(User)
        if created_before is not None:
            query = query.where(User.created_at < created_before)
        result = await self.db.execute(query)
        return result.scalar_one()

    async def get_user_by_id(self, user_id: str) -> Optional[User]:
        result = await self.db.execute(select(User).where(User.id == user_id))
        return result.scalar_one_or_none()

    async def get_user_by_email(self, email: str) -> Optional[User]:
        result = await self.db.execute(select(User).where(User.email == email.lower()))
        return result.scalar_one_or_none()

    async def get_user_by_referral_code(self, referral_code: str) -> Optional[User]:
        result = await self.db.execute(select(User).where(User.referral_code == referral_code))
        return result.scalar_one_or_none()

    async def generate_unique_referral_code(self) -> str:
        referral_code = generate_referral_code()
        while await self.get_user_by_referral_code(referral_code):
            logger.info(f"Referral code collision on {referral_code}, regenerating")
            referral_code = generate_referral_code()
        return referral_code

    async def signup(
        self,
        name: str,
        email: str,
        referred_by_code: Optional[str] = None,
        user_id: Optional[str] = None,
    ) -> User:
        email = email.lower()
        if await self.get_user_by_email(email):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST, detail="Email already registered"
            )

        signup_position = await self.count_users()
        referral_code = await self.generate_unique_referral_code()

        referrer = None
        if referred_by_code:
            referrer = await self.get_user_by_referral_code(referred_by_code)
            if referrer is None:
                logger.info(f"Ignoring unknown referral code {referred_by_code} for {email}")

        fields = dict(
            email=email,
            name=name,
            referral_code=referral_code,
            referred_by_code=referrer.referral_code if referrer else None,
            referral_count=0,
            rank=calculate_rank(signup_position, 0),
        )
        if user_id:
            fields["id"] = user_id
        user = User(**fields)
        self.db.add(user)

        try:
            await self.db.flush()
            if referrer is not None:
                await self.credit_referrer(referrer)
            await self.db.commit()
        except IntegrityError:
            # A concurrent signup may have taken the email between the check and the insert
            await self.db.rollback()
            if await self.get_user_by_email(email):
                raise HTTPException(
                    status_code=status.HTTP_400_BAD_REQUEST, detail="Email already registered"
                )
            raise

        await self.db.refresh(user)
        logger.info(
            f"User {user.id} joined at position {signup_position} with rank {user.rank}"
            f" (referred by {user.referred_by_code or 'nobody'})"
        )
        return user

    async def credit_referrer(self, referrer: User) -> None:
        """Add one referral to ``referrer`` and recompute their rank."""
        referrer_id, referrer_created_at = referrer.id, referrer.created_at
        await self.db.execute(
            update(User)
            .where(User.id == referrer_id)
            .values(referral_count=User.referral_count + 1)
        )
        result = await self.db.execute(select(User.referral_count).where(User.id == referrer_id))
        referral_count = result.scalar_one()

        signup_position = await self.count_users(created_before=referrer_created_at)
        rank = calculate_rank(signup_position, referral_count)
        await self.db.execute(update(User).where(User.id == referrer_id).values(rank=rank))
        logger.info(f"Credited referrer {referrer_id}: {referral_count} referrals, rank {rank}")

    async def create_profile(
        self, user_id: str, name: str, email: str, referred_by_code: Optional[str] = None
    ) -> tuple[User, bool]:
        """Returns ``(user, created)``; an existing profile for ``user_id`` is returned as is."""
        existing = await self.get_user_by_id(user_id)
        if existing:
            return existing, False

        try:
            user = await self.signup(name, email, referred_by_code, user_id=user_id)
        except HTTPException as exc:
            # A concurrent call for the same user_id may have inserted the profile first
            if exc.status_code != status.HTTP_400_BAD_REQUEST:
                raise
            existing = await self.get_user_by_id(user_id)
            if existing is None:
                raise
            return existing, False
        return user, True

    async def get_leaderboard(self, limit: int):
        result = await self.db.execute(
            select(User.name, User.email, User.referral_code, User.referral_count, User.rank)
            .order_by(User.rank.asc(), User.created_at.asc())
            .limit(limit)
        )
        return result.all()

    async def get_user(self, user_id: Optional[str] = None, email: Optional[str] = None) -> User:
        if not user_id and not email:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST, detail="User ID or email is required"
            )

        user = await self.get_user_by_id(user_id) if user_id else await self.get_user_by_email(email)
        if user is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
        return user
