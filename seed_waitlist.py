import asyncio
import random

from app.features.waitlist.services.waitlist import WaitlistService
from app.platform.config import get_settings
from app.platform.db.session import create_data_store
from app.platform.logger import configure_logging

# Number of fake signups to create; roughly a third of them use a referral code
SIGNUPS = 25


async def seed_data():
    settings = get_settings()
    configure_logging(settings)
    data_store = create_data_store(settings)
    if data_store is None:
        raise SystemExit("Set DATABASE_URL before seeding")

    await data_store.create_tables()
    codes = []
    async with data_store.sessionmaker() as session:
        service = WaitlistService(session)
        for index in range(SIGNUPS):
            referred_by = random.choice(codes) if codes and random.random() < 0.35 else None
            user = await service.signup(
                f"Test User {index}", f"test.user{index}@example.com", referred_by_code=referred_by
            )
            codes.append(user.referral_code)
            print(f"Added {user.email} (code {user.referral_code}, referred by {referred_by})")

    await data_store.dispose()


if __name__ == "__main__":
    asyncio.run(seed_data())
