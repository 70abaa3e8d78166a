from collections.abc import AsyncGenerator
from typing import Optional

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from app.features.waitlist.services.waitlist import WaitlistService
from app.platform.config import Settings
from app.platform.db.session import get_db


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_waitlist_service(db: AsyncSession = Depends(get_db)) -> WaitlistService:
    return WaitlistService(db)


async def get_optional_waitlist_service(
    request: Request,
) -> AsyncGenerator[Optional[WaitlistService], None]:
    """Like ``get_waitlist_service`` but yields None instead of failing without a data store."""
    data_store = getattr(request.app.state, "data_store", None)
    if data_store is None:
        yield None
        return

    async with data_store.sessionmaker() as session:
        yield WaitlistService(session)
