from typing import Optional

from fastapi import APIRouter, BackgroundTasks, Depends, Query, status

from app.features.waitlist.schemas.waitlist import (
    CreateProfileIn,
    LeaderboardEntry,
    SignupIn,
    UserOut,
)
from app.features.waitlist.services.waitlist import WaitlistService, build_referral_link
from app.features.waitlist.utils.emailer import send_welcome_email
from app.platform.config import Settings
from app.platform.dependencies import get_app_settings, get_waitlist_service
from app.platform.response import api_response

router = APIRouter(prefix="/api", tags=["Waitlist"])


def _schedule_welcome_email(background_tasks: BackgroundTasks, user, referral_link: str):
    background_tasks.add_task(
        send_welcome_email, user.email, user.name, user.referral_code, referral_link, user.rank
    )


@router.post("/signup", status_code=status.HTTP_201_CREATED)
async def signup(
    payload: SignupIn,
    background_tasks: BackgroundTasks,
    service: WaitlistService = Depends(get_waitlist_service),
    settings: Settings = Depends(get_app_settings),
):
    """Join the waitlist, optionally crediting the user whose code is in ``referredByCode``."""
    user = await service.signup(payload.name, payload.email, payload.referred_by_code)
    referral_link = build_referral_link(settings.PUBLIC_BASE_URL, user.referral_code)
    _schedule_welcome_email(background_tasks, user, referral_link)

    return api_response(
        data={
            "user": UserOut.model_validate(user).model_dump(by_alias=True),
            "referralLink": referral_link,
        },
        status_code=status.HTTP_201_CREATED,
    )


@router.post("/create-profile")
async def create_profile(
    payload: CreateProfileIn,
    background_tasks: BackgroundTasks,
    service: WaitlistService = Depends(get_waitlist_service),
    settings: Settings = Depends(get_app_settings),
):
    """Create the waitlist profile for an account issued by the auth provider. Idempotent per ``userId``."""
    user, created = await service.create_profile(
        payload.user_id, payload.name, payload.email, payload.referred_by_code
    )
    if created:
        referral_link = build_referral_link(settings.PUBLIC_BASE_URL, user.referral_code)
        _schedule_welcome_email(background_tasks, user, referral_link)

    return api_response(
        data={"user": UserOut.model_validate(user).model_dump(by_alias=True)},
        status_code=status.HTTP_201_CREATED if created else status.HTTP_200_OK,
    )


@router.get("/stats")
async def stats(service: WaitlistService = Depends(get_waitlist_service)):
    return api_response(data={"totalUsers": await service.count_users()})


@router.get("/leaderboard")
async def leaderboard(
    limit: Optional[int] = Query(None, ge=1),
    service: WaitlistService = Depends(get_waitlist_service),
    settings: Settings = Depends(get_app_settings),
):
    page_size = settings.LEADERBOARD_LIMIT if limit is None else min(limit, settings.LEADERBOARD_LIMIT)
    rows = await service.get_leaderboard(page_size)

    return api_response(
        data={
            "leaderboard": [
                LeaderboardEntry.model_validate(row).model_dump(by_alias=True) for row in rows
            ]
        }
    )


@router.get("/user")
async def get_user(
    id: Optional[str] = None,
    email: Optional[str] = None,
    service: WaitlistService = Depends(get_waitlist_service),
):
    user = await service.get_user(user_id=id, email=email)
    return api_response(data={"user": UserOut.model_validate(user).model_dump(by_alias=True)})
