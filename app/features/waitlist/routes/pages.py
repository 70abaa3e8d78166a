from pathlib import Path
from typing import Optional

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import RedirectResponse
from fastapi.templating import Jinja2Templates

from app.features.waitlist.services.waitlist import WaitlistService, build_referral_link
from app.features.waitlist.utils.rewards import REWARD_TIERS, reward_tier_for_rank
from app.platform.config import Settings
from app.platform.dependencies import get_app_settings, get_optional_waitlist_service

PAGE_LEADERBOARD_SIZE = 10

templates = Jinja2Templates(directory=str(Path(__file__).resolve().parent.parent / "template" / "pages"))

router = APIRouter(tags=["Pages"], include_in_schema=False)


def _unavailable_page(request: Request):
    return templates.TemplateResponse(
        request, "unavailable.html", {}, status_code=status.HTTP_503_SERVICE_UNAVAILABLE
    )


@router.get("/")
async def landing_page(
    request: Request,
    ref: Optional[str] = None,
    service: Optional[WaitlistService] = Depends(get_optional_waitlist_service),
):
    if service is None:
        return _unavailable_page(request)

    total_users = await service.count_users()
    leaderboard = await service.get_leaderboard(PAGE_LEADERBOARD_SIZE)
    return templates.TemplateResponse(
        request,
        "landing.html",
        {
            "total_users": total_users,
            "leaderboard": leaderboard,
            "reward_tiers": REWARD_TIERS,
            "referral_code": ref or "",
        },
    )


@router.get("/signup")
async def signup_page(request: Request, ref: Optional[str] = None):
    return templates.TemplateResponse(request, "signup.html", {"referral_code": ref or ""})


@router.get("/dashboard")
async def dashboard_page(
    request: Request,
    id: Optional[str] = None,
    service: Optional[WaitlistService] = Depends(get_optional_waitlist_service),
    settings: Settings = Depends(get_app_settings),
):
    if service is None:
        return _unavailable_page(request)

    user = await service.get_user_by_id(id) if id else None
    if user is None:
        return templates.TemplateResponse(
            request, "not_found.html", {}, status_code=status.HTTP_404_NOT_FOUND
        )

    leaderboard = await service.get_leaderboard(PAGE_LEADERBOARD_SIZE)
    return templates.TemplateResponse(
        request,
        "dashboard.html",
        {
            "user": user,
            "referral_link": build_referral_link(settings.PUBLIC_BASE_URL, user.referral_code),
            "leaderboard": leaderboard,
            "reward_tiers": REWARD_TIERS,
            "current_tier": reward_tier_for_rank(user.rank),
        },
    )


@router.get("/ref/{referral_code}")
async def referral_redirect(referral_code: str):
    """Short share link; the landing page picks the code up from ``?ref=``."""
    return RedirectResponse(
        url=f"/?ref={referral_code.upper()}", status_code=status.HTTP_307_TEMPORARY_REDIRECT
    )
