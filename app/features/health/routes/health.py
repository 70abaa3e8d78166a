from fastapi import APIRouter, Request, status

from app.platform.response import api_response

router = APIRouter()


@router.get("/health", tags=["health"])
async def health_check(request: Request):
    data_store = getattr(request.app.state, "data_store", None)
    return api_response(
        data={
            "status": "ok",
            "service": request.app.state.settings.APP_NAME,
            "database": "configured" if data_store is not None else "unavailable",
        },
        status_code=status.HTTP_200_OK,
    )
