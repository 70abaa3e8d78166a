from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.features.health.routes.health import router as health_router
from app.features.waitlist.routes.pages import router as pages_router
from app.features.waitlist.routes.waitlist import router as waitlist_router
from app.platform.config import Settings, get_settings
from app.platform.db.session import create_data_store
from app.platform.exceptions import add_exception_handlers
from app.platform.logger import configure_logging, get_logger

logger = get_logger("main")


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings: Settings = app.state.settings
    data_store = create_data_store(settings)
    if data_store is not None and settings.AUTO_CREATE_TABLES:
        await data_store.create_tables()
        logger.info("Database tables created")

    app.state.data_store = data_store
    logger.info(f"{settings.APP_NAME} started ({settings.ENVIRONMENT})")
    try:
        yield
    finally:
        if data_store is not None:
            await data_store.dispose()
        app.state.data_store = None


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or get_settings()
    configure_logging(settings)

    app = FastAPI(
        title=settings.APP_NAME,
        description="Waitlist with referral-driven leaderboard ranking",
        version="1.0.0",
        debug=settings.DEBUG,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.data_store = None

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    add_exception_handlers(app)

    app.include_router(health_router)
    app.include_router(waitlist_router)
    app.include_router(pages_router)

    return app
