from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
from debatecards.api.check_url import router as check_url_router
from debatecards.api.cards import router as cards_router
from debatecards.api.health import router as health_router
from debatecards.config.settings import settings
from debatecards.utils.log import app_logger

@asynccontextmanager
async def lifespan(app: FastAPI):
    app_logger.info("app.startup", version=settings.APP_VERSION, probe_timeout=settings.PROBE_TIMEOUT)
    yield
    app_logger.info("app.shutdown")


def create_app() -> FastAPI:
    app = FastAPI(title="Debate Cards", version=settings.APP_VERSION, lifespan=lifespan)

    # the web client is served from another origin
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ALLOW_ORIGINS,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["authorization", "x-client-info", "apikey", "content-type"],
    )

    # include routes
    app.include_router(check_url_router)
    app.include_router(cards_router)
    app.include_router(health_router)
    return app

app = create_app()
