from fastapi import APIRouter

from debatecards.config.settings import settings
from debatecards.schemas.health import HealthResponse

router = APIRouter(tags=["Health"])


@router.get("/health", response_model=HealthResponse)
def health() -> HealthResponse:
    return HealthResponse(status="healthy", version=settings.APP_VERSION)
