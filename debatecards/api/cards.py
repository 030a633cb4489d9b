from typing import Iterator

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from starlette.concurrency import run_in_threadpool

from debatecards.core.exceptions.exceptions import AppError, ExternalAPIError
from debatecards.schemas.cards import (
    ClipboardPayload,
    DebateCard,
    GenerateCardsRequest,
    GenerateCardsResponse,
)
from debatecards.services.card_generator_service import CardGeneratorService
from debatecards.services.clipboard_formatter import ClipboardFormatter
from debatecards.utils.log import app_logger, sanitize_error

router = APIRouter(tags=["Debate_Cards"])


def get_card_generator() -> Iterator[CardGeneratorService]:
    generator = CardGeneratorService()
    try:
        yield generator
    finally:
        generator.close()


def _error(message: str, status_code: int) -> JSONResponse:
    return JSONResponse({"error": message}, status_code=status_code)


@router.post(
    "/generate-debate-cards",
    response_model=GenerateCardsResponse,
    summary="Generate three debate cards for a topic",
    responses={
        400: {"description": "Missing or blank topic"},
        402: {"description": "Upstream AI workspace needs funds"},
        429: {"description": "Upstream rate limit exceeded"},
        500: {"description": "Gateway not configured or returned an unusable answer"},
    },
)
async def generate_debate_cards(
    request: Request,
    generator: CardGeneratorService = Depends(get_card_generator),
):
    try:
        body = await request.json()
        payload = GenerateCardsRequest.model_validate(body)
    except (ValueError, ValidationError):
        return _error("Please provide a valid topic", status.HTTP_400_BAD_REQUEST)

    try:
        cards = await run_in_threadpool(generator.generate, payload.topic)
    except AppError as e:
        message = getattr(e, "message", str(e))
        if e.status_code >= 500:
            app_logger.error("api.cards.error", exc_type=type(e).__name__, error=message)
        else:
            app_logger.warning("api.cards.rejected", exc_type=type(e).__name__, error=message)
        if isinstance(e, ExternalAPIError) and e.status_code >= 500:
            # upstream details stay in the logs
            message = "AI gateway request failed"
        return _error(message, e.status_code)
    except Exception as e:
        app_logger.error("api.cards.unexpected", exc_type=type(e).__name__, error=sanitize_error(e))
        return _error("Unknown error occurred", status.HTTP_500_INTERNAL_SERVER_ERROR)

    return GenerateCardsResponse(cards=cards)


@router.post(
    "/format-card",
    response_model=ClipboardPayload,
    summary="Build the rich-text clipboard payload for a card",
)
def format_card(card: DebateCard) -> ClipboardPayload:
    """Return `html` (inline-styled, paste-safe for Google Docs/Word) and `text` renditions."""
    return ClipboardFormatter().format_card(card)
