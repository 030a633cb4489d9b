from fastapi import APIRouter, Depends, Request, Response, status
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from starlette.concurrency import run_in_threadpool

from debatecards.core.exceptions.exceptions import InvalidInputError
from debatecards.schemas.link_check import LinkCheckRequest, ProbeResult
from debatecards.services.link_resolver_service import LinkResolverService
from debatecards.utils.log import app_logger, sanitize_error

router = APIRouter(tags=["Link_Check"])

PREFLIGHT_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "authorization, x-client-info, apikey, content-type",
    "Access-Control-Allow-Methods": "POST, OPTIONS",
}


def get_link_resolver() -> LinkResolverService:
    return LinkResolverService()


@router.options("/check-url", include_in_schema=False)
async def check_url_preflight() -> Response:
    # browser preflights are answered by the CORS middleware; this covers bare OPTIONS calls
    return Response(status_code=status.HTTP_200_OK, headers=PREFLIGHT_HEADERS)


@router.post(
    "/check-url",
    response_model=ProbeResult,
    response_model_exclude_none=True,
    summary="Check whether a citation link is reachable",
    description="Probes the link with HEAD, then GET, then through doi.org when the link embeds a DOI. "
                "Network failures are reported as `ok: false` with status 200.",
    responses={
        400: {"description": "Body is not JSON, or `url` is missing or not an http(s) URL"},
    },
)
async def check_url(
    request: Request,
    resolver: LinkResolverService = Depends(get_link_resolver),
) -> JSONResponse:
    """Resolve one citation link.

    Returns:
        200 with `{ok, status, finalUrl}` for any well-formed http(s) URL, even when unreachable.
        400 with `{ok: false, error}` for malformed input.
    """
    try:
        body = await request.json()
    except ValueError:
        return JSONResponse({"ok": False, "error": "Bad request"}, status_code=status.HTTP_400_BAD_REQUEST)

    try:
        payload = LinkCheckRequest.model_validate(body)
    except ValidationError:
        return JSONResponse({"ok": False, "error": "Invalid url"}, status_code=status.HTTP_400_BAD_REQUEST)

    try:
        # requests is blocking; keep the event loop free while the strategies run
        result = await run_in_threadpool(resolver.resolve, payload.url)
    except InvalidInputError as e:
        app_logger.info("api.check_url.rejected", url=payload.url, error=e.message)
        return JSONResponse({"ok": False, "error": e.message}, status_code=status.HTTP_400_BAD_REQUEST)
    except Exception as e:
        # unreachable links are an expected outcome, never a server error
        app_logger.error("api.check_url.error", url=payload.url, exc_type=type(e).__name__, error=sanitize_error(e))
        return JSONResponse({"ok": False}, status_code=status.HTTP_200_OK)

    return JSONResponse(result.to_payload(), status_code=status.HTTP_200_OK)
