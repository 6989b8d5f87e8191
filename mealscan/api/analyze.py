"""REST endpoint for meal image/audio analysis.

POST /api/analyze-image accepts a base64 image (or data URI) or a base64
audio recording and returns the normalized analysis produced by the
selected provider.
"""

import asyncio
from typing import Any, Optional

import structlog
from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse, Response
from pydantic import BaseModel, ConfigDict, Field

from mealscan.api.errors import domain_error_response, internal_error_response
from mealscan.domain.meal.recognition.models import (
    AnalysisMode,
    AnalysisRequest,
    MediaInput,
    ProviderKind,
)
from mealscan.domain.shared.errors import DomainError, ProviderTimeoutError

logger = structlog.get_logger(__name__)

# nginx convention for "client closed request"
CLIENT_CLOSED_REQUEST = 499
DISCONNECT_POLL_S = 0.25

router = APIRouter(prefix="/api", tags=["analysis"])


class AnalyzeImageBody(BaseModel):
    """Request body for POST /api/analyze-image."""

    model_config = ConfigDict(populate_by_name=True)

    image: Optional[str] = Field(None, description="Base64 image or data URI")
    audio: Optional[str] = Field(None, description="Base64 audio recording")
    api_key: Optional[str] = Field(None, alias="apiKey")
    provider: Optional[str] = Field(None, description="gemini | openai | custom | huggingface")
    endpoint: Optional[str] = Field(None, description="Chat-completions URL (custom)")
    model: Optional[str] = Field(None, description="Model name override")
    search: Optional[bool] = Field(None, description="Audio only: return options")

    def to_analysis_request(self) -> AnalysisRequest:
        """
        Convert to the domain request.

        Raises:
            InvalidMediaError: If both image and audio are supplied
            UnsupportedProviderError: If provider is not a known name
        """
        return AnalysisRequest(
            media=MediaInput.from_payload(image=self.image, audio=self.audio),
            mode=AnalysisMode.SEARCH if self.search else AnalysisMode.DEFAULT,
            provider=ProviderKind.parse(self.provider),
            credential=self.api_key,
            endpoint=self.endpoint,
            model_override=self.model,
        )


class AnalyzeImageResponse(BaseModel):
    """Successful analysis: provider name plus the canonical result."""

    provider: str
    result: dict[str, Any]


class ClientDisconnected(Exception):
    """The caller went away before the analysis finished."""


async def _wait_for_disconnect(request: Request) -> None:
    while not await request.is_disconnected():
        await asyncio.sleep(DISCONNECT_POLL_S)


async def run_cancellable(coro: Any, request: Request, timeout_s: float) -> Any:
    """
    Await ``coro`` under a deadline, cancelling it if the client disconnects.

    Raises:
        ProviderTimeoutError: If ``timeout_s`` expires first
        ClientDisconnected: If the client disconnects first
    """
    work = asyncio.ensure_future(asyncio.wait_for(coro, timeout=timeout_s))
    watcher = asyncio.ensure_future(_wait_for_disconnect(request))
    try:
        await asyncio.wait({work, watcher}, return_when=asyncio.FIRST_COMPLETED)
    except asyncio.CancelledError:
        work.cancel()
        raise
    finally:
        watcher.cancel()

    if not work.done():
        work.cancel()
        raise ClientDisconnected()
    try:
        return work.result()
    except asyncio.TimeoutError as exc:
        raise ProviderTimeoutError(
            f"Analysis did not complete within {timeout_s:g} seconds."
        ) from exc


@router.post(
    "/analyze-image",
    response_model=AnalyzeImageResponse,
    responses={
        400: {"description": "Invalid request or missing credential"},
        422: {"description": "No food identified"},
        502: {"description": "Provider failure"},
        504: {"description": "Analysis timed out"},
    },
)
async def analyze_image(body: AnalyzeImageBody, request: Request) -> Response:
    """
    Analyze a meal image (or audio description).

    Returns:
        200 {"provider": str, "result": {"items": [...], "confidence": x}}
        or, in audio search mode, {"result": {"options": [...]}}
    """
    orchestrator = request.app.state.orchestrator
    settings = request.app.state.settings

    try:
        analysis_request = body.to_analysis_request()
        result = await run_cancellable(
            orchestrator.analyze(analysis_request),
            request,
            settings.request_timeout_s,
        )
    except DomainError as exc:
        return domain_error_response(exc, provider=body.provider)
    except ClientDisconnected:
        logger.info("analysis.cancelled", reason="client_disconnected")
        return Response(status_code=CLIENT_CLOSED_REQUEST)
    except Exception as exc:
        return internal_error_response(exc)

    return JSONResponse(
        content={"provider": result.provider, "result": result.to_payload()}
    )
