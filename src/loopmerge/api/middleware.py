"""Error handling middleware."""

import logging

from fastapi import Request
from fastapi.responses import JSONResponse

from loopmerge.models.errors import ErrorResponse, LoopMergeError, NotFoundError, ValidationError

logger = logging.getLogger(__name__)


async def loopmerge_error_handler(request: Request, exc: LoopMergeError) -> JSONResponse:
    """Handle LoopMergeError exceptions."""
    status_code = _get_status_code(exc)
    if status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    response = ErrorResponse.from_exception(exc, summary=_get_summary(exc))
    return JSONResponse(status_code=status_code, content=response.model_dump())


def _get_status_code(exc: LoopMergeError) -> int:
    """Map error type to HTTP status code."""
    if isinstance(exc, ValidationError):
        return 400
    elif isinstance(exc, NotFoundError):
        return 404
    return 500


def _get_summary(exc: LoopMergeError) -> str:
    """Prefix for the client-facing message of server-side failures."""
    if isinstance(exc, (ValidationError, NotFoundError)):
        return ""
    return "Error processing files"
