"""Exception handlers."""

from typing import Any

from fastapi import Request
from fastapi.responses import JSONResponse
from loguru import logger


async def handle_unexpected_exception(request: Request, exception: Exception, **_: Any) -> JSONResponse:
    """Handle unexpected exceptions.

    The traceback goes to the log only; Telegram just needs a status code.

    Args:
        request (Request): The request object.
        exception (Exception): The exception object.

    Returns:
        JSONResponse: The JSON response.
    """
    logger.opt(exception=exception).error(f"Unhandled exception on {request.method} {request.url.path}")
    return JSONResponse(
        content={
            "error": "error.unexpected",
            "detail": {"exception": {"class": exception.__class__.__name__}},
        },
        status_code=500,
    )
