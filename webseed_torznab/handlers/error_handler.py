# webseed_torznab/handlers/error_handler.py

from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from ..config import logger


async def http_error_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    """Renders expected HTTP errors (404, 400, ...) in the API's JSON shape."""
    return JSONResponse(
        status_code=exc.status_code,
        content={"status": "error", "message": exc.detail},
        headers=getattr(exc, "headers", None),
    )


async def global_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Catches all unhandled exceptions and logs them with the full traceback.
    The client only gets a generic message without technical details.
    """
    logger.error(
        f"An unhandled exception occurred while handling "
        f"{request.method} {request.url.path}:",
        exc_info=exc,
    )
    return JSONResponse(
        status_code=500,
        content={
            "status": "error",
            "message": "An unexpected error occurred. The issue has been logged for review.",
        },
    )
