import logging

from fastapi import Request
from fastapi.responses import JSONResponse

from phone_lookup.exceptions import PostNotFoundError, ProviderError, ValidationError

logger = logging.getLogger(__name__)


def validation_error_handler(request: Request, exc: ValidationError) -> JSONResponse:
    return JSONResponse(status_code=400, content={"detail": str(exc)})


def provider_error_handler(request: Request, exc: ProviderError) -> JSONResponse:
    logger.warning("Lookup provider error (%s): %s", exc.kind.value, exc.detail)
    return JSONResponse(status_code=exc.status, content={"detail": exc.detail})


def post_not_found_handler(request: Request, exc: PostNotFoundError) -> JSONResponse:
    return JSONResponse(status_code=404, content={"detail": str(exc)})


async def exception_middleware(request: Request, call_next):
    try:
        return await call_next(request)
    except Exception:
        logger.exception("Unhandled exception for %s %s", request.method, request.url.path)
        return JSONResponse(status_code=500, content={"detail": "Internal server error"})
