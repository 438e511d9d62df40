import structlog
from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

logger = structlog.get_logger()

INTERNAL_ERROR_MESSAGE = "Erro interno do servidor"


class ErrorHandlerMiddleware(BaseHTTPMiddleware):
    """Turn anything a route failed to handle into a generic 500 body."""

    async def dispatch(self, request: Request, call_next):
        try:
            return await call_next(request)
        except Exception as exc:
            logger.exception(
                "unhandled_error",
                method=request.method,
                path=request.url.path,
                error_type=type(exc).__name__,
            )
            return JSONResponse(status_code=500, content={"detail": INTERNAL_ERROR_MESSAGE})
