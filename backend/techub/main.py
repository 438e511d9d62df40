import asyncio
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from techub.alerts.router import router as alerts_router
from techub.auth.router import router as auth_router
from techub.backlog.router import router as backlog_router
from techub.config import settings
from techub.fleet.router import router as fleet_router
from techub.middleware.error_handler import ErrorHandlerMiddleware
from techub.middleware.logging import RequestLoggingMiddleware
from techub.presentation.router import router as presentation_router
from techub.sla.router import router as sla_router
from techub.users.router import router as users_router

structlog.configure(
    processors=[
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.dev.ConsoleRenderer(),
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    logger_factory=structlog.PrintLoggerFactory(),
)

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    from techub.sla.scheduler import sla_refresh_loop

    tasks = []
    if settings.SLA_REFRESH_ENABLED:
        tasks.append(asyncio.create_task(sla_refresh_loop()))
    else:
        logger.info("sla_refresh_disabled")
    yield
    for task in tasks:
        task.cancel()
    for task in tasks:
        try:
            await task
        except asyncio.CancelledError:
            pass


def create_app() -> FastAPI:
    app = FastAPI(
        title="TECHUB Monitor",
        version="0.1.0",
        docs_url="/docs",
        lifespan=lifespan,
    )

    cors_origins = [o.strip() for o in settings.CORS_ORIGINS.split(",") if o.strip()]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(ErrorHandlerMiddleware)

    app.include_router(auth_router, prefix="/api/v1")
    app.include_router(users_router, prefix="/api/v1")
    app.include_router(alerts_router, prefix="/api/v1")
    app.include_router(backlog_router, prefix="/api/v1")
    app.include_router(sla_router, prefix="/api/v1")
    app.include_router(fleet_router, prefix="/api/v1")
    app.include_router(presentation_router, prefix="/api/v1")

    @app.get("/health")
    async def health():
        return {"status": "ok"}

    return app


app = create_app()
