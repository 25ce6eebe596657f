"""App entrypoints."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from fastapi import FastAPI
from loguru import logger
from starlette.middleware import Middleware
from starlette_context.middleware import ContextMiddleware
from starlette_context.plugins.correlation_id import CorrelationIdPlugin

from src.containers.containers import AppContainer, init_app_container
from src.handlers.exception_handlers import handle_unexpected_exception
from src.metrics.asgi_metrics import metrics_endpoint
from src.middleware.metrics import PrometheusMiddleware
from src.middleware.process_time import ProcessTimeMiddleware
from src.routes import health_endpoints, webhook_endpoints
from src.routes.routers import status_check_bp, webhook_router
from src.settings import Settings
from telegram_bot.notifications import run_notice_dispatch

DISPATCH_JOB_ID: str = "notice_dispatch"


async def run_scheduled_dispatch(container: AppContainer) -> None:
    """Run one notice dispatch cycle with a fresh dispatcher.

    Args:
        container: The dependency injection container.
    """
    delivered = await run_notice_dispatch(container.notice_dispatcher())
    logger.info(f"Scheduled dispatch finished, {delivered} notices delivered.")


def create_scheduler(container: AppContainer, config: Settings) -> AsyncIOScheduler:
    """Create the scheduler that triggers the notice dispatcher.

    Args:
        container: The dependency injection container.
        config: The configuration.

    Returns:
        AsyncIOScheduler: A scheduler with the dispatch job registered, not started.
    """
    scheduler = AsyncIOScheduler(timezone=config.scheduler_timezone)
    scheduler.add_job(
        run_scheduled_dispatch,
        "interval",
        minutes=config.dispatch_interval_minutes,
        id=DISPATCH_JOB_ID,
        replace_existing=True,
        coalesce=True,
        max_instances=1,
        args=[container],
    )
    return scheduler


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Lifespan context manager for the application."""
    container: AppContainer = app.container  # type: ignore[attr-defined]
    config: Settings = app.state.settings

    await container.messenger().start()

    scheduler = create_scheduler(container, config)
    scheduler.start()
    next_run = scheduler.get_job(DISPATCH_JOB_ID).next_run_time
    logger.info(f"Scheduler started with timezone {config.scheduler_timezone}. Next dispatch: {next_run}")

    yield

    scheduler.shutdown(wait=False)
    await container.messenger().close()
    logger.info("Notice bot stopped.")


def create_app(config: Settings | None = None) -> FastAPI:
    """Create a FastAPI instance with configured routes and middleware.

    Args:
        config: The configuration, read from the environment when omitted.

    Returns:
        FastAPI: An instance of the FastAPI application.
    """
    config = config or Settings()  # type: ignore[call-arg]
    container = init_app_container([health_endpoints, webhook_endpoints], config)

    middleware = [
        Middleware(ContextMiddleware, plugins=(CorrelationIdPlugin(),)),
        Middleware(ProcessTimeMiddleware),
        Middleware(PrometheusMiddleware, filter_unhandled_paths=True),
    ]

    app: FastAPI = FastAPI(
        title=config.api_name,
        version=config.api_version,
        middleware=middleware,
        description="Ajou University notice bot for Telegram.",
        lifespan=lifespan,
    )

    app.container = container  # type: ignore[attr-defined]
    app.state.settings = config

    app.add_exception_handler(Exception, handle_unexpected_exception)

    app.include_router(webhook_router, prefix="/api", tags=["webhook"])
    app.include_router(status_check_bp, prefix="/health", tags=["status_check"])
    app.add_route("/metrics", metrics_endpoint)
    return app
