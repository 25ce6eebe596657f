"""Health endpoints."""

import asyncio
import sqlite3

from dependency_injector.wiring import Provide, inject
from fastapi import Depends
from fastapi.responses import JSONResponse
from loguru import logger

from src.containers.containers import AppContainer
from src.routes.routers import status_check_bp
from telegram_bot.subscriptions import SubscriptionStore


@status_check_bp.get("/ping")
async def ping() -> str:
    """Just a ping pong handle.

    Returns:
        str: A message indicating successful response.
    """
    return "🏓 pong!"


@status_check_bp.get("/health_checker")
@inject
async def health_checker(
    store: SubscriptionStore = Depends(Provide[AppContainer.subscription_store]),  # noqa: B008
) -> JSONResponse:
    """Check that the service responds and the subscription database is readable.

    Args:
        store: Injected subscription store.

    Returns:
        JSONResponse: 200 with the subscription count, or 503 when the database fails.
    """
    loop = asyncio.get_running_loop()
    try:
        count = await loop.run_in_executor(None, store.count_subscriptions)
    except sqlite3.Error as exp:
        logger.error(f"Health check failed: {exp}")
        return JSONResponse({"status": "unavailable"}, status_code=503)
    return JSONResponse({"status": "ok", "subscriptions": count})
