"""Telegram webhook endpoints."""

from http import HTTPStatus

from dependency_injector.wiring import Provide, inject
from fastapi import Depends, Request
from fastapi.responses import PlainTextResponse, Response
from loguru import logger
from telegram import Bot, Update

from src.containers.containers import AppContainer
from src.routes.routers import webhook_router
from telegram_bot.handlers.update_handler import UpdateHandler
from telegram_bot.messenger import TelegramMessenger

CORS_HEADERS: dict[str, str] = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "POST",
    "Access-Control-Allow-Headers": "Content-Type",
    "Access-Control-Max-Age": "86400",
}

OTHER_METHODS: list[str] = ["GET", "HEAD", "PUT", "PATCH", "DELETE"]


def parse_update(payload: object, bot: Bot) -> Update | None:
    """Build a Telegram update from a decoded webhook body.

    Args:
        payload: The decoded JSON body.
        bot: Bot the update objects are bound to.

    Returns:
        The update, or None when the body is not a valid update object.
    """
    if not isinstance(payload, dict):
        logger.warning(f"Ignoring webhook body of type {type(payload).__name__}")
        return None
    try:
        return Update.de_json(payload, bot)
    except (TypeError, KeyError, ValueError) as exp:
        logger.warning(f"Ignoring malformed update: {exp}")
        return None


@webhook_router.post("/webhook")
@inject
async def receive_update(
    request: Request,
    handler: UpdateHandler = Depends(Provide[AppContainer.update_handler]),  # noqa: B008
    messenger: TelegramMessenger = Depends(Provide[AppContainer.messenger]),  # noqa: B008
) -> PlainTextResponse:
    """Receive a Telegram update and act on the message it carries.

    Payloads that are not valid JSON or not an update are acknowledged and dropped,
    so Telegram does not redeliver them.

    Args:
        request: The incoming request.
        handler: Injected update handler.
        messenger: Injected messenger, whose bot the parsed update is bound to.

    Returns:
        PlainTextResponse: `OK`, or 500 when a subscription could not be stored.
    """
    try:
        payload = await request.json()
    except ValueError as exp:
        logger.warning(f"Ignoring non-JSON webhook body: {exp}")
        return PlainTextResponse("OK")

    update = parse_update(payload, messenger.bot)
    if update is None:
        return PlainTextResponse("OK")

    status = await handler.handle_update(update)
    if status is HTTPStatus.OK:
        return PlainTextResponse("OK")
    return PlainTextResponse(status.phrase, status_code=status.value)


@webhook_router.options("/webhook")
async def preflight() -> Response:
    """Answer a CORS preflight request.

    Returns:
        Response: Empty response with permissive CORS headers.
    """
    return Response(content="", headers=CORS_HEADERS)


@webhook_router.api_route("/webhook", methods=OTHER_METHODS, include_in_schema=False)
async def method_not_allowed() -> PlainTextResponse:
    """Reject every method the webhook does not serve.

    Returns:
        PlainTextResponse: 405 with `Allow: POST`.
    """
    return PlainTextResponse("Method Not Allowed", status_code=405, headers={"Allow": "POST"})
