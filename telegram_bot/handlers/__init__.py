"""Handlers package for the telegram bot."""

from telegram_bot.handlers.update_handler import UpdateHandler, subscriber_id

__all__ = [
    "UpdateHandler",
    "subscriber_id",
]
