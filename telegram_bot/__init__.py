"""Telegram bot module for university notice alerts."""

from telegram_bot.messenger import TelegramMessenger
from telegram_bot.notifications import NoticeDispatcher, run_notice_dispatch
from telegram_bot.subscriptions import Subscription, SubscriptionStore

__all__ = [
    "NoticeDispatcher",
    "Subscription",
    "SubscriptionStore",
    "TelegramMessenger",
    "run_notice_dispatch",
]
