"""Pytest configuration, environment setup, and shared fixtures.

This module sets required environment variables for settings initialization
and provides shared fixtures for all test modules.
"""

import os
from collections.abc import Generator
from contextlib import contextmanager
from pathlib import Path
from typing import Any
from unittest.mock import AsyncMock, Mock

import pytest
from dependency_injector import providers
from telegram import Bot


def _set_required_envs() -> None:
    """Set required environment variables for tests."""
    os.environ.setdefault("NOTICE_BOT_TELEGRAM_TOKEN", "123456:test-telegram-token")


# Metric names are read from the settings at import time.
_set_required_envs()

from src.service.notice_feed import NoticeFeedClient  # noqa: E402
from src.settings import Settings  # noqa: E402
from src.utils.schemas import Notice  # noqa: E402
from telegram_bot.messenger import TelegramMessenger  # noqa: E402
from telegram_bot.subscriptions import SubscriptionStore  # noqa: E402


# =============================================================================
# Provider Override Helper
# =============================================================================


@contextmanager
def override_providers(*overrides: tuple[providers.Provider, object]) -> Generator[None, None, None]:
    """Temporarily override dependency-injector providers.

    Args:
        *overrides: Tuples of (provider, value) to inject.
    """
    try:
        for provider, value in overrides:
            provider.override(providers.Object(value))
        yield
    finally:
        for provider, _ in overrides:
            provider.reset_override()


# =============================================================================
# Payload Helpers
# =============================================================================


def make_notice(notice_id: int, **fields: Any) -> Notice:
    """Build a notice with predictable title and URL."""
    return Notice(
        id=notice_id,
        title=fields.pop("title", f"Notice {notice_id}"),
        url=fields.pop("url", f"https://www.ajou.ac.kr/notice/{notice_id}"),
        **fields,
    )


def make_update(
    text: str | None,
    *,
    chat_id: int = 1001,
    reply_to_text: str | None = None,
    update_id: int = 1,
) -> dict[str, Any]:
    """Build a Telegram update payload for a private chat message."""
    message: dict[str, Any] = {
        "message_id": 10,
        "date": 1_700_000_000,
        "from": {"id": chat_id, "is_bot": False, "first_name": "Student", "username": "student"},
        "chat": {"id": chat_id, "type": "private", "username": "student"},
    }
    if text is not None:
        message["text"] = text
    if reply_to_text is not None:
        message["reply_to_message"] = {
            "message_id": 9,
            "date": 1_699_999_990,
            "from": {"id": 42, "is_bot": True, "first_name": "NoticeBot"},
            "chat": {"id": chat_id, "type": "private"},
            "text": reply_to_text,
        }
    return {"update_id": update_id, "message": message}


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def test_settings(tmp_path: Path) -> Settings:
    """Create settings pointing at a temporary database."""
    return Settings(
        telegram_token="123456:test-telegram-token",
        subscriptions_db_path=str(tmp_path / "subscriptions.db"),
        notice_feed_url="https://notices.example.com",
        dispatch_interval_minutes=5,
    )


@pytest.fixture
def store(tmp_path: Path) -> SubscriptionStore:
    """Create a subscription store backed by a temporary SQLite file."""
    return SubscriptionStore(str(tmp_path / "subscriptions.db"))


@pytest.fixture
def mock_feed() -> Mock:
    """Create a mock NoticeFeedClient returning an empty feed."""
    feed = Mock(spec=NoticeFeedClient)
    feed.fetch_notices.return_value = []
    feed.fetch_latest_id.return_value = 0
    return feed


@pytest.fixture
def mock_messenger() -> Mock:
    """Create a mock TelegramMessenger whose sends always succeed."""
    messenger = Mock(spec=TelegramMessenger)
    messenger.bot = Bot(token="123456:test-telegram-token")
    messenger.send_message = AsyncMock(return_value=True)
    return messenger


def sent_texts(messenger: Mock) -> list[str]:
    """Return the texts passed to messenger.send_message, in call order."""
    return [call.args[1] for call in messenger.send_message.await_args_list]
