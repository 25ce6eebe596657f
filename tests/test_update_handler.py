"""Unit tests for the webhook update handler."""
# ruff: noqa: S101, PLR2004

import asyncio
import sqlite3
from http import HTTPStatus
from unittest.mock import Mock

import pytest
from telegram import Update

from src.service.notice_feed import NoticeFeedError
from telegram_bot.handlers.filters import FILTER_KINDS
from telegram_bot.handlers.help_texts import (
    ALREADY_SUBSCRIBED_TEXT,
    ERROR_TEXT,
    FILTER_UPDATED_TEXT,
    FILTERS_RESET_TEXT,
    HELP_TEXT,
    NO_FILTERS_TEXT,
    NOT_SUBSCRIBED_TEXT,
    SUBSCRIBED_TEXT,
    UNSUBSCRIBED_TEXT,
    WELCOME_TEXT,
)
from telegram_bot.handlers.update_handler import UpdateHandler
from telegram_bot.subscriptions import Subscription, SubscriptionStore
from tests.conftest import make_update, sent_texts

CATEGORY, DEPARTMENT, KEYWORD = FILTER_KINDS


@pytest.fixture
def handler(store: SubscriptionStore, mock_feed: Mock, mock_messenger: Mock) -> UpdateHandler:
    """Create an update handler with a real store and mocked network collaborators."""
    return UpdateHandler(store=store, notice_feed=mock_feed, messenger=mock_messenger)


def handle(handler: UpdateHandler, text: str | None, **kwargs: object) -> HTTPStatus:
    """Run the handler on a freshly built update."""
    update = Update.de_json(make_update(text, **kwargs), handler.messenger.bot)
    return asyncio.run(handler.handle_update(update))


# =============================================================================
# Plain Command Tests
# =============================================================================


class TestStartAndUnknown:
    """Tests for /start, unknown commands and empty updates."""

    def test_start(self, handler: UpdateHandler, mock_messenger: Mock) -> None:
        """/start sends the welcome text to the chat."""
        assert handle(handler, "  /start  ") is HTTPStatus.OK
        mock_messenger.send_message.assert_awaited_once_with(1001, WELCOME_TEXT)

    def test_help(self, handler: UpdateHandler, mock_messenger: Mock) -> None:
        """/help lists the commands."""
        assert handle(handler, "/help") is HTTPStatus.OK
        mock_messenger.send_message.assert_awaited_once_with(1001, HELP_TEXT)

    def test_unknown_command_is_silent(self, handler: UpdateHandler, mock_messenger: Mock) -> None:
        """Unrecognized text gets no reply but is acknowledged."""
        assert handle(handler, "hello there") is HTTPStatus.OK
        mock_messenger.send_message.assert_not_awaited()

    def test_message_without_text(self, handler: UpdateHandler, mock_messenger: Mock) -> None:
        """Stickers and photos carry no text and are ignored."""
        assert handle(handler, None) is HTTPStatus.OK
        mock_messenger.send_message.assert_not_awaited()

    def test_update_without_message(self, handler: UpdateHandler, mock_messenger: Mock) -> None:
        """Updates without a message are acknowledged."""
        status = asyncio.run(handler.handle_update(Update(update_id=5)))
        assert status is HTTPStatus.OK
        mock_messenger.send_message.assert_not_awaited()


class TestSubscribe:
    """Tests for /subscribe."""

    def test_subscribe_creates_record_at_newest_notice(
        self,
        handler: UpdateHandler,
        store: SubscriptionStore,
        mock_feed: Mock,
        mock_messenger: Mock,
    ) -> None:
        """The watermark starts at the newest notice and filters are empty."""
        mock_feed.fetch_latest_id.return_value = 321

        assert handle(handler, "/subscribe") is HTTPStatus.OK

        assert store.get_subscription(1001) == Subscription(chat_id=1001, latest_id=321, query_params="")
        mock_feed.fetch_latest_id.assert_called_once_with()
        assert sent_texts(mock_messenger) == [SUBSCRIBED_TEXT]

    def test_subscribe_empty_feed(self, handler: UpdateHandler, store: SubscriptionStore) -> None:
        """An empty feed gives watermark 0."""
        handle(handler, "/subscribe")
        assert store.get_subscription(1001).latest_id == 0

    def test_subscribe_twice(
        self,
        handler: UpdateHandler,
        store: SubscriptionStore,
        mock_feed: Mock,
        mock_messenger: Mock,
    ) -> None:
        """A second /subscribe replies already-subscribed and touches nothing."""
        store.add_subscription(1001, 7, "category=A")

        assert handle(handler, "/subscribe") is HTTPStatus.OK

        assert store.get_all_subscriptions() == [Subscription(1001, 7, "category=A")]
        mock_feed.fetch_latest_id.assert_not_called()
        assert sent_texts(mock_messenger) == [ALREADY_SUBSCRIBED_TEXT]

    def test_feed_failure_leaves_no_record(
        self,
        handler: UpdateHandler,
        store: SubscriptionStore,
        mock_feed: Mock,
        mock_messenger: Mock,
    ) -> None:
        """A failing feed replies with the error text and reports 500."""
        mock_feed.fetch_latest_id.side_effect = NoticeFeedError("down")

        assert handle(handler, "/subscribe") is HTTPStatus.INTERNAL_SERVER_ERROR

        assert store.get_subscription(1001) is None
        assert sent_texts(mock_messenger) == [ERROR_TEXT]

    def test_store_failure(self, mock_feed: Mock, mock_messenger: Mock) -> None:
        """A failing insert replies with the error text and reports 500."""
        broken_store = Mock(spec=SubscriptionStore)
        broken_store.get_subscription.return_value = None
        broken_store.add_subscription.side_effect = sqlite3.OperationalError("database is locked")
        handler = UpdateHandler(store=broken_store, notice_feed=mock_feed, messenger=mock_messenger)

        assert handle(handler, "/subscribe") is HTTPStatus.INTERNAL_SERVER_ERROR
        assert sent_texts(mock_messenger) == [ERROR_TEXT]

    def test_keyed_by_sender(self, handler: UpdateHandler, store: SubscriptionStore) -> None:
        """Different senders get independent subscriptions."""
        handle(handler, "/subscribe", chat_id=1)
        handle(handler, "/subscribe", chat_id=2)
        assert [sub.chat_id for sub in store.get_all_subscriptions()] == [1, 2]

    def test_group_message_keyed_by_sender(
        self,
        handler: UpdateHandler,
        store: SubscriptionStore,
        mock_messenger: Mock,
    ) -> None:
        """In a group the sender owns the subscription while the reply goes to the group."""
        payload = make_update("/subscribe", chat_id=7)
        payload["message"]["chat"] = {"id": -100500, "type": "group", "title": "Ajou"}

        status = asyncio.run(handler.handle_update(Update.de_json(payload, handler.messenger.bot)))

        assert status is HTTPStatus.OK
        assert store.get_subscription(7) is not None
        assert store.get_subscription(-100500) is None
        mock_messenger.send_message.assert_awaited_once_with(-100500, SUBSCRIBED_TEXT)

    def test_anonymous_sender_keyed_by_chat(self, handler: UpdateHandler, store: SubscriptionStore) -> None:
        """Messages without a sender fall back to the chat id."""
        payload = make_update("/subscribe", chat_id=7)
        del payload["message"]["from"]

        asyncio.run(handler.handle_update(Update.de_json(payload, handler.messenger.bot)))

        assert store.get_subscription(7) is not None


class TestUnsubscribe:
    """Tests for /unsubscribe."""

    def test_unsubscribe(self, handler: UpdateHandler, store: SubscriptionStore, mock_messenger: Mock) -> None:
        """An existing subscription is deleted."""
        store.add_subscription(1001, 3)

        assert handle(handler, "/unsubscribe") is HTTPStatus.OK

        assert store.get_subscription(1001) is None
        assert sent_texts(mock_messenger) == [UNSUBSCRIBED_TEXT]

    def test_unsubscribe_when_not_subscribed(
        self,
        handler: UpdateHandler,
        store: SubscriptionStore,
        mock_messenger: Mock,
    ) -> None:
        """Nothing to delete replies not-subscribed and leaves other chats alone."""
        store.add_subscription(2002, 3)

        assert handle(handler, "/unsubscribe") is HTTPStatus.OK

        assert store.get_subscription(2002) is not None
        assert sent_texts(mock_messenger) == [NOT_SUBSCRIBED_TEXT]

    def test_store_failure(self, mock_feed: Mock, mock_messenger: Mock) -> None:
        """A failing delete replies with the error text and reports 500."""
        broken_store = Mock(spec=SubscriptionStore)
        broken_store.delete_subscription.side_effect = sqlite3.OperationalError("disk I/O error")
        handler = UpdateHandler(store=broken_store, notice_feed=mock_feed, messenger=mock_messenger)

        assert handle(handler, "/unsubscribe") is HTTPStatus.INTERNAL_SERVER_ERROR
        assert sent_texts(mock_messenger) == [ERROR_TEXT]


# =============================================================================
# Filter Tests
# =============================================================================


class TestFilterPrompts:
    """Tests for /category, /department and /keyword."""

    @pytest.mark.parametrize("kind", FILTER_KINDS, ids=lambda kind: kind.param)
    def test_prompt_forces_reply(self, handler: UpdateHandler, mock_messenger: Mock, kind: object) -> None:
        """Each filter command asks for an answer with a forced reply."""
        assert handle(handler, kind.command) is HTTPStatus.OK
        mock_messenger.send_message.assert_awaited_once_with(1001, kind.prompt, force_reply=True)


class TestFilterAnswers:
    """Tests for replies to filter prompts."""

    def test_answer_adds_key_and_keeps_others(
        self,
        handler: UpdateHandler,
        store: SubscriptionStore,
        mock_messenger: Mock,
    ) -> None:
        """A department answer is added next to an existing category filter."""
        store.add_subscription(1001, 0, "category=A")

        assert handle(handler, " B ", reply_to_text=DEPARTMENT.prompt) is HTTPStatus.OK

        assert store.get_subscription(1001).query_params == "category=A&department=B"
        assert sent_texts(mock_messenger) == [FILTER_UPDATED_TEXT]

    def test_keyword_answer_sets_search(self, handler: UpdateHandler, store: SubscriptionStore) -> None:
        """The keyword prompt writes the `search` key."""
        store.add_subscription(1001, 0)
        handle(handler, "scholarship", reply_to_text=KEYWORD.prompt)
        assert store.get_subscription(1001).query_params == "search=scholarship"

    def test_answer_overwrites_same_key(self, handler: UpdateHandler, store: SubscriptionStore) -> None:
        """Answering the same prompt again replaces the value."""
        store.add_subscription(1001, 0, "category=A&search=x")
        handle(handler, "C", reply_to_text=CATEGORY.prompt)
        assert store.get_subscription(1001).query_params == "category=C&search=x"

    def test_answer_without_subscription(
        self,
        handler: UpdateHandler,
        store: SubscriptionStore,
        mock_messenger: Mock,
    ) -> None:
        """Answers from unsubscribed chats reply not-subscribed and store nothing."""
        assert handle(handler, "A", reply_to_text=CATEGORY.prompt) is HTTPStatus.OK
        assert store.get_subscription(1001) is None
        assert sent_texts(mock_messenger) == [NOT_SUBSCRIBED_TEXT]

    def test_reply_to_other_message_ignored(
        self,
        handler: UpdateHandler,
        store: SubscriptionStore,
        mock_messenger: Mock,
    ) -> None:
        """Replies to non-prompt messages change nothing, even if they look like commands."""
        store.add_subscription(1001, 0, "category=A")

        assert handle(handler, "/unsubscribe", reply_to_text="Notice 5\nhttps://x") is HTTPStatus.OK

        assert store.get_subscription(1001).query_params == "category=A"
        mock_messenger.send_message.assert_not_awaited()

    def test_store_failure(self, mock_feed: Mock, mock_messenger: Mock) -> None:
        """A failing filter update replies with the error text and reports 500."""
        broken_store = Mock(spec=SubscriptionStore)
        broken_store.get_subscription.return_value = Subscription(1001, 0, "")
        broken_store.update_query_params.side_effect = sqlite3.OperationalError("readonly database")
        handler = UpdateHandler(store=broken_store, notice_feed=mock_feed, messenger=mock_messenger)

        status = handle(handler, "A", reply_to_text=CATEGORY.prompt)

        assert status is HTTPStatus.INTERNAL_SERVER_ERROR
        assert sent_texts(mock_messenger) == [ERROR_TEXT]


class TestFiltersAndReset:
    """Tests for /filters and /reset."""

    def test_filters_lists_current(self, handler: UpdateHandler, store: SubscriptionStore, mock_messenger: Mock) -> None:
        """Stored filters are listed with their labels."""
        store.add_subscription(1001, 0, "category=A&department=B")
        handle(handler, "/filters")
        text = sent_texts(mock_messenger)[0]
        assert "• 카테고리: A" in text
        assert "• 공지부서: B" in text

    def test_filters_empty(self, handler: UpdateHandler, store: SubscriptionStore, mock_messenger: Mock) -> None:
        """No stored filters says so."""
        store.add_subscription(1001, 0)
        handle(handler, "/filters")
        assert sent_texts(mock_messenger) == [NO_FILTERS_TEXT]

    def test_filters_not_subscribed(self, handler: UpdateHandler, mock_messenger: Mock) -> None:
        """Unsubscribed chats are told so."""
        handle(handler, "/filters")
        assert sent_texts(mock_messenger) == [NOT_SUBSCRIBED_TEXT]

    def test_reset(self, handler: UpdateHandler, store: SubscriptionStore, mock_messenger: Mock) -> None:
        """/reset clears all filters but keeps the watermark."""
        store.add_subscription(1001, 9, "category=A&search=x")
        assert handle(handler, "/reset") is HTTPStatus.OK
        assert store.get_subscription(1001) == Subscription(1001, 9, "")
        assert sent_texts(mock_messenger) == [FILTERS_RESET_TEXT]

    def test_reset_not_subscribed(self, handler: UpdateHandler, mock_messenger: Mock) -> None:
        """Resetting without a subscription replies not-subscribed."""
        handle(handler, "/reset")
        assert sent_texts(mock_messenger) == [NOT_SUBSCRIBED_TEXT]
