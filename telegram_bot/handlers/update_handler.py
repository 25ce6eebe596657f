"""Webhook update handling for the notice bot."""

import asyncio
import sqlite3
from collections.abc import Callable
from http import HTTPStatus
from typing import TypeVar

from loguru import logger
from telegram import Message, Update

from src.metrics.bot_metrics import COMMANDS
from src.service.notice_feed import NoticeFeedClient, NoticeFeedError
from telegram_bot.formatters import format_filters
from telegram_bot.handlers.filters import (
    describe_query_params,
    find_filter_by_command,
    find_filter_by_prompt,
    set_query_param,
)
from telegram_bot.handlers.help_texts import (
    ALREADY_SUBSCRIBED_TEXT,
    ERROR_TEXT,
    FILTER_UPDATED_TEXT,
    FILTERS_HEADER_TEXT,
    FILTERS_RESET_TEXT,
    HELP_TEXT,
    NO_FILTERS_TEXT,
    NOT_SUBSCRIBED_TEXT,
    SUBSCRIBED_TEXT,
    UNSUBSCRIBED_TEXT,
    WELCOME_TEXT,
)
from telegram_bot.handlers.schemas import FilterKind
from telegram_bot.messenger import TelegramMessenger
from telegram_bot.subscriptions import SubscriptionStore

T = TypeVar("T")


def subscriber_id(message: Message) -> int:
    """Key of the subscription a message acts on: the sender, or the chat for anonymous senders."""
    return message.from_user.id if message.from_user else message.chat.id


class UpdateHandler:
    """Turn one inbound Telegram update into replies and at most one store mutation."""

    def __init__(
        self,
        store: SubscriptionStore,
        notice_feed: NoticeFeedClient,
        messenger: TelegramMessenger,
    ) -> None:
        """Initialize the update handler.

        Args:
            store: Subscription storage.
            notice_feed: Client for the upstream notice feed.
            messenger: Outbound message sender.
        """
        self.store = store
        self.notice_feed = notice_feed
        self.messenger = messenger

    @staticmethod
    async def _run_blocking(func: Callable[[], T]) -> T:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, func)

    async def handle_update(self, update: Update) -> HTTPStatus:
        """Handle a webhook update.

        Args:
            update: The parsed Telegram update.

        Returns:
            HTTPStatus.OK when handled or ignored, INTERNAL_SERVER_ERROR when the store failed.
        """
        message = update.message
        if message is None:
            return HTTPStatus.OK

        if message.reply_to_message is not None:
            return await self.handle_filter_answer(message)

        if not message.text:
            return HTTPStatus.OK

        command = message.text.strip()
        if command.startswith("/start"):
            return await self._reply(message, WELCOME_TEXT, "start")
        if command.startswith("/help"):
            return await self._reply(message, HELP_TEXT, "help")
        if command.startswith("/subscribe"):
            return await self.handle_subscribe(message)
        if command.startswith("/unsubscribe"):
            return await self.handle_unsubscribe(message)
        if command.startswith("/filters"):
            return await self.handle_filters(message)
        if command.startswith("/reset"):
            return await self.handle_reset(message)

        kind = find_filter_by_command(command)
        if kind is not None:
            return await self.handle_filter_prompt(message, kind)

        return HTTPStatus.OK

    async def _reply(self, message: Message, text: str, command: str) -> HTTPStatus:
        COMMANDS.labels(command=command).inc()
        await self.messenger.send_message(message.chat.id, text)
        return HTTPStatus.OK

    async def _fail(self, message: Message, command: str, exp: Exception) -> HTTPStatus:
        logger.bind(chat_id=subscriber_id(message)).error(f"Error handling {command}: {exp}")
        await self.messenger.send_message(message.chat.id, ERROR_TEXT)
        return HTTPStatus.INTERNAL_SERVER_ERROR

    async def handle_subscribe(self, message: Message) -> HTTPStatus:
        """Handle the /subscribe command.

        The watermark starts at the newest notice so only notices published afterwards are sent.

        Args:
            message: The inbound message.

        Returns:
            The acknowledgement status.
        """
        COMMANDS.labels(command="subscribe").inc()
        chat_id = subscriber_id(message)
        try:
            existing = await self._run_blocking(lambda: self.store.get_subscription(chat_id))
            if existing is not None:
                await self.messenger.send_message(message.chat.id, ALREADY_SUBSCRIBED_TEXT)
                return HTTPStatus.OK

            latest_id = await self._run_blocking(self.notice_feed.fetch_latest_id)
            await self._run_blocking(lambda: self.store.add_subscription(chat_id, latest_id))
        except (sqlite3.Error, NoticeFeedError) as exp:
            return await self._fail(message, "/subscribe", exp)

        logger.bind(chat_id=chat_id).info(f"Subscribed with watermark {latest_id}")
        await self.messenger.send_message(message.chat.id, SUBSCRIBED_TEXT)
        return HTTPStatus.OK

    async def handle_unsubscribe(self, message: Message) -> HTTPStatus:
        """Handle the /unsubscribe command.

        Args:
            message: The inbound message.

        Returns:
            The acknowledgement status.
        """
        COMMANDS.labels(command="unsubscribe").inc()
        chat_id = subscriber_id(message)
        try:
            deleted = await self._run_blocking(lambda: self.store.delete_subscription(chat_id))
        except sqlite3.Error as exp:
            return await self._fail(message, "/unsubscribe", exp)

        if not deleted:
            await self.messenger.send_message(message.chat.id, NOT_SUBSCRIBED_TEXT)
            return HTTPStatus.OK

        logger.bind(chat_id=chat_id).info("Unsubscribed")
        await self.messenger.send_message(message.chat.id, UNSUBSCRIBED_TEXT)
        return HTTPStatus.OK

    async def handle_filter_prompt(self, message: Message, kind: FilterKind) -> HTTPStatus:
        """Ask the user for a filter value with a forced reply.

        Args:
            message: The inbound message.
            kind: The filter being set.

        Returns:
            The acknowledgement status.
        """
        COMMANDS.labels(command=kind.param).inc()
        await self.messenger.send_message(message.chat.id, kind.prompt, force_reply=True)
        return HTTPStatus.OK

    async def handle_filter_answer(self, message: Message) -> HTTPStatus:
        """Store the answer to a filter prompt.

        Replies to anything other than a filter prompt are ignored.

        Args:
            message: The inbound message replying to an earlier bot message.

        Returns:
            The acknowledgement status.
        """
        question = (message.reply_to_message.text or "").strip()
        if message.text is None:
            return HTTPStatus.OK
        kind = find_filter_by_prompt(question)
        if kind is None:
            return HTTPStatus.OK

        COMMANDS.labels(command=f"{kind.param}_answer").inc()
        chat_id = subscriber_id(message)
        answer = message.text.strip()
        try:
            subscription = await self._run_blocking(lambda: self.store.get_subscription(chat_id))
            if subscription is None:
                await self.messenger.send_message(message.chat.id, NOT_SUBSCRIBED_TEXT)
                return HTTPStatus.OK

            query_params = set_query_param(subscription.query_params, kind.param, answer)
            await self._run_blocking(lambda: self.store.update_query_params(chat_id, query_params))
        except sqlite3.Error as exp:
            return await self._fail(message, f"{kind.param} answer", exp)

        logger.bind(chat_id=chat_id).info(f"Filters changed to {query_params!r}")
        await self.messenger.send_message(message.chat.id, FILTER_UPDATED_TEXT)
        return HTTPStatus.OK

    async def handle_filters(self, message: Message) -> HTTPStatus:
        """Handle the /filters command, listing the stored filters.

        Args:
            message: The inbound message.

        Returns:
            The acknowledgement status.
        """
        COMMANDS.labels(command="filters").inc()
        chat_id = subscriber_id(message)
        try:
            subscription = await self._run_blocking(lambda: self.store.get_subscription(chat_id))
        except sqlite3.Error as exp:
            return await self._fail(message, "/filters", exp)

        if subscription is None:
            text = NOT_SUBSCRIBED_TEXT
        elif lines := describe_query_params(subscription.query_params):
            text = format_filters(FILTERS_HEADER_TEXT, lines)
        else:
            text = NO_FILTERS_TEXT
        await self.messenger.send_message(message.chat.id, text)
        return HTTPStatus.OK

    async def handle_reset(self, message: Message) -> HTTPStatus:
        """Handle the /reset command, dropping every filter.

        Args:
            message: The inbound message.

        Returns:
            The acknowledgement status.
        """
        COMMANDS.labels(command="reset").inc()
        chat_id = subscriber_id(message)
        try:
            updated = await self._run_blocking(lambda: self.store.update_query_params(chat_id, ""))
        except sqlite3.Error as exp:
            return await self._fail(message, "/reset", exp)

        await self.messenger.send_message(message.chat.id, FILTERS_RESET_TEXT if updated else NOT_SUBSCRIBED_TEXT)
        return HTTPStatus.OK
