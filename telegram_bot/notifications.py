"""Notice dispatcher that pushes new notices to subscribers."""

import asyncio
from collections.abc import Callable
from typing import TypeVar

from loguru import logger

from src.metrics.bot_metrics import DISPATCH_FAILURES, NOTICES_DELIVERED
from src.service.notice_feed import NoticeFeedClient
from src.utils.schemas import Notice
from telegram_bot.formatters import format_notice
from telegram_bot.messenger import TelegramMessenger
from telegram_bot.subscriptions import Subscription, SubscriptionStore

T = TypeVar("T")


def select_new_notices(notices: list[Notice], watermark: int) -> list[Notice]:
    """Pick the notices newer than the watermark, oldest first.

    Args:
        notices: Fetched notices, newest first.
        watermark: Highest notice id already delivered.

    Returns:
        Notices with an id above the watermark, in ascending id order.
    """
    return sorted((notice for notice in notices if notice.id > watermark), key=lambda notice: notice.id)


class NoticeDispatcher:
    """Service for delivering new notices to every subscription."""

    def __init__(
        self,
        store: SubscriptionStore,
        notice_feed: NoticeFeedClient,
        messenger: TelegramMessenger,
    ) -> None:
        """Initialize the notice dispatcher.

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

    async def dispatch(self) -> int:
        """Send new notices for all subscriptions.

        A failing subscription is logged and skipped; the others are still processed.

        Returns:
            Number of notice messages delivered.
        """
        subscriptions = await self._run_blocking(self.store.get_all_subscriptions)
        if not subscriptions:
            logger.info("No subscriptions to process.")
            return 0

        delivered = 0
        for subscription in subscriptions:
            try:
                delivered += await self._process_subscription(subscription)
            except Exception as exp:  # noqa: BLE001
                DISPATCH_FAILURES.inc()
                logger.bind(chat_id=subscription.chat_id).error(f"Error processing subscription: {exp}")

        logger.info(f"Delivered {delivered} notices to {len(subscriptions)} subscriptions.")
        return delivered

    async def _process_subscription(self, subscription: Subscription) -> int:
        """Fetch, advance the watermark, then deliver new notices of one subscription.

        The watermark moves to the newest fetched id before anything is sent, so a failed
        delivery is not retried on the next run.

        Args:
            subscription: The subscription to process.

        Returns:
            Number of notice messages delivered.
        """
        notices = await self._run_blocking(lambda: self.notice_feed.fetch_notices(subscription.query_params))
        latest_id = notices[0].id if notices else 0

        if latest_id > subscription.latest_id:
            await self._run_blocking(lambda: self.store.advance_latest_id(subscription.chat_id, latest_id))

        delivered = 0
        for notice in select_new_notices(notices, subscription.latest_id):
            if await self.messenger.send_message(subscription.chat_id, format_notice(notice)):
                delivered += 1
        if delivered:
            NOTICES_DELIVERED.inc(delivered)
            logger.bind(chat_id=subscription.chat_id).info(f"Delivered {delivered} notices, watermark {latest_id}")
        return delivered


async def run_notice_dispatch(dispatcher: NoticeDispatcher) -> int:
    """Run one dispatch cycle, never raising.

    Args:
        dispatcher: The notice dispatcher.

    Returns:
        Number of notice messages delivered.
    """
    try:
        return await dispatcher.dispatch()
    except Exception:
        logger.exception("Error running notice dispatch")
        return 0
