"""Containers for injection."""

from typing import Any

from dependency_injector import containers, providers

from src.logger.log import LoggerInitializer
from src.service.notice_feed import NoticeFeedClient
from src.settings import Settings
from telegram_bot.handlers.update_handler import UpdateHandler
from telegram_bot.messenger import TelegramMessenger
from telegram_bot.notifications import NoticeDispatcher
from telegram_bot.subscriptions import SubscriptionStore


class AppContainer(containers.DeclarativeContainer):
    """Dependency injection container for managing application components.

    Args:
        containers.DeclarativeContainer: The base class for the dependency injection container.
    """

    config = providers.Configuration()

    subscription_store: providers.Singleton[SubscriptionStore] = providers.Singleton(
        SubscriptionStore,
        db_path=config.subscriptions_db_path,
    )

    notice_feed: providers.Singleton[NoticeFeedClient] = providers.Singleton(
        NoticeFeedClient,
        base_url=config.notice_feed_url,
        timeout=config.notice_feed_timeout,
    )

    messenger: providers.Singleton[TelegramMessenger] = providers.Singleton(
        TelegramMessenger,
        bot_token=config.telegram_token,
    )

    # Handlers and dispatcher are cheap and stateless, a new one per request or tick.
    update_handler: providers.Factory[UpdateHandler] = providers.Factory(
        UpdateHandler,
        store=subscription_store,
        notice_feed=notice_feed,
        messenger=messenger,
    )

    notice_dispatcher: providers.Factory[NoticeDispatcher] = providers.Factory(
        NoticeDispatcher,
        store=subscription_store,
        notice_feed=notice_feed,
        messenger=messenger,
    )

    logger_initializer: providers.Singleton[LoggerInitializer] = providers.Singleton(
        LoggerInitializer,
        component_name=config.api_name,
        serialize=config.log_serialize,
    )


def init_app_container(modules_to_wire: list[Any], config: Settings) -> AppContainer:
    """Initialize the app container.

    Args:
        modules_to_wire (list[Any]): The modules to wire.
        config (Settings): The configuration.

    Returns:
        AppContainer: The container.
    """
    container = AppContainer()
    json_config = config.model_dump(mode="json")
    container.config.from_dict(json_config)
    container.wire(modules=modules_to_wire)
    container.logger_initializer().init_logger()
    return container
