"""Outbound message delivery through the Telegram Bot API."""

from loguru import logger
from telegram import Bot, ForceReply
from telegram.error import TelegramError


class TelegramMessenger:
    """Fire-and-forget sender for bot messages."""

    def __init__(self, bot_token: str) -> None:
        """Initialize the messenger.

        Args:
            bot_token: Telegram bot token.
        """
        self.bot = Bot(token=bot_token)

    async def start(self) -> None:
        """Open the HTTP connection pool of the bot and verify the token with `getMe`."""
        await self.bot.initialize()
        logger.info("Telegram bot initialized.")

    async def send_message(self, chat_id: int, text: str, *, force_reply: bool = False) -> bool:
        """Send a text message to a chat.

        Delivery errors are logged and swallowed; callers never wait on a delivery receipt.

        Args:
            chat_id: Target chat ID.
            text: Message text.
            force_reply: Ask the client to open a reply to this message.

        Returns:
            True if Telegram accepted the message, False otherwise.
        """
        reply_markup = ForceReply() if force_reply else None
        try:
            await self.bot.send_message(chat_id=chat_id, text=text, reply_markup=reply_markup)
        except TelegramError as exp:
            logger.bind(chat_id=chat_id).error(f"Error sending message: {exp}")
            return False
        return True

    async def close(self) -> None:
        """Release the HTTP connection pool opened by `start`."""
        await self.bot.shutdown()
