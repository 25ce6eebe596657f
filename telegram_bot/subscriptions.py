"""SQLite-based subscription storage for Telegram bot."""

import sqlite3
from dataclasses import dataclass
from pathlib import Path

from loguru import logger


@dataclass
class Subscription:
    """Represents a chat subscribed to notice updates."""

    chat_id: int
    latest_id: int
    query_params: str = ""


class SubscriptionStore:
    """SQLite-based storage for chat subscriptions.

    One row per chat. Every method opens its own connection, so the store can be
    shared between the webhook handlers and the scheduled dispatcher.
    """

    def __init__(self, db_path: str = "storage/subscriptions.db") -> None:
        """Initialize the subscription store.

        Args:
            db_path: Path to the SQLite database file.
        """
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._init_db()

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        return conn

    def _init_db(self) -> None:
        """Initialize the database schema."""
        with self._connect() as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS telegram_bot (
                    chat_id INTEGER NOT NULL PRIMARY KEY,
                    latest_id INTEGER NOT NULL,
                    query_params TEXT NOT NULL
                )
            """)
            conn.commit()
        logger.info(f"Subscription database initialized at {self.db_path}")

    def add_subscription(self, chat_id: int, latest_id: int, query_params: str = "") -> Subscription:
        """Add a new subscription.

        Args:
            chat_id: Telegram chat ID.
            latest_id: Initial watermark, the newest notice id at subscribe time.
            query_params: Url-encoded notice filters.

        Raises:
            sqlite3.IntegrityError: The chat is already subscribed.

        Returns:
            The created Subscription.
        """
        with self._connect() as conn:
            conn.execute(
                "INSERT INTO telegram_bot (chat_id, latest_id, query_params) VALUES (?, ?, ?)",
                (chat_id, latest_id, query_params),
            )
            conn.commit()

        return Subscription(chat_id=chat_id, latest_id=latest_id, query_params=query_params)

    def get_subscription(self, chat_id: int) -> Subscription | None:
        """Get the subscription of a chat.

        Args:
            chat_id: Telegram chat ID.

        Returns:
            The Subscription or None if the chat is not subscribed.
        """
        with self._connect() as conn:
            row = conn.execute("SELECT * FROM telegram_bot WHERE chat_id = ?", (chat_id,)).fetchone()

        return self._row_to_subscription(row) if row else None

    def get_all_subscriptions(self) -> list[Subscription]:
        """Get all subscriptions.

        Returns:
            List of all subscriptions ordered by chat id.
        """
        with self._connect() as conn:
            rows = conn.execute("SELECT * FROM telegram_bot ORDER BY chat_id").fetchall()

        return [self._row_to_subscription(row) for row in rows]

    def update_query_params(self, chat_id: int, query_params: str) -> bool:
        """Replace the notice filters of a subscription.

        Args:
            chat_id: Telegram chat ID.
            query_params: Url-encoded notice filters.

        Returns:
            True if updated, False if the chat is not subscribed.
        """
        with self._connect() as conn:
            cursor = conn.execute(
                "UPDATE telegram_bot SET query_params = ? WHERE chat_id = ?",
                (query_params, chat_id),
            )
            conn.commit()
            return cursor.rowcount > 0

    def advance_latest_id(self, chat_id: int, latest_id: int) -> bool:
        """Move the watermark of a subscription forward.

        The watermark never goes back: rows already at or above `latest_id` are left alone.

        Args:
            chat_id: Telegram chat ID.
            latest_id: The new watermark.

        Returns:
            True if the watermark moved, False otherwise.
        """
        with self._connect() as conn:
            cursor = conn.execute(
                "UPDATE telegram_bot SET latest_id = ? WHERE chat_id = ? AND latest_id < ?",
                (latest_id, chat_id, latest_id),
            )
            conn.commit()
            return cursor.rowcount > 0

    def delete_subscription(self, chat_id: int) -> bool:
        """Delete the subscription of a chat.

        Args:
            chat_id: Telegram chat ID.

        Returns:
            True if deleted, False if the chat was not subscribed.
        """
        with self._connect() as conn:
            cursor = conn.execute("DELETE FROM telegram_bot WHERE chat_id = ?", (chat_id,))
            conn.commit()
            return cursor.rowcount > 0

    def count_subscriptions(self) -> int:
        """Count subscribed chats.

        Returns:
            Number of subscriptions.
        """
        with self._connect() as conn:
            return conn.execute("SELECT COUNT(*) FROM telegram_bot").fetchone()[0]

    @staticmethod
    def _row_to_subscription(row: sqlite3.Row) -> Subscription:
        return Subscription(
            chat_id=row["chat_id"],
            latest_id=row["latest_id"],
            query_params=row["query_params"],
        )
