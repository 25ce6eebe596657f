"""Message formatting utilities for Telegram bot."""

from src.utils.schemas import Notice


def format_notice(notice: Notice) -> str:
    """Format a notice for delivery: the title, then its URL on the next line.

    Args:
        notice: The notice to format.

    Returns:
        The message text.
    """
    return f"{notice.title}\n{notice.url}"


def format_filters(header: str, lines: list[str]) -> str:
    """Join a header and filter description lines into one message."""
    return "\n".join([header, *lines])
