"""This module provides classes for custom logging with Loguru."""

import sys
from typing import Any

import loguru
from loguru import logger


class DevelopFormatter:
    """Loguru formatter for human-readable logs."""

    def __init__(self, component_name: str) -> None:
        """Initialize the formatter.

        Args:
            component_name (str): The name of the component printed on every line.
        """
        self.component_name = component_name

    @staticmethod
    def format_extra(record: dict[str, Any]) -> str:
        """Format the bound `extra` values of the log record, such as `chat_id`.

        Args:
            record (dict): Log record dictionary.

        Returns:
            str: Space separated `key=value` pairs.
        """
        extra_items = record.get("extra", {}).items()
        return " ".join(f"<lvl>{key}={extra_value}</>" for key, extra_value in extra_items)

    def __call__(self, record: dict[str, Any]) -> str:
        """Build the loguru format string for one record.

        Args:
            record (Dict[str, Any]): Log record dictionary.

        Returns:
            str: Format template for the record.
        """
        extra = self.format_extra(record)
        suffix = f" | {extra}" if extra else ""
        exception = "\n{exception}\n" if record.get("exception") else "\n"
        return (
            "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</> | <lvl>{level: <8}</> | "
            f"<cyan>{self.component_name}</> | "
            "<cyan>{name}</>:<cyan>{function}</>:<cyan>{line}</> "
            "- <lvl>{message}</>"
            f"{suffix}{exception}"
        )


class LoggerInitializer:
    """Class to handle the initialization and closing of logger."""

    def __init__(self, component_name: str = "notice-bot", *, serialize: bool = False) -> None:
        """Initialize the logger initializer.

        Args:
            component_name: Name printed by the develop formatter.
            serialize: Write JSON records instead of the develop format.
        """
        self.develop_fmt = DevelopFormatter(component_name)
        self.serialize = serialize

    def init_logger(self) -> "loguru.Logger":
        """Replace the default sink with the configured stderr sink.

        Returns:
            loguru.Logger: The configured logger.
        """
        logger.remove()
        if self.serialize:
            logger.add(sys.stderr, serialize=True)
        else:
            logger.add(sys.stderr, format=self.develop_fmt)  # type: ignore[arg-type]
        return logger
