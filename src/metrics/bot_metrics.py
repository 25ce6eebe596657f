"""Bot metrics."""

from prometheus_client import Counter

from src.metrics.asgi_metrics import TASK

COMMANDS = Counter(
    f"{TASK}_bot_commands_total",
    "Total count of handled bot commands and filter answers.",
    ["command"],
)

NOTICES_DELIVERED = Counter(
    f"{TASK}_notices_delivered_total",
    "Total count of notice messages accepted by Telegram.",
)

DISPATCH_FAILURES = Counter(
    f"{TASK}_dispatch_failures_total",
    "Total count of subscriptions skipped in a dispatch run because of an error.",
)
