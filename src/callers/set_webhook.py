"""Register the bot webhook with the Telegram Bot API."""

import sys

import click
import requests
from requests.exceptions import RequestException

from src.settings import Settings

TELEGRAM_API_URL = "https://api.telegram.org"
WEBHOOK_PATH = "/api/webhook"


def build_webhook_url(base_url: str) -> str:
    """Turn the public base URL of the service into the webhook URL.

    Args:
        base_url: Public base URL, with or without scheme.

    Returns:
        The https webhook URL.
    """
    base_url = base_url.strip().rstrip("/")
    if not base_url.startswith("http"):
        base_url = f"https://{base_url}"
    return f"{base_url}{WEBHOOK_PATH}"


@click.command()
@click.option("--url", required=True, help="Public base URL of the deployed bot")
@click.option("--token", default=None, help="Bot token, defaults to NOTICE_BOT_TELEGRAM_TOKEN")
@click.option("--drop-pending", is_flag=True, help="Drop updates Telegram queued while the webhook was down")
@click.option("--timeout", default=30, help="Request timeout in seconds")
def main(url: str, token: str | None, timeout: int, *, drop_pending: bool) -> None:
    """Point the Telegram bot at this service's webhook endpoint."""
    token = token or Settings().telegram_token  # type: ignore[call-arg]
    webhook_url = build_webhook_url(url)
    endpoint = f"{TELEGRAM_API_URL}/bot{token}/setWebhook"
    data = {
        "url": webhook_url,
        "allowed_updates": ["message"],
        "drop_pending_updates": drop_pending,
    }

    click.echo(f"Registering webhook: {webhook_url}")
    try:
        response = requests.post(endpoint, json=data, timeout=timeout)
        response.raise_for_status()
        click.echo(f"Response: {response.json()}")
    except RequestException as e:
        click.echo(f"Error registering webhook: {e}", err=True)
        if hasattr(e, "response") and e.response is not None:
            click.echo(f"Telegram response: {e.response.text}", err=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
