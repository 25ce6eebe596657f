"""Client for the upstream notice feed."""

import requests
from loguru import logger
from pydantic import TypeAdapter, ValidationError
from requests.exceptions import RequestException

from src.utils.schemas import Notice

_NOTICES_ADAPTER: TypeAdapter[list[Notice]] = TypeAdapter(list[Notice])


class NoticeFeedError(Exception):
    """Raised when the notice feed cannot be queried or returns garbage."""


class NoticeFeedClient:
    """Fetch notices from the notice worker, newest first."""

    notices_path: str = "/api/notices"

    def __init__(self, base_url: str, timeout: float = 10.0) -> None:
        """Initialize the notice feed client.

        Args:
            base_url (str): Base URL of the notice worker.
            timeout (float): Request timeout in seconds.
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    def build_url(self, query_params: str = "") -> str:
        """Build the notices URL for an url-encoded filter string.

        Args:
            query_params (str): Url-encoded filters, empty for no filter.

        Returns:
            str: The full URL to query.
        """
        url = f"{self.base_url}{self.notices_path}"
        return f"{url}?{query_params}" if query_params else url

    def fetch_notices(self, query_params: str = "") -> list[Notice]:
        """Fetch the notice list for the given filters.

        Args:
            query_params (str): Url-encoded `category`, `department` and `search` filters.

        Raises:
            NoticeFeedError: The request failed or the payload is not a notice list.

        Returns:
            list[Notice]: Notices ordered newest first.
        """
        url = self.build_url(query_params)
        try:
            response = requests.get(url, timeout=self.timeout)
            response.raise_for_status()
            notices = _NOTICES_ADAPTER.validate_python(response.json())
        except (RequestException, ValueError, ValidationError) as exp:
            raise NoticeFeedError(f"Failed to fetch notices from {url}: {exp}") from exp

        logger.debug(f"Fetched {len(notices)} notices from {url}")
        return notices

    def fetch_latest_id(self, query_params: str = "") -> int:
        """Return the id of the newest notice, or 0 when the feed is empty.

        Args:
            query_params (str): Url-encoded filters.

        Returns:
            int: The newest notice id.
        """
        notices = self.fetch_notices(query_params)
        return notices[0].id if notices else 0
