"""HTTP session for catalog calls: default timeout, fixed headers, one attempt.

A failed request is terminal for the operation that made it; the adapter's
Retry policy allows none.
"""

import logging

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

logger = logging.getLogger(__name__)


def create_session(
    timeout: int = 30,
    user_agent: str = "WizdomSubsDownloader/1.0",
) -> "ProviderSession":
    """Create a configured ProviderSession."""
    session = ProviderSession(timeout=timeout)
    session.headers["User-Agent"] = user_agent
    session.headers["Accept"] = "*/*"

    retry_strategy = Retry(total=0, raise_on_status=False)
    adapter = HTTPAdapter(max_retries=retry_strategy)
    session.mount("https://", adapter)
    session.mount("http://", adapter)

    return session


class ProviderSession(requests.Session):
    """Session with a default timeout and failure logging."""

    def __init__(self, timeout: int = 30):
        super().__init__()
        self.default_timeout = timeout or None

    def request(self, method, url, **kwargs):
        if "timeout" not in kwargs:
            kwargs["timeout"] = self.default_timeout

        try:
            return super().request(method, url, **kwargs)
        except requests.ConnectionError as e:
            logger.warning("Connection error for %s %s: %s", method, url, e)
            raise
        except requests.Timeout:
            logger.warning("Timeout for %s %s", method, url)
            raise
