"""Shared HTTP client for every job source.

Retries here are per HTTP call and cover network-level trouble (timeouts,
dropped connections, error statuses). Source fetchers layer their own
per-listing retry on top.
"""
from __future__ import annotations

import requests

from jobpipe.config import Settings
from jobpipe.errors import ScrapingError
from jobpipe.log import get_logger
from jobpipe.retry import RetryPolicy

log = get_logger(__name__)

USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/124.0 Safari/537.36"
)


class HttpClient:
    def __init__(self, settings: Settings, session: requests.Session | None = None) -> None:
        self.timeout = settings.request_timeout
        self.policy = RetryPolicy(
            max_attempts=settings.retry_attempts,
            base_delay=settings.retry_delay,
            retryable=(requests.RequestException, OSError),
        )
        self.session = session or requests.Session()
        self.session.headers.update({"User-Agent": USER_AGENT})

    def _get_once(self, url: str) -> str:
        r = self.session.get(url, timeout=self.timeout)
        r.raise_for_status()
        return r.text

    def get(self, url: str, *, source: str) -> str:
        """GET *url* and return the body, or raise ScrapingError for *source*."""
        try:
            return self.policy.call(self._get_once, url)
        except (requests.RequestException, OSError) as exc:
            raise ScrapingError(f"Request to {url} failed: {exc}", source) from exc

    def close(self) -> None:
        self.session.close()
