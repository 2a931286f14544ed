"""
HTTP client used by the fetch workers.

A ``requests`` session with retry-on-5xx, default headers and a per-request
timeout. Each worker thread owns its own client; sessions are never shared
between threads.
"""

from __future__ import annotations

import logging
from typing import Optional

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from ..errors import TransportError

logger = logging.getLogger(__name__)

FEED_ACCEPT = "application/rss+xml, application/atom+xml, application/xml;q=0.9, text/xml;q=0.9, */*;q=0.8"
PAGE_ACCEPT = "text/html, application/xhtml+xml, */*;q=0.8"


class HttpClient:
    """
    HTTP client with retries and proper headers.

    Network, timeout and HTTP status failures are all surfaced as
    ``TransportError`` so callers only deal with one failure type.
    """

    def __init__(
        self,
        user_agent: str = "Timescroll-Fetcher/1.0",
        timeout: int = 30,
        max_retries: int = 2,
        session: Optional[requests.Session] = None,
    ):
        """
        Initialize HTTP client.

        Args:
            user_agent: User-Agent header value
            timeout: Request timeout in seconds
            max_retries: Number of retry attempts on 429/5xx and connection errors
            session: Pre-built session (tests inject one)
        """
        self.user_agent = user_agent
        self.timeout = timeout
        self.session = session or requests.Session()

        if session is None:
            retry_strategy = Retry(
                total=max_retries,
                backoff_factor=1,
                status_forcelist=[429, 500, 502, 503, 504],
                allowed_methods=["GET", "HEAD"],
                raise_on_status=False,
            )
            adapter = HTTPAdapter(max_retries=retry_strategy)
            self.session.mount("http://", adapter)
            self.session.mount("https://", adapter)

        self.session.headers.update(
            {
                "User-Agent": self.user_agent,
                "Accept-Language": "en-US,en;q=0.9",
            }
        )

    def get(self, url: str, *, accept: Optional[str] = None, **kwargs) -> requests.Response:
        """
        Perform a GET request.

        Args:
            url: URL to fetch
            accept: Optional Accept header for this request
            **kwargs: Additional arguments passed to requests.Session.get()

        Returns:
            Response object with a 2xx status

        Raises:
            TransportError: On connection, timeout or HTTP status errors
        """
        kwargs.setdefault("timeout", self.timeout)
        if accept:
            headers = dict(kwargs.pop("headers", None) or {})
            headers.setdefault("Accept", accept)
            kwargs["headers"] = headers

        logger.debug(f"Fetching {url}")

        try:
            response = self.session.get(url, **kwargs)
            response.raise_for_status()
        except requests.exceptions.HTTPError as e:
            status_code = e.response.status_code if e.response is not None else None
            raise TransportError(url, f"HTTP {status_code} error", status_code=status_code) from e
        except requests.exceptions.Timeout as e:
            raise TransportError(url, f"Timeout after {kwargs['timeout']}s") from e
        except requests.exceptions.RequestException as e:
            raise TransportError(url, f"Request error: {e}") from e

        logger.debug(f"Fetched {url} - Status: {response.status_code}, Size: {len(response.content)} bytes")
        return response

    def get_feed(self, url: str) -> bytes:
        """Fetch a feed document and return its raw body."""
        return self.get(url, accept=FEED_ACCEPT).content

    def get_page(self, url: str) -> requests.Response:
        """Fetch an HTML page; the response keeps its final (redirected) URL."""
        return self.get(url, accept=PAGE_ACCEPT)

    def close(self) -> None:
        """Close the HTTP session."""
        self.session.close()

    def __enter__(self):
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit - close session."""
        self.close()
