"""HTTP page fetcher for website enrichment.

Fetches raw HTML with a bounded timeout. Every failure (timeout, DNS or
connection error, non-2xx status, unsupported URL scheme) is logged and
reported as ``None`` so that a single unreachable page never aborts the
enrichment of a lead.
"""

import logging
from typing import Optional
from urllib.parse import urlparse

import requests
from requests.adapters import HTTPAdapter
from requests.exceptions import RequestException

from ..config import config

SUPPORTED_SCHEMES = ("http", "https")


class PageFetcher:
    """Fetches HTML pages over a pooled requests session.

    Attributes:
        timeout: Per-request timeout in seconds
        user_agent: User-Agent header sent with every request
        pool_size: Connection pool size per host, sized to the number of
            concurrent enrichment workers
        session: Requests session for connection pooling

    Example:
        with PageFetcher(timeout=5) as fetcher:
            html = fetcher.fetch_html("https://example.com")
    """

    def __init__(
        self,
        timeout: Optional[float] = None,
        user_agent: Optional[str] = None,
        pool_size: Optional[int] = None,
        logger: Optional[logging.Logger] = None,
    ):
        """Initialize the fetcher.

        Args:
            timeout: Request timeout in seconds (default: ENRICH_FETCH_TIMEOUT)
            user_agent: User-Agent header (default: ENRICH_USER_AGENT)
            pool_size: Connection pool size (default: ENRICH_MAX_WORKERS)
            logger: Optional logger instance. If None, creates one.
        """
        self.timeout = timeout if timeout is not None else config.ENRICH_FETCH_TIMEOUT
        self.user_agent = user_agent or config.ENRICH_USER_AGENT
        self.pool_size = max(1, pool_size or config.ENRICH_MAX_WORKERS)
        self.logger = logger or logging.getLogger("lead_radar.enrichment.fetcher")
        self.session = requests.Session()
        self._configure_session()

    def _configure_session(self) -> None:
        """Configure the requests session with default headers and pool size."""
        self.session.headers.update({
            "User-Agent": self.user_agent,
            "Accept": "text/html,application/xhtml+xml;q=0.9,*/*;q=0.8",
            "Accept-Language": "en-US,en;q=0.9",
        })
        adapter = HTTPAdapter(
            pool_connections=self.pool_size,
            pool_maxsize=self.pool_size,
        )
        self.session.mount("http://", adapter)
        self.session.mount("https://", adapter)

    def close(self) -> None:
        """Close the requests session and release resources."""
        if self.session:
            self.session.close()

    def __enter__(self):
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit - closes session."""
        self.close()
        return False

    def fetch_html(self, url: str) -> Optional[str]:
        """Fetch a page and return its body text.

        Args:
            url: Absolute http(s) URL

        Returns:
            The response body, or None if the page could not be fetched
        """
        try:
            scheme = urlparse(url).scheme.lower()
        except ValueError as e:
            self.logger.warning(
                "Skipping malformed URL",
                extra={"url": url, "error": str(e)},
            )
            return None

        if scheme not in SUPPORTED_SCHEMES:
            self.logger.warning(
                "Skipping unsupported URL",
                extra={"url": url},
            )
            return None

        try:
            response = self.session.get(url, timeout=self.timeout)
            response.raise_for_status()
        except RequestException as e:
            self.logger.warning(
                f"Failed to fetch {url}",
                extra={"url": url, "error": str(e)},
            )
            return None

        return response.text

    def __repr__(self) -> str:
        """Return a string representation of the fetcher."""
        return (
            f"{self.__class__.__name__}("
            f"timeout={self.timeout}, "
            f"pool_size={self.pool_size})"
        )
