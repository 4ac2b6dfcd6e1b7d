"""PageFetcher — retrieves a listing page, directly or through a rendering proxy.

Order of attempts:
1. Direct GET with a browser-like User-Agent
2. Rendering proxy (handles JS-rendered pages), only when a proxy key is configured

Transient statuses (429/5xx) are retried with backoff by the session adapter.
The client is synchronous; async callers wrap it with asyncio.to_thread().
"""
from typing import Optional

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from houselyzer.config import settings
from houselyzer.core.exceptions import FetchError
from houselyzer.core.logging import get_logger
from houselyzer.schemas.extraction_schema import FetchedPage, ScrapingMethod

logger = get_logger(__name__)


class PageFetcher:
    """HTTP client that fetches listing pages with a direct-then-proxy fallback."""

    def __init__(
        self,
        user_agent: str = settings.browser_user_agent,
        timeout: int = settings.request_timeout,
        proxy_api_key: Optional[str] = None,
        proxy_endpoint: str = settings.proxy_endpoint,
        max_retries: int = settings.fetch_max_retries,
        backoff_factor: float = 1.0,
    ):
        self.user_agent = user_agent
        self.timeout = timeout
        self.proxy_api_key = proxy_api_key
        self.proxy_endpoint = proxy_endpoint

        self._session = requests.Session()
        retry_strategy = Retry(
            total=max_retries,
            backoff_factor=backoff_factor,
            status_forcelist=[429, 500, 502, 503, 504],
            allowed_methods=["GET"],
        )
        adapter = HTTPAdapter(max_retries=retry_strategy)
        self._session.mount("https://", adapter)
        self._session.mount("http://", adapter)

    @classmethod
    def from_settings(cls) -> "PageFetcher":
        return cls(proxy_api_key=settings.proxy_api_key or None)

    def _get(self, url: str, **kwargs) -> requests.Response:
        try:
            return self._session.get(url, timeout=self.timeout, **kwargs)
        except requests.exceptions.Timeout as e:
            raise FetchError(f"Timeout ({self.timeout}s) fetching {url}") from e
        except requests.exceptions.RequestException as e:
            raise FetchError(f"Request error for {url}: {e}") from e

    def fetch_direct(self, url: str) -> FetchedPage:
        """Fetch the page ourselves. Anything but HTTP 200 is a failure."""
        response = self._get(url, headers={"User-Agent": self.user_agent})
        if response.status_code != 200:
            raise FetchError(f"Direct fetch failed: HTTP {response.status_code}")
        logger.info(
            "Direct fetch successful, content length: %d", len(response.text),
            extra={"url": url, "method": "direct"},
        )
        return FetchedPage(html=response.text, method=ScrapingMethod.DIRECT)

    def fetch_via_proxy(self, url: str) -> FetchedPage:
        """Fetch the page through the rendering proxy."""
        if not self.proxy_api_key:
            raise FetchError("No proxy credential configured")
        response = self._get(
            self.proxy_endpoint,
            params={"api_key": self.proxy_api_key, "url": url, "render": "true"},
        )
        if response.status_code != 200:
            raise FetchError(f"Proxy fetch failed: HTTP {response.status_code}")
        logger.info(
            "Proxy fetch successful, content length: %d", len(response.text),
            extra={"url": url, "method": "proxy"},
        )
        return FetchedPage(html=response.text, method=ScrapingMethod.PROXY)

    def fetch(self, url: str) -> FetchedPage:
        """Direct fetch, falling back to the proxy. Raises FetchError if neither yields content."""
        try:
            return self.fetch_direct(url)
        except FetchError as direct_error:
            logger.warning("Direct fetch failed for %s: %s", url, direct_error.message)
            if not self.proxy_api_key:
                raise FetchError(
                    "Direct fetch failed and no proxy credential is configured",
                    detail=direct_error.message,
                ) from direct_error

        try:
            return self.fetch_via_proxy(url)
        except FetchError as proxy_error:
            logger.warning("Proxy fetch failed for %s: %s", url, proxy_error.message)
            raise FetchError(
                "Both direct fetch and proxy fetch failed",
                detail=proxy_error.message,
            ) from proxy_error

    def close(self) -> None:
        """Close the HTTP session."""
        self._session.close()
