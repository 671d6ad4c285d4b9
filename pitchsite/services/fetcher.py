"""
Website fetching service.
Plain async HTTP GET via httpx, with an optional headless-browser path
(Playwright) for JavaScript-rendered sites.
"""

from typing import Optional
from urllib.parse import urlparse

import httpx
import structlog

from ..core.config import settings
from ..models.schemas import FetchResult

logger = structlog.get_logger()

USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)

DEFAULT_HEADERS = {
    "User-Agent": USER_AGENT,
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.9",
}

MAX_HTML_SIZE = 5 * 1024 * 1024  # 5MB


class InvalidURLError(ValueError):
    """Raised when a target URL can't be parsed even after assuming https."""


def normalize_url(raw_url: str) -> str:
    """
    Normalize a user-supplied URL, defaulting the scheme to https.

    Raises:
        InvalidURLError: if no usable host remains
    """
    url = (raw_url or "").strip()
    if not url:
        raise InvalidURLError("Please provide a valid URL")

    if not url.lower().startswith(("http://", "https://")):
        url = f"https://{url}"

    if any(ch.isspace() for ch in url):
        raise InvalidURLError(f"Invalid URL: {raw_url!r}")

    try:
        parsed = urlparse(url)
        host = parsed.hostname
    except ValueError as e:
        raise InvalidURLError(f"Invalid URL: {raw_url!r}") from e

    if not host or (host != "localhost" and "." not in host) or host.startswith(".") or host.endswith("."):
        raise InvalidURLError(f"Invalid URL: {raw_url!r}")

    return url


def host_of(url: str) -> str:
    return (urlparse(url).hostname or "").lower()


class WebsiteFetcher:
    """Retrieves raw HTML for a company website. Never raises on network errors."""

    def __init__(
        self,
        timeout: Optional[float] = None,
        max_redirects: Optional[int] = None,
        use_browser: Optional[bool] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self.timeout = timeout if timeout is not None else settings.FETCH_TIMEOUT
        self.max_redirects = max_redirects if max_redirects is not None else settings.FETCH_MAX_REDIRECTS
        self.use_browser = settings.FETCH_USE_BROWSER if use_browser is None else use_browser
        self.transport = transport

    async def fetch(self, url: str) -> FetchResult:
        """
        Fetch a page.

        Args:
            url: Normalized URL (see normalize_url)

        Returns:
            FetchResult with success=False on any failure
        """
        if self.use_browser:
            result = await self.fetch_with_browser(url)
            if result.success:
                return result
            logger.info("browser_fetch_fallback_to_http", url=url, error=result.error)

        return await self.fetch_with_http(url)

    async def fetch_with_http(self, url: str) -> FetchResult:
        host = host_of(url)
        logger.info("fetching_url", url=url, method="http")

        try:
            async with httpx.AsyncClient(
                timeout=httpx.Timeout(self.timeout),
                follow_redirects=True,
                max_redirects=self.max_redirects,
                headers=DEFAULT_HEADERS,
                transport=self.transport
            ) as client:
                response = await client.get(url)

            final_url = str(response.url)

            if response.status_code >= 400:
                logger.warning("fetch_http_error", url=url, status_code=response.status_code)
                return FetchResult(
                    success=False,
                    url=url,
                    final_url=final_url,
                    host=host_of(final_url) or host,
                    status_code=response.status_code,
                    error=f"HTTP {response.status_code}"
                )

            html = response.text
            if len(html) > MAX_HTML_SIZE:
                logger.warning("fetch_html_truncated", url=url, size=len(html))
                html = html[:MAX_HTML_SIZE]

            return FetchResult(
                success=True,
                url=url,
                final_url=final_url,
                host=host_of(final_url) or host,
                html=html,
                status_code=response.status_code
            )

        except httpx.TimeoutException as e:
            logger.warning("fetch_timeout", url=url, error=str(e))
            return FetchResult(success=False, url=url, host=host, error=f"Timeout: {e}")
        except httpx.TooManyRedirects as e:
            logger.warning("fetch_too_many_redirects", url=url, error=str(e))
            return FetchResult(success=False, url=url, host=host, error=f"Too many redirects: {e}")
        except Exception as e:
            # Transport errors, invalid URLs, decoding problems
            logger.warning("fetch_failed", url=url, error=str(e), error_type=type(e).__name__)
            return FetchResult(success=False, url=url, host=host, error=str(e) or type(e).__name__)

    async def fetch_with_browser(self, url: str) -> FetchResult:
        """Render the page in headless Chromium and return the resulting DOM."""
        host = host_of(url)
        logger.info("fetching_url", url=url, method="browser")

        try:
            from playwright.async_api import async_playwright

            async with async_playwright() as p:
                browser = await p.chromium.launch(
                    headless=True,
                    args=["--no-sandbox", "--disable-setuid-sandbox", "--disable-dev-shm-usage"]
                )
                try:
                    context = await browser.new_context(user_agent=USER_AGENT, ignore_https_errors=True)
                    page = await context.new_page()
                    response = await page.goto(url, wait_until="networkidle", timeout=settings.BROWSER_TIMEOUT_MS)
                    status_code = response.status if response else None

                    if status_code is not None and status_code >= 400:
                        return FetchResult(
                            success=False,
                            url=url,
                            final_url=page.url,
                            host=host_of(page.url) or host,
                            status_code=status_code,
                            error=f"HTTP {status_code}",
                            method="browser"
                        )

                    html = await page.content()
                    return FetchResult(
                        success=True,
                        url=url,
                        final_url=page.url,
                        host=host_of(page.url) or host,
                        html=html[:MAX_HTML_SIZE],
                        status_code=status_code,
                        method="browser"
                    )
                finally:
                    await browser.close()

        except Exception as e:
            logger.warning("browser_fetch_failed", url=url, error=str(e))
            return FetchResult(success=False, url=url, host=host, error=str(e), method="browser")
