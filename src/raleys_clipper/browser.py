import logging
from typing import Any, Callable

from playwright.sync_api import Browser, Page, Playwright, sync_playwright
from playwright.sync_api import TimeoutError as PlaywrightTimeoutError

logger = logging.getLogger(__name__)

# Default Playwright timeout for navigation and element waits
DEFAULT_TIMEOUT_MS = 30000


class PlaywrightBrowser:
    """
    Thin wrapper over a Playwright Firefox page.

    The session engine only talks to this surface, so any object exposing the same
    methods (e.g. a fake in tests) can stand in for a real browser.
    """

    def __init__(self, headless: bool = True):
        self.headless = headless
        self._playwright: Playwright | None = None
        self._browser: Browser | None = None
        self._page: Page | None = None

    def __enter__(self) -> "PlaywrightBrowser":
        self.launch()
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    @property
    def page(self) -> Page:
        if self._page is None:
            raise RuntimeError("Browser has not been launched")
        return self._page

    def launch(self) -> None:
        logger.debug(f"Launching Firefox (headless={self.headless})")
        self._playwright = sync_playwright().start()
        self._browser = self._playwright.firefox.launch(headless=self.headless)
        context = self._browser.new_context()
        self._page = context.new_page()

    def goto(self, url: str, timeout_ms: int = 60000) -> None:
        # domcontentloaded rather than networkidle: trackers keep connections open indefinitely
        self.page.goto(url, wait_until="domcontentloaded", timeout=timeout_ms)

    def wait_for_visible(self, selector: str, timeout_ms: int = DEFAULT_TIMEOUT_MS) -> None:
        self.page.wait_for_selector(selector, state="visible", timeout=timeout_ms)

    def click(self, selector: str, timeout_ms: int | None = None) -> None:
        self.page.click(selector, timeout=timeout_ms)

    def type_text(self, selector: str, text: str) -> None:
        self.page.locator(selector).press_sequentially(text)

    def navigation_after(self, action: Callable[[], None], timeout_ms: int) -> bool:
        """Run `action` while waiting for a navigation. Returns False if none happened in time."""
        try:
            with self.page.expect_navigation(wait_until="domcontentloaded", timeout=timeout_ms):
                action()
        except PlaywrightTimeoutError:
            return False
        return True

    def wait_for_navigation(self, timeout_ms: int) -> bool:
        return self.navigation_after(lambda: None, timeout_ms)

    def has_element(self, selector: str) -> bool:
        return self.page.query_selector(selector) is not None

    def wait_until_ready(self, timeout_ms: int = DEFAULT_TIMEOUT_MS) -> None:
        self.page.wait_for_load_state("domcontentloaded", timeout=timeout_ms)

    def cookies(self) -> list[dict[str, Any]]:
        return [dict(cookie) for cookie in self.page.context.cookies()]

    def close(self) -> None:
        if self._browser is not None:
            self._browser.close()
            self._browser = None
        if self._playwright is not None:
            self._playwright.stop()
            self._playwright = None
        self._page = None
