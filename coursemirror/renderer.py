"""Headless Chromium page rendering via Playwright."""

import sys
from dataclasses import dataclass
from pathlib import Path

from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import sync_playwright

from .config import CrawlConfig
from .errors import CourseMirrorError, NavigationError
from .file_saver import url_to_filepath
from .url_resolver import LinkKind


@dataclass
class RenderedPage:
    """The DOM of a page after it finished loading."""

    url: str  # Canonical URL the page was requested for
    document_url: str  # Where the browser actually loaded it from (http(s) or file://)
    html: str
    from_cache: bool


class PageRenderer:
    """Loads pages one at a time in a single headless Chromium tab.

    Pages come either from the live site or from the archived ``.html``
    copy of an earlier run. Navigation waits for ``config.wait_for``
    (``networkidle`` by default: no network connections for 500ms).
    """

    def __init__(self, config: CrawlConfig):
        self.config = config
        self._playwright = None
        self._browser = None
        self._browser_context = None
        self._page = None

    def __enter__(self) -> "PageRenderer":
        self.start()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def start(self) -> None:
        """Launch Chromium and open the tab used for every page."""
        print("[BROWSER] Starting Chromium (headless)...")
        sys.stdout.flush()
        try:
            self._playwright = sync_playwright().start()
            self._browser = self._playwright.chromium.launch(headless=True)
            self._browser_context = self._browser.new_context(
                user_agent=self.config.user_agent,
                viewport={"width": 1920, "height": 1080},
            )
            self._page = self._browser_context.new_page()
        except PlaywrightError as e:
            self.close()
            raise CourseMirrorError(
                f"Failed to start browser: {e}. "
                "Run: python -m playwright install chromium"
            ) from e
        print("[BROWSER] Ready.\n")
        sys.stdout.flush()

    def close(self) -> None:
        """Close Playwright browser and resources."""
        for resource in (self._page, self._browser_context, self._browser):
            if resource is not None:
                try:
                    resource.close()
                except PlaywrightError:
                    pass
        if self._playwright is not None:
            try:
                self._playwright.stop()
            except PlaywrightError:
                pass
        self._page = self._browser_context = self._browser = self._playwright = None

    def render(self, url: str, use_local: bool) -> RenderedPage:
        """Load a page and return its rendered DOM.

        Args:
            url: Canonical URL of the page.
            use_local: Load the archived copy instead of the live site.

        Returns:
            The rendered page.

        Raises:
            NavigationError: The page could not be loaded. Not retried.
        """
        if self._page is None:
            raise CourseMirrorError("Renderer used before start()")

        if use_local:
            dest = Path(url_to_filepath(url, self.config.output_folder, LinkKind.PAGE)).absolute().as_uri()
        else:
            dest = url

        try:
            response = self._page.goto(
                dest,
                wait_until=self.config.wait_for,
                timeout=self.config.timeout * 1000,  # Playwright uses ms
            )

            # An error status still gets archived if the server sent a page with it
            if response is not None and response.status >= 400:
                try:
                    body = response.body()
                except PlaywrightError:
                    body = b""
                if not body:
                    raise NavigationError(url, f"HTTP {response.status} with empty body")

            html = self._page.content()
            document_url = self._page.url
        except PlaywrightError as e:
            raise NavigationError(url, str(e)) from e

        return RenderedPage(url=url, document_url=document_url, html=html, from_cache=use_local)
