"""Page rendering boundary.

Extractors never talk to the browser directly. They receive a
``RenderedPage`` holding the final HTML of a page and query it with CSS
selectors, which keeps them testable against plain HTML fixtures.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from functools import cached_property
from types import TracebackType
from typing import TYPE_CHECKING, Literal, Protocol, Self, runtime_checkable

from bs4 import BeautifulSoup, Tag
from playwright.sync_api import sync_playwright

if TYPE_CHECKING:
    from playwright.sync_api import Browser, Playwright

logger = logging.getLogger(__name__)

type WaitUntil = Literal["commit", "domcontentloaded", "load", "networkidle"]

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) "
    "AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/120.0.0.0 Safari/537.36"
)


@dataclass(frozen=True)
class RenderedPage:
    url: str
    html: str
    user_agent: str | None = field(default=None, compare=False)

    @cached_property
    def soup(self) -> BeautifulSoup:
        return BeautifulSoup(self.html, "html.parser")

    def select_one(self, selector: str) -> Tag | None:
        return self.soup.select_one(selector)

    def select(self, selector: str) -> list[Tag]:
        return list(self.soup.select(selector))

    def has(self, selector: str) -> bool:
        return self.select_one(selector) is not None


type PresencePredicate = Callable[[RenderedPage], bool]


def has_element(selector: str) -> PresencePredicate:
    """Build a presence predicate that is true when *selector* matches."""

    def predicate(page: RenderedPage) -> bool:
        return page.has(selector)

    return predicate


@runtime_checkable
class PageRenderer(Protocol):
    def render(
        self,
        url: str,
        *,
        user_agent: str | None = None,
        wait_until: WaitUntil = "load",
    ) -> RenderedPage: ...


class PlaywrightRenderer:
    """Renders pages in headless Chromium.

    Each call opens a fresh page (and browser context) so that every request
    can present a different user agent. Use as a context manager; the
    browser is shut down on exit.
    """

    def __init__(self, *, headless: bool = True, timeout_ms: int = 60000) -> None:
        self._headless = headless
        self._timeout_ms = timeout_ms
        self._playwright: Playwright | None = None
        self._browser: Browser | None = None

    def __enter__(self) -> Self:
        self._playwright = sync_playwright().start()
        self._browser = self._playwright.chromium.launch(headless=self._headless)
        logger.debug("Launched Chromium (headless=%s)", self._headless)
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        try:
            if self._browser is not None:
                self._browser.close()
        finally:
            if self._playwright is not None:
                self._playwright.stop()
            self._browser = None
            self._playwright = None

    def render(
        self,
        url: str,
        *,
        user_agent: str | None = None,
        wait_until: WaitUntil = "load",
    ) -> RenderedPage:
        if self._browser is None:
            raise RuntimeError("PlaywrightRenderer used outside of its context manager")

        agent = user_agent or DEFAULT_USER_AGENT
        page = self._browser.new_page(user_agent=agent)
        try:
            logger.debug("GET %s (wait_until=%s)", url, wait_until)
            page.goto(url, wait_until=wait_until, timeout=self._timeout_ms)
            return RenderedPage(url=url, html=page.content(), user_agent=agent)
        finally:
            page.close()
