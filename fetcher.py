"""Headless-browser page fetching for the JavaScript-rendered category page."""

from __future__ import annotations

import logging
import threading
import time
from typing import Any, Callable, List, Optional

from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import TimeoutError as PlaywrightTimeoutError
from playwright.sync_api import sync_playwright

from constants import (
    CATEGORY_URL,
    CONTENT_SELECTOR,
    FETCH_TIMEOUT,
    FETCH_WAIT_SLICE,
    READY_SELECTOR,
)
from errors import FetchCancelled, FetchError
from models import Product
from scanner import extract_products

__all__ = ["PageFetcher"]

logger = logging.getLogger(__name__)

_INNER_HTML_JS = "els => els.map(e => e.innerHTML).join('')"


class PageFetcher:
    """Render a page in Chromium and return the inner HTML of its content containers.

    Each call launches a fresh browser and closes it before returning. The
    readiness wait runs in short slices so a set ``cancel_event`` aborts the
    fetch within about a second instead of blocking shutdown until the
    per-attempt timeout.
    """

    def __init__(
        self,
        url: str = CATEGORY_URL,
        *,
        ready_selector: str = READY_SELECTOR,
        content_selector: str = CONTENT_SELECTOR,
        timeout: float = FETCH_TIMEOUT,
        headless: bool = True,
        wait_slice: float = FETCH_WAIT_SLICE,
        playwright_factory: Callable[[], Any] = sync_playwright,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.url = url
        self.ready_selector = ready_selector
        self.content_selector = content_selector
        self.timeout = timeout
        self.headless = headless
        self.wait_slice = wait_slice
        self._playwright_factory = playwright_factory
        self._clock = clock

    def fetch_html(self, cancel_event: Optional[threading.Event] = None) -> str:
        deadline = self._clock() + self.timeout
        try:
            with self._playwright_factory() as pw:
                browser = pw.chromium.launch(headless=self.headless)
                try:
                    page = browser.new_page()
                    self._check_cancelled(cancel_event)
                    page.goto(
                        self.url,
                        wait_until="domcontentloaded",
                        timeout=self._remaining_ms(deadline),
                    )
                    self._wait_ready(page, deadline, cancel_event)
                    return self._inner_html(page)
                finally:
                    browser.close()
        except PlaywrightTimeoutError as exc:
            raise FetchError(f"timed out loading {self.url}: {exc}") from exc
        except PlaywrightError as exc:
            raise FetchError(f"could not load {self.url}: {exc}") from exc

    def fetch_products(self, cancel_event: Optional[threading.Event] = None) -> List[Product]:
        """Fetch the page and extract its available products."""
        html = self.fetch_html(cancel_event)
        products = extract_products(html)
        logger.debug("extracted products count=%d bytes=%d", len(products), len(html))
        return products

    __call__ = fetch_products

    def _wait_ready(self, page: Any, deadline: float, cancel_event: Optional[threading.Event]) -> None:
        while True:
            self._check_cancelled(cancel_event)
            remaining = deadline - self._clock()
            if remaining <= 0:
                raise FetchError(
                    f"selector {self.ready_selector!r} not ready after {self.timeout:g}s"
                )
            try:
                page.wait_for_selector(
                    self.ready_selector,
                    state="attached",
                    timeout=min(self.wait_slice, remaining) * 1000,
                )
                return
            except PlaywrightTimeoutError:
                continue

    def _inner_html(self, page: Any) -> str:
        if page.query_selector(self.content_selector) is None:
            raise FetchError(f"no element matches {self.content_selector!r}")
        return page.eval_on_selector_all(self.content_selector, _INNER_HTML_JS)

    def _remaining_ms(self, deadline: float) -> float:
        # Playwright treats a timeout of 0 as "wait forever".
        return max(deadline - self._clock(), 0.001) * 1000

    @staticmethod
    def _check_cancelled(cancel_event: Optional[threading.Event]) -> None:
        if cancel_event is not None and cancel_event.is_set():
            raise FetchCancelled("fetch cancelled by shutdown request")
