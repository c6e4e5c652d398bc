"""The poll-diff-notify loop."""

from __future__ import annotations

import logging
import threading
import time
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional, Protocol, Sequence

from constants import (
    POLL_INTERVAL,
    STATE_CHECKING,
    STATE_ERROR,
    STATE_IDLE,
    STATUS_FRIENDLY_NAME,
)
from errors import DeliveryError, FetchCancelled, FetchError, ParseError, ReportError
from models import EMPTY_STATE, CycleOutcome, PollState, Product
from scanner import find_new_products, product_urls, should_notify

__all__ = ["utc_now_iso", "run_cycle", "PollLoop"]

logger = logging.getLogger(__name__)

FetchProducts = Callable[[Optional[threading.Event]], List[Product]]
Notifier = Callable[[Sequence[Product]], None]


class Reporter(Protocol):
    def report(self, state: str, attributes: Dict[str, Any]) -> None: ...


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).replace(microsecond=0).isoformat()


def _report(reporter: Reporter, state: str, attributes: Dict[str, Any]) -> None:
    attributes.setdefault("friendly_name", STATUS_FRIENDLY_NAME)
    try:
        reporter.report(state, attributes)
    except ReportError as exc:
        logger.error("failed to update homeassistant state=%s error=%s", state, exc)


def run_cycle(
    state: PollState,
    *,
    fetch_products: FetchProducts,
    notifier: Notifier,
    reporter: Reporter,
    cancel_event: Optional[threading.Event] = None,
    clock: Callable[[], str] = utc_now_iso,
) -> CycleOutcome:
    """Run one poll cycle against the previous `state` and return the next one.

    A failed fetch or parse returns `state` untouched and sends nothing.
    Notification is skipped while `state` is empty so the first successful
    poll only establishes a baseline. A failed notification is logged but
    the returned state still reflects the fetched products; the same delta
    is not retried on the next poll.
    """
    logger.info("checking page...")
    _report(reporter, STATE_CHECKING, {"last_check_start": clock(), "icon": "mdi:web"})

    try:
        products = fetch_products(cancel_event)
    except FetchCancelled as exc:
        logger.info("check cancelled by shutdown reason=%s", exc)
        return CycleOutcome(state=state, error=str(exc))
    except (FetchError, ParseError) as exc:
        logger.error("could not get products error=%s", exc)
        _report(
            reporter,
            STATE_ERROR,
            {"last_error": str(exc), "last_check_end": clock(), "icon": "mdi:alert"},
        )
        return CycleOutcome(state=state, error=str(exc))

    current = product_urls(products)
    new_products = find_new_products(products, state)
    logger.info("fetched products total=%d new=%d", len(products), len(new_products))

    notified = False
    if should_notify(state, new_products):
        try:
            notifier(new_products)
        except DeliveryError as exc:
            logger.error("could not notify of new products count=%d error=%s", len(new_products), exc)
        else:
            notified = True
            logger.info("notification sent count=%d", len(new_products))
    elif new_products and not state:
        logger.info("no baseline yet; not notifying count=%d", len(new_products))

    _report(
        reporter,
        STATE_IDLE,
        {"last_check_end": clock(), "icon": "mdi:power", "count": len(products)},
    )
    return CycleOutcome(
        state=current,
        products=list(products),
        new_products=new_products,
        notified=notified,
    )


class PollLoop:
    """Drive `run_cycle` on a fixed interval until stopped.

    The timer and the stop request share one `threading.Event`: waiting on it
    with a timeout is the timer tick, and setting it wakes the loop at once.
    Ticks are fixed-rate from the start time, so the length of a cycle does
    not shift the next one. Ticks missed while a cycle overran are dropped.
    The same event is handed to the fetch so an in-flight page load can bail
    out early; otherwise a stop during a cycle takes effect when it returns.
    """

    def __init__(
        self,
        *,
        fetch_products: FetchProducts,
        notifier: Notifier,
        reporter: Reporter,
        interval: float = POLL_INTERVAL,
        stop_event: Optional[threading.Event] = None,
        check_on_start: bool = False,
        monotonic: Callable[[], float] = time.monotonic,
    ) -> None:
        if interval <= 0:
            raise ValueError("interval must be positive")
        self.fetch_products = fetch_products
        self.notifier = notifier
        self.reporter = reporter
        self.interval = interval
        self.stop_event = stop_event or threading.Event()
        self.check_on_start = check_on_start
        self.cycles = 0
        self._monotonic = monotonic
        self._state: PollState = EMPTY_STATE

    @property
    def state(self) -> PollState:
        return self._state

    def stop(self) -> None:
        self.stop_event.set()

    def run_once(self) -> CycleOutcome:
        outcome = run_cycle(
            self._state,
            fetch_products=self.fetch_products,
            notifier=self.notifier,
            reporter=self.reporter,
            cancel_event=self.stop_event,
        )
        self._state = outcome.state
        self.cycles += 1
        return outcome

    def next_tick(self, previous: float) -> float:
        """Next tick after `previous` that is still in the future."""
        tick = previous + self.interval
        now = self._monotonic()
        if tick <= now:
            missed = int((now - tick) // self.interval) + 1
            tick += missed * self.interval
            logger.warning("check overran its interval; skipped ticks=%d", missed)
        return tick

    def run(self) -> None:
        logger.info("hofweb checker started interval=%gs", self.interval)
        tick = self._monotonic()
        if self.check_on_start and not self.stop_event.is_set():
            self.run_once()
        tick = self.next_tick(tick)
        while not self.stop_event.wait(max(0.0, tick - self._monotonic())):
            self.run_once()
            tick = self.next_tick(tick)
        logger.info("exiting...")
        logger.info("done cycles=%d", self.cycles)
