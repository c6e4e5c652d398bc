#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""Hofweb checker: mail when new 2e klas groentes show up on hofweb.nl."""

from __future__ import annotations

import argparse
import logging
import os
import signal
import sys
import threading
from typing import Any, List, Optional, Sequence

from constants import CATEGORY_URL, DEFAULT_HA_ENTITY, FETCH_TIMEOUT, POLL_INTERVAL
from email_service import EmailNotifier, LoggingNotifier
from errors import FetchError, ParseError
from fetcher import PageFetcher
from logging_utils import setup_logging
from models import MailConfiguration, StatusConfiguration
from poll_loop import PollLoop
from scanner import absolute_url
from status_reporter import build_status_reporter

logger = logging.getLogger(__name__)


def _env(name: str, default: str) -> str:
    return os.getenv(name) or default


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise SystemExit(f"Invalid value for {name}: {raw!r} is not an integer") from exc


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(
        description="Watch the hofweb.nl 2e klas groentes page and mail when new products appear."
    )
    p.add_argument("--mail-host", default=_env("SMTP_HOST", "smtp.example.com"), help="mail host")
    p.add_argument("--mail-port", type=int, default=_env_int("SMTP_PORT", 465), help="mail port")
    p.add_argument("--mail-user", default=_env("SMTP_USER", "user@example.com"), help="login user")
    p.add_argument("--mail-password", default=_env("SMTP_PASSWORD", "secret"), help="login password")
    p.add_argument("--mail-to", default=_env("MAIL_TO", "to@example.com"), help="to address")
    p.add_argument("--mail-cc", default=_env("MAIL_CC", "cc@example.com"), help="cc address")
    p.add_argument("--mail-from", default=_env("MAIL_FROM", "from@example.com"), help="from address")
    p.add_argument("--ha-url", default=_env("HA_URL", ""), help="Home Assistant URL (e.g. http://homeassistant:8123)")
    p.add_argument("--ha-token", default=_env("HA_TOKEN", ""), help="Home Assistant long-lived access token")
    p.add_argument("--ha-entity", default=_env("HA_ENTITY", DEFAULT_HA_ENTITY), help="Home Assistant entity ID")
    p.add_argument(
        "--interval",
        type=int,
        default=_env_int("CHECK_INTERVAL", POLL_INTERVAL),
        help=f"Seconds between checks (default: {POLL_INTERVAL}).",
    )
    p.add_argument(
        "--fetch-timeout",
        type=int,
        default=FETCH_TIMEOUT,
        help=f"Page load timeout in seconds (default: {FETCH_TIMEOUT}).",
    )
    p.add_argument("--check-on-start", action="store_true", help="Run the first check immediately.")
    p.add_argument("--once", action="store_true", help="Fetch once, print the products and exit.")
    p.add_argument("--dry-run", action="store_true", help="Log new products instead of sending mail.")
    p.add_argument("--log-level", default=_env("LOG_LEVEL", "INFO"))
    p.add_argument("--log-file", default=os.getenv("LOG_FILE"))
    args = p.parse_args(argv)

    if args.interval <= 0:
        p.error("--interval must be a positive number of seconds")
    if args.fetch_timeout <= 0:
        p.error("--fetch-timeout must be a positive number of seconds")
    return args


def mail_configuration(args: argparse.Namespace) -> MailConfiguration:
    return MailConfiguration(
        host=args.mail_host,
        port=args.mail_port,
        user=args.mail_user,
        password=args.mail_password,
        from_addr=args.mail_from,
        to_addr=args.mail_to,
        cc_addr=args.mail_cc,
    )


def status_configuration(args: argparse.Namespace) -> StatusConfiguration:
    return StatusConfiguration(base_url=args.ha_url, token=args.ha_token, entity=args.ha_entity)


def build_fetcher(args: argparse.Namespace) -> PageFetcher:
    return PageFetcher(CATEGORY_URL, timeout=args.fetch_timeout)


def run_once(fetcher: PageFetcher) -> int:
    """Single check for manual runs; exit code 1 when the page cannot be read."""
    try:
        products = fetcher.fetch_products()
    except (FetchError, ParseError) as exc:
        logger.error("could not get products error=%s", exc)
        return 1
    for product in products:
        print(f"{product['name']} - {absolute_url(product['url'])}")
    print(f"[OK] {len(products)} products available")
    return 0


def install_signal_handlers(stop_event: threading.Event) -> None:
    def _handle(signum: int, frame: Any) -> None:
        del frame
        logger.info("received signal=%s; stopping", signal.Signals(signum).name)
        stop_event.set()

    for sig in (signal.SIGINT, signal.SIGTERM):
        signal.signal(sig, _handle)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    setup_logging(level=args.log_level, log_file=args.log_file)

    fetcher = build_fetcher(args)
    if args.once:
        return run_once(fetcher)

    notifier = LoggingNotifier() if args.dry_run else EmailNotifier(mail_configuration(args))
    reporter = build_status_reporter(status_configuration(args))
    stop_event = threading.Event()
    install_signal_handlers(stop_event)

    loop = PollLoop(
        fetch_products=fetcher.fetch_products,
        notifier=notifier,
        reporter=reporter,
        interval=args.interval,
        stop_event=stop_event,
        check_on_start=args.check_on_start,
    )
    try:
        loop.run()
    finally:
        reporter.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())
