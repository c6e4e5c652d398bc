"""Shared configuration constants for the checker."""

from __future__ import annotations

from pathlib import Path

SITE_ORIGIN = "https://www.hofweb.nl"
CATEGORY_URL = f"{SITE_ORIGIN}/groente-aardappels/2e-klas-groentes"

# Selectors for the JavaScript-rendered category page.
READY_SELECTOR = ".info-container-wrapper .name"
CONTENT_SELECTOR = ".category--products-wrapper"
PRODUCT_SELECTOR = ".product-card:not(.unavailable)"
NAME_SELECTOR = ".name"
LINK_SELECTOR = "a.image"

NOT_FOUND_URL = "not found"

POLL_INTERVAL = 5 * 60
FETCH_TIMEOUT = 60
FETCH_WAIT_SLICE = 1.0
SMTP_TIMEOUT = 30
STATUS_TIMEOUT = 10

STATE_CHECKING = "checking"
STATE_IDLE = "idle"
STATE_ERROR = "error"
STATUS_FRIENDLY_NAME = "Hofweb checker"
DEFAULT_HA_ENTITY = "sensor.hofweb_checker"

TEMPLATES_DIR = Path(__file__).resolve().parent / "templates"
EMAIL_TEMPLATE = "email_notification.html"
EMAIL_SUBJECT = "Nieuwe 2e klas groentes beschikbaar op hofweb.nl"
EMAIL_HEADING = "Nieuwe 2e klas groentes bij Hofweb"

_EXPORTED_NAMES = (
    "SITE_ORIGIN",
    "CATEGORY_URL",
    "READY_SELECTOR",
    "CONTENT_SELECTOR",
    "PRODUCT_SELECTOR",
    "NAME_SELECTOR",
    "LINK_SELECTOR",
    "NOT_FOUND_URL",
    "POLL_INTERVAL",
    "FETCH_TIMEOUT",
    "FETCH_WAIT_SLICE",
    "SMTP_TIMEOUT",
    "STATUS_TIMEOUT",
    "STATE_CHECKING",
    "STATE_IDLE",
    "STATE_ERROR",
    "STATUS_FRIENDLY_NAME",
    "DEFAULT_HA_ENTITY",
    "TEMPLATES_DIR",
    "EMAIL_TEMPLATE",
    "EMAIL_SUBJECT",
    "EMAIL_HEADING",
)

__all__ = [name for name in _EXPORTED_NAMES if name in globals()]
