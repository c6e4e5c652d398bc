"""Email rendering and delivery helpers."""

from __future__ import annotations

import logging
import smtplib
from email.message import EmailMessage
from typing import List, Optional, Sequence

from jinja2 import Environment, FileSystemLoader, select_autoescape

from constants import (
    CATEGORY_URL,
    EMAIL_HEADING,
    EMAIL_SUBJECT,
    EMAIL_TEMPLATE,
    SITE_ORIGIN,
    TEMPLATES_DIR,
)
from errors import DeliveryError
from models import MailConfiguration, Product
from scanner import absolute_url

__all__ = [
    "build_template_env",
    "render_email_html",
    "render_email_text",
    "send_email",
    "EmailNotifier",
    "LoggingNotifier",
]

logger = logging.getLogger(__name__)

SMTPS_PORT = 465


def build_template_env() -> Environment:
    return Environment(
        loader=FileSystemLoader(str(TEMPLATES_DIR)),
        autoescape=select_autoescape(["html"]),
    )


def _links(products: Sequence[Product], origin: str) -> List[dict]:
    return [{"name": p["name"], "href": absolute_url(p["url"], origin)} for p in products]


def render_email_html(
    products: Sequence[Product],
    *,
    env: Environment,
    origin: str = SITE_ORIGIN,
    category_url: str = CATEGORY_URL,
) -> str:
    template = env.get_template(EMAIL_TEMPLATE)
    return template.render(
        heading=EMAIL_HEADING,
        category_url=category_url,
        products=_links(products, origin),
    )


def render_email_text(
    products: Sequence[Product],
    *,
    origin: str = SITE_ORIGIN,
    category_url: str = CATEGORY_URL,
) -> str:
    """Plain-text fallback for clients that do not render HTML."""
    lines = [EMAIL_HEADING, "", f"Alle producten: {category_url}", ""]
    for link in _links(products, origin):
        lines.append(f"- {link['name']}: {link['href']}")
    return "\n".join(lines)


def send_email(config: MailConfiguration, subject: str, html_body: str, text_body: str) -> None:
    """
    Deliver one message through the configured relay.
    Port 465 speaks implicit TLS, any other port upgrades with STARTTLS
    when the server offers it.
    """
    msg = EmailMessage()
    msg["Subject"] = subject
    msg["From"] = config.from_addr
    msg["To"] = config.to_addr
    if config.cc_addr:
        msg["Cc"] = config.cc_addr

    msg.set_content(text_body)
    msg.add_alternative(html_body, subtype="html")

    try:
        if config.port == SMTPS_PORT:
            server: smtplib.SMTP = smtplib.SMTP_SSL(config.host, config.port, timeout=config.timeout)
        else:
            server = smtplib.SMTP(config.host, config.port, timeout=config.timeout)
        with server:
            server.ehlo()
            if config.port != SMTPS_PORT and server.has_extn("starttls"):
                server.starttls()
                server.ehlo()
            if config.user and config.password:
                server.login(config.user, config.password)
            server.send_message(msg)
    except (smtplib.SMTPException, OSError) as exc:
        raise DeliveryError(f"could not send mail via {config.host}:{config.port}: {exc}") from exc


class EmailNotifier:
    """Compose and send the "new products" email."""

    def __init__(
        self,
        config: MailConfiguration,
        *,
        env: Optional[Environment] = None,
        origin: str = SITE_ORIGIN,
        category_url: str = CATEGORY_URL,
    ) -> None:
        self.config = config
        self.env = env or build_template_env()
        self.origin = origin
        self.category_url = category_url

    def __call__(self, products: Sequence[Product]) -> None:
        if not products:
            raise ValueError("refusing to send a notification without products")
        html = render_email_html(
            products, env=self.env, origin=self.origin, category_url=self.category_url
        )
        text = render_email_text(products, origin=self.origin, category_url=self.category_url)
        send_email(self.config, EMAIL_SUBJECT, html, text)


class LoggingNotifier:
    """Stand-in used with --dry-run: logs what would have been mailed."""

    def __init__(self, origin: str = SITE_ORIGIN) -> None:
        self.origin = origin

    def __call__(self, products: Sequence[Product]) -> None:
        for link in _links(products, self.origin):
            logger.info("dry run: new product name=%r url=%s", link["name"], link["href"])
