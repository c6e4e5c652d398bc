"""Product extraction and poll-over-poll diffing."""

from __future__ import annotations

from typing import Iterable, List, Sequence

from bs4 import BeautifulSoup
from bs4.builder import ParserRejectedMarkup

from constants import (
    LINK_SELECTOR,
    NAME_SELECTOR,
    NOT_FOUND_URL,
    PRODUCT_SELECTOR,
    SITE_ORIGIN,
)
from errors import ParseError
from models import PollState, Product

__all__ = [
    "parse_fragment",
    "extract_products",
    "product_urls",
    "find_new_products",
    "should_notify",
    "absolute_url",
]


def parse_fragment(html: str) -> BeautifulSoup:
    """Build a document tree from an HTML fragment or raise `ParseError`."""
    if not isinstance(html, str):
        raise ParseError(f"expected HTML text, got {type(html).__name__}")
    try:
        return BeautifulSoup(html, "html.parser")
    except ParserRejectedMarkup as exc:
        raise ParseError(f"could not parse product markup: {exc}") from exc


def extract_products(html: str) -> List[Product]:
    """Return the available product cards in document order."""
    soup = parse_fragment(html)
    products: List[Product] = []
    for card in soup.select(PRODUCT_SELECTOR):
        name_tag = card.select_one(NAME_SELECTOR)
        name = " ".join(name_tag.get_text(" ").split()) if name_tag else ""
        link = card.select_one(LINK_SELECTOR)
        href = link.get("href") if link is not None else None
        products.append({"name": name, "url": href or NOT_FOUND_URL})
    return products


def product_urls(products: Iterable[Product]) -> PollState:
    """Collect the diff identities of a product list."""
    return frozenset(p["url"] for p in products)


def find_new_products(products: Sequence[Product], state: PollState) -> List[Product]:
    """Products whose URL is not in `state`, keeping page order."""
    return [p for p in products if p["url"] not in state]


def should_notify(state: PollState, new_products: Sequence[Product]) -> bool:
    """Notify only against a non-empty baseline."""
    return bool(state) and bool(new_products)


def absolute_url(path: str, origin: str = SITE_ORIGIN) -> str:
    if path.startswith(("http://", "https://")):
        return path
    return origin.rstrip("/") + "/" + path.lstrip("/")
