"""Unit tests for product extraction and diff helpers."""

from __future__ import annotations

import pytest

from errors import ParseError
from scanner import (
    absolute_url,
    extract_products,
    find_new_products,
    product_urls,
    should_notify,
)

CATEGORY_HTML = """
<div class="product-card">
  <div class="info-container-wrapper"><span class="name">  Bloemkool
  2e klas </span></div>
  <a class="image" href="/bloemkool-2e-klas"><img src="x.jpg"></a>
</div>
<div class="product-card unavailable">
  <span class="name">Broccoli</span>
  <a class="image" href="/broccoli"></a>
</div>
<div class="product-card">
  <span class="name">Prei</span>
  <a href="/prei-zonder-image-class">Prei</a>
</div>
<div class="product-card">
  <span class="name">Wortels</span>
  <a class="image" href="/wortels"></a>
</div>
"""


def test_extract_products_skips_unavailable_cards_and_keeps_order() -> None:
    """Available cards only, in markup order, with trimmed names."""
    products = extract_products(CATEGORY_HTML)

    assert products == [
        {"name": "Bloemkool 2e klas", "url": "/bloemkool-2e-klas"},
        {"name": "Prei", "url": "not found"},
        {"name": "Wortels", "url": "/wortels"},
    ]


def test_extract_products_uses_placeholder_for_anchor_without_href() -> None:
    """An `a.image` without href counts as unextractable."""
    html = '<div class="product-card"><span class="name">Ui</span><a class="image"></a></div>'

    assert extract_products(html) == [{"name": "Ui", "url": "not found"}]


def test_extract_products_is_idempotent() -> None:
    """Same markup, same output sequence."""
    assert extract_products(CATEGORY_HTML) == extract_products(CATEGORY_HTML)


def test_extract_products_on_empty_fragment() -> None:
    """No cards means an empty list rather than an error."""
    assert extract_products("") == []


def test_extract_products_rejects_non_text_input() -> None:
    """Anything that is not HTML text is a parse failure."""
    with pytest.raises(ParseError):
        extract_products(None)  # type: ignore[arg-type]


def test_find_new_products_uses_url_identity() -> None:
    """A renamed product with a known URL is not new."""
    state = frozenset({"/a"})
    products = [{"name": "A renamed", "url": "/a"}, {"name": "B", "url": "/b"}]

    assert find_new_products(products, state) == [{"name": "B", "url": "/b"}]


def test_product_urls_collapses_placeholders() -> None:
    """Several unextractable URLs share one identity."""
    products = [
        {"name": "X", "url": "not found"},
        {"name": "Y", "url": "not found"},
        {"name": "Z", "url": "/z"},
    ]

    assert product_urls(products) == frozenset({"not found", "/z"})


@pytest.mark.parametrize(
    ("state", "new", "expected"),
    [
        (frozenset(), [{"name": "A", "url": "/a"}], False),
        (frozenset({"/a"}), [], False),
        (frozenset({"/a"}), [{"name": "B", "url": "/b"}], True),
    ],
)
def test_should_notify_requires_baseline_and_delta(state, new, expected) -> None:
    """First-poll suppression and empty deltas both skip the mail."""
    assert should_notify(state, new) is expected


def test_absolute_url_joins_origin() -> None:
    """Relative paths are joined to the site origin, absolute ones kept."""
    assert absolute_url("/wortels", "https://www.hofweb.nl/") == "https://www.hofweb.nl/wortels"
    assert absolute_url("https://elsewhere.test/x") == "https://elsewhere.test/x"
