"""Data structures used across the checker."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, List, Optional, TypedDict

from constants import DEFAULT_HA_ENTITY, SMTP_TIMEOUT, STATUS_TIMEOUT

PollState = FrozenSet[str]
"""URLs known as of the last successful poll."""

EMPTY_STATE: PollState = frozenset()


class Product(TypedDict):
    """One available product card; ``url`` is its diff identity."""

    name: str
    url: str


class StatusReport(TypedDict):
    """Payload pushed to the Home Assistant states endpoint."""

    state: str
    attributes: Dict[str, Any]


@dataclass(frozen=True)
class MailConfiguration:
    """SMTP relay settings, loaded once at startup."""

    host: str
    port: int
    user: str
    password: str
    from_addr: str
    to_addr: str
    cc_addr: str = ""
    timeout: int = SMTP_TIMEOUT


@dataclass(frozen=True)
class StatusConfiguration:
    """Home Assistant connection settings."""

    base_url: str = ""
    token: str = ""
    entity: str = DEFAULT_HA_ENTITY
    timeout: int = STATUS_TIMEOUT

    @property
    def enabled(self) -> bool:
        return bool(self.base_url and self.token)


@dataclass
class CycleOutcome:
    """Result of one poll cycle, carrying the state for the next one."""

    state: PollState
    products: List[Product] = field(default_factory=list)
    new_products: List[Product] = field(default_factory=list)
    notified: bool = False
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


__all__ = [
    "PollState",
    "EMPTY_STATE",
    "Product",
    "StatusReport",
    "MailConfiguration",
    "StatusConfiguration",
    "CycleOutcome",
]
