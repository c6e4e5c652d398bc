"""Home Assistant status reporting."""

from __future__ import annotations

import logging
from typing import Any, Mapping, Optional, Union

import requests

from errors import ReportError
from models import StatusConfiguration, StatusReport

__all__ = [
    "build_session",
    "HomeAssistantReporter",
    "NullStatusReporter",
    "StatusReporter",
    "build_status_reporter",
]

logger = logging.getLogger(__name__)


def build_session(token: str) -> requests.Session:
    """Create a `requests.Session` carrying the bearer token. No retries."""
    session = requests.Session()
    session.headers.update({
        "Authorization": f"Bearer {token}",
        "Content-Type": "application/json",
    })
    return session


class HomeAssistantReporter:
    """Upsert the checker's state through `POST /api/states/<entity>`."""

    def __init__(self, config: StatusConfiguration, session: Optional[requests.Session] = None) -> None:
        self.config = config
        self.session = session or build_session(config.token)

    @property
    def endpoint(self) -> str:
        return f"{self.config.base_url.rstrip('/')}/api/states/{self.config.entity}"

    def report(self, state: str, attributes: Mapping[str, Any]) -> None:
        payload: StatusReport = {"state": state, "attributes": dict(attributes)}
        try:
            resp = self.session.post(self.endpoint, json=payload, timeout=self.config.timeout)
        except requests.exceptions.RequestException as exc:
            raise ReportError(f"failed to send request: {exc}") from exc
        if not 200 <= resp.status_code < 300:
            raise ReportError(
                f"Home Assistant API returned status {resp.status_code}",
                status_code=resp.status_code,
            )
        logger.debug("status reported state=%s entity=%s", state, self.config.entity)

    def close(self) -> None:
        self.session.close()


class NullStatusReporter:
    """No-op reporter used when Home Assistant is not configured."""

    def report(self, state: str, attributes: Mapping[str, Any]) -> None:
        del state, attributes

    def close(self) -> None:
        pass


StatusReporter = Union[HomeAssistantReporter, NullStatusReporter]


def build_status_reporter(config: StatusConfiguration) -> StatusReporter:
    if not config.enabled:
        logger.info("Home Assistant not configured; status reporting disabled")
        return NullStatusReporter()
    return HomeAssistantReporter(config)
