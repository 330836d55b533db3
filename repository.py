# repository.py
from __future__ import annotations

import json
import logging
from typing import Any, Dict, List

import httpx

from api_client import ResilientClient
from config import MODE_LEGACY, AppConfig
from errors import ApplicationError, UnsupportedActionError

logger = logging.getLogger(__name__)

FALLBACK_MESSAGE = "The shift store reported an error."
# text/plain keeps the browser-style request "simple": Apps Script web apps
# cannot answer a CORS preflight.
POST_HEADERS = {"Content-Type": "text/plain;charset=utf-8"}


class ShiftRepository:
    """Spreadsheet-backed shift store reached through a Google Apps Script web app.

    Every call checks the configured endpoint first, so an unconfigured app
    fails with :class:`ConfigurationError` without touching the network.
    """

    def __init__(self, client: ResilientClient, config: AppConfig):
        self.client = client
        self.config = config

    @property
    def is_legacy(self) -> bool:
        return self.config.mode == MODE_LEGACY

    def list_all(self) -> List[Dict[str, Any]]:
        params = None if self.is_legacy else {"action": "getShifts"}
        envelope = self._send("GET", params=params)
        data = envelope.get("data", [])
        if not isinstance(data, list):
            raise ApplicationError("Failed to parse data from the shift store.")
        return [row for row in data if isinstance(row, dict)]

    def add(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        params = None if self.is_legacy else {"action": "addShift"}
        return self._send("POST", params=params, body=payload)

    def update(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        if self.is_legacy:
            raise UnsupportedActionError("The legacy endpoint cannot update shifts.")
        return self._send("POST", params={"action": "updateShift"}, body=payload)

    def delete(self, shift_id: str) -> Dict[str, Any]:
        if self.is_legacy:
            raise UnsupportedActionError("The legacy endpoint cannot delete shifts.")
        return self._send("POST", params={"action": "deleteShift"}, body={"id": shift_id})

    def _send(self, method: str, *, params: Dict[str, str] | None = None, body: Any = None) -> Dict[str, Any]:
        url = self.config.require_endpoint()
        if body is None:
            response = self.client.request(method, url, params=params)
        else:
            response = self.client.request(
                method, url, params=params, content=json.dumps(body), headers=POST_HEADERS
            )
        return parse_envelope(response)


def parse_envelope(response: httpx.Response) -> Dict[str, Any]:
    """Returns the decoded envelope, raising ApplicationError unless status is success."""
    try:
        envelope = response.json()
    except ValueError as exc:
        raise ApplicationError(f"The shift store returned a malformed response: {exc}") from exc
    if not isinstance(envelope, dict):
        raise ApplicationError("The shift store returned a malformed response.")
    if envelope.get("status") != "success":
        message = envelope.get("message") or FALLBACK_MESSAGE
        logger.warning("Shift store rejected request: %s", message)
        raise ApplicationError(str(message))
    return envelope


__all__ = ["ShiftRepository", "parse_envelope", "FALLBACK_MESSAGE"]
