# api_client.py
from __future__ import annotations

import logging
import random
import time
from typing import Callable, Mapping

import httpx

from errors import TransportError

logger = logging.getLogger(__name__)

DEFAULT_MAX_ATTEMPTS = 3
BACKOFF_BASE_S = 2.0


class ResilientClient:
    """HTTP requests with bounded exponential backoff.

    After failed attempt ``i`` (0-indexed) the client waits ``2**i`` seconds plus
    a uniform jitter in ``[0, 1)`` before trying again. A non-2xx status counts as
    a failure, never as a returned value. Nothing on the instance changes per
    request, so one client can be shared between sessions.
    """

    def __init__(
        self,
        http: httpx.Client | None = None,
        *,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        timeout: float = 15.0,
        sleep: Callable[[float], None] = time.sleep,
        jitter: Callable[[], float] = random.random,
    ):
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self._owns_http = http is None
        # Apps Script answers with a 302 to googleusercontent.com
        self._http = http or httpx.Client(timeout=timeout, follow_redirects=True)
        self.max_attempts = max_attempts
        self._sleep = sleep
        self._jitter = jitter

    def request(
        self,
        method: str,
        url: str,
        *,
        params: Mapping[str, str] | None = None,
        content: str | bytes | None = None,
        headers: Mapping[str, str] | None = None,
        max_attempts: int | None = None,
    ) -> httpx.Response:
        attempts = self.max_attempts if max_attempts is None else max_attempts
        if attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        endpoint = _describe(url, params)

        last_error: Exception | None = None
        for attempt in range(attempts):
            try:
                response = self._http.request(method, url, params=params, content=content, headers=headers)
                response.raise_for_status()
                return response
            except httpx.HTTPError as exc:
                last_error = exc
                if attempt + 1 >= attempts:
                    break
                delay = BACKOFF_BASE_S ** attempt + self._jitter()
                logger.warning(
                    "%s %s failed (attempt %d/%d): %s; retrying in %.2fs",
                    method, endpoint, attempt + 1, attempts, exc, delay,
                )
                self._sleep(delay)

        logger.error("%s %s failed after %d attempts: %s", method, endpoint, attempts, last_error)
        raise TransportError(
            f"{method} {endpoint} failed after {attempts} attempt(s): {last_error}",
            method=method,
            endpoint=endpoint,
            attempts=attempts,
        ) from last_error

    def close(self) -> None:
        if self._owns_http:
            self._http.close()

    def __enter__(self) -> "ResilientClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


def _describe(url: str, params: Mapping[str, str] | None) -> str:
    action = (params or {}).get("action")
    return f"{url} [action={action}]" if action else url


__all__ = ["ResilientClient", "DEFAULT_MAX_ATTEMPTS"]
