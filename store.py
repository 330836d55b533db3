# store.py
from __future__ import annotations

import logging
from enum import Enum
from typing import Callable, Optional, Tuple

from domain import DEFAULT_TIMEZONE, Shift
from errors import ShiftsError
from normalizer import normalize_all, to_payload
from repository import ShiftRepository

logger = logging.getLogger(__name__)


class LoadState(str, Enum):
    IDLE = "idle"
    LOADING = "loading"


class Outcome(str, Enum):
    SUCCESS = "success"
    FAILURE = "failure"


class ShiftStore:
    """Owns the in-memory shift collection.

    The collection is only ever replaced wholesale from a fresh fetch: writes
    go to the remote store and then trigger a full refetch, there is no local
    merge. A failed operation leaves the collection as it was and records a
    message in ``error``.
    """

    def __init__(self, repository: ShiftRepository, timezone: str = DEFAULT_TIMEZONE):
        self.repository = repository
        self.timezone = timezone
        self.shifts: Tuple[Shift, ...] = ()
        self.state = LoadState.IDLE
        self.last_outcome: Optional[Outcome] = None
        self.error: Optional[str] = None
        self._generation = 0

    def find(self, shift_id: str) -> Optional[Shift]:
        return next((s for s in self.shifts if s.id == shift_id), None)

    def fetch_all(self) -> bool:
        self._generation += 1
        generation = self._generation
        self.state = LoadState.LOADING
        try:
            records = self.repository.list_all()
        except ShiftsError as exc:
            if generation != self._generation:
                return False
            return self._fail("Failed to load shifts.", exc)
        finally:
            self.state = LoadState.IDLE

        if generation != self._generation:
            # A newer fetch already replaced the collection
            logger.info("Discarding stale fetch result (generation %d)", generation)
            return True

        self.shifts = _unique_by_id(normalize_all(records, self.timezone))
        self.error = None
        self.last_outcome = Outcome.SUCCESS
        logger.info("Loaded %d shifts", len(self.shifts))
        return True

    def save(self, shift: Shift) -> bool:
        """Adds or updates depending on whether the id is already in the collection."""
        is_update = self.find(shift.id) is not None
        payload = to_payload(shift)
        self.state = LoadState.LOADING
        try:
            if is_update:
                self.repository.update(payload)
            else:
                self.repository.add(payload)
        except ShiftsError as exc:
            return self._fail("Failed to save the shift.", exc)
        finally:
            self.state = LoadState.IDLE

        logger.info("%s shift %s", "Updated" if is_update else "Added", shift.id)
        self.fetch_all()
        return True

    def delete(self, shift_id: str, confirm: Callable[[str], bool]) -> bool:
        if not confirm(shift_id):
            logger.info("Delete of shift %s not confirmed", shift_id)
            return False
        self.state = LoadState.LOADING
        try:
            self.repository.delete(shift_id)
        except ShiftsError as exc:
            return self._fail("Failed to delete the shift.", exc)
        finally:
            self.state = LoadState.IDLE

        logger.info("Deleted shift %s", shift_id)
        self.fetch_all()
        return True

    def take_error(self) -> Optional[str]:
        """Returns the pending error message once, then forgets it."""
        message, self.error = self.error, None
        return message

    def _fail(self, prefix: str, exc: ShiftsError) -> bool:
        logger.error("%s %s", prefix, exc)
        self.error = f"{prefix} Error: {exc}"
        self.last_outcome = Outcome.FAILURE
        return False


def _unique_by_id(shifts: list[Shift]) -> Tuple[Shift, ...]:
    seen: set[str] = set()
    unique = []
    for s in shifts:
        if s.id in seen:
            logger.warning("Duplicate shift id %s from store; keeping the first row", s.id)
            continue
        seen.add(s.id)
        unique.append(s)
    return tuple(unique)


__all__ = ["ShiftStore", "LoadState", "Outcome"]
