"""Passcode gate in front of the unlocked experience."""

from __future__ import annotations

import logging
from typing import Callable

logger = logging.getLogger(__name__)

MISMATCH_ERROR = "That key doesn't fit this lock."


def normalize_passcode(value: str) -> str:
    return value.strip().lower()


class AccessGate:
    """Compares entries against the stored passcode, ignoring case and
    surrounding whitespace. Purely local: no attempt limit, no network."""

    def __init__(self, passcode: str, on_unlock: Callable[[], None]) -> None:
        self._expected = normalize_passcode(passcode)
        self._on_unlock = on_unlock
        self.error = ""
        self.unlocked = False

    def submit(self, entry: str) -> bool:
        if normalize_passcode(entry) != self._expected:
            self.error = MISMATCH_ERROR
            logger.debug("passcode mismatch")
            return False
        self.error = ""
        self.unlocked = True
        self._on_unlock()
        return True

    def edit(self) -> None:
        """The user changed the field; drop any previous error."""
        self.error = ""
