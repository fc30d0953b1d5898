"""Journey records: CRUD and the acceptance flag."""

import json
import logging
from pathlib import Path
from typing import Any

from journey_viewer.models import Journey

from .core import journeys_dir

logger = logging.getLogger(__name__)


def _journey_path(slug: str) -> Path:
    return journeys_dir() / f"{slug}.json"


def _write(journey: dict[str, Any]) -> None:
    _journey_path(journey["slug"]).write_text(json.dumps(journey, indent=2))


def list_journeys() -> list[dict[str, Any]]:
    results = []
    for path in sorted(journeys_dir().glob("*.json")):
        results.append(json.loads(path.read_text()))
    return results


def get_journey(slug: str) -> dict[str, Any] | None:
    path = _journey_path(slug)
    if not path.is_file():
        return None
    return json.loads(path.read_text())


def load_journey(slug: str) -> Journey | None:
    """Read and validate a record for playback."""
    raw = get_journey(slug)
    if raw is None:
        return None
    return Journey.model_validate(raw)


def create_journey(fields: dict[str, Any]) -> dict[str, Any]:
    """Store a new journey. Raises JourneyExists if the slug is taken."""
    journey = Journey.model_validate({**fields, "is_accepted": False})
    if _journey_path(journey.slug).exists():
        raise JourneyExists(journey.slug)
    record = journey.model_dump(mode="json", exclude_none=True)
    _write(record)
    logger.info("journey created slug=%s", journey.slug)
    return record


def delete_journey(slug: str) -> bool:
    path = _journey_path(slug)
    if not path.is_file():
        return False
    path.unlink()
    return True


def mark_accepted(slug: str) -> dict[str, Any] | None:
    """Set is_accepted. Idempotent; the flag is never cleared.

    Returns the updated record, or None when the slug does not exist.
    """
    journey = get_journey(slug)
    if journey is None:
        return None
    if not journey.get("is_accepted"):
        journey["is_accepted"] = True
        _write(journey)
        logger.info("journey accepted slug=%s", slug)
    return journey


class JourneyExists(ValueError):
    """Raised when creating a journey whose slug is already stored."""

    def __init__(self, slug: str) -> None:
        self.slug = slug
        super().__init__(f"Journey '{slug}' already exists")
