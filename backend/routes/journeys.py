"""Journey record endpoints."""

from fastapi import APIRouter, HTTPException

from backend import storage

from .models import CreateJourney

router = APIRouter()

PRIVATE_FIELDS = ("passcode", "proposer_phone")


def _public(journey: dict) -> dict:
    return {k: v for k, v in journey.items() if k not in PRIVATE_FIELDS}


@router.get("/journeys")
async def list_journeys():
    """List journey summaries (slug, names, acceptance)."""
    return [
        {
            "slug": j["slug"],
            "partner_name": j["partner_name"],
            "proposer_name": j["proposer_name"],
            "is_accepted": j.get("is_accepted", False),
            "created_at": j.get("created_at"),
        }
        for j in storage.list_journeys()
    ]


@router.post("/journeys")
async def create_journey(body: CreateJourney):
    """Create a journey from validated, trimmed input."""
    try:
        journey = storage.create_journey(body.model_dump(exclude_none=True))
    except storage.JourneyExists as e:
        raise HTTPException(409, str(e))
    return _public(journey)


@router.get("/journeys/{slug}")
async def get_journey(slug: str):
    """Get a journey by slug, without its passcode."""
    journey = storage.get_journey(slug)
    if not journey:
        raise HTTPException(404, "Journey not found")
    return _public(journey)


@router.delete("/journeys/{slug}")
async def delete_journey(slug: str):
    """Delete a journey."""
    if not storage.delete_journey(slug):
        raise HTTPException(404, "Journey not found")
    return {"ok": True}
