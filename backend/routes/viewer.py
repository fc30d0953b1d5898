"""Viewer session endpoints.

A client opens a session for a slug, polls its snapshot, and forwards user
gestures. Actions that do not belong to the current phase return 409.
"""

from fastapi import APIRouter, HTTPException

from backend import sessions
from journey_viewer.sequencer import IllegalTransition
from journey_viewer.session import JourneySession

from .models import PasscodeBody, VideoEndedBody, ViewportBody

router = APIRouter()


def _session_or_404(session_id: str) -> JourneySession:
    session = sessions.get_session(session_id)
    if session is None:
        raise HTTPException(404, "Session not found")
    return session


@router.post("/journeys/{slug}/sessions")
async def open_session(slug: str):
    """Open a viewer session; assets start preloading immediately."""
    opened = sessions.open_session(slug)
    if opened is None:
        raise HTTPException(404, "Journey not found")
    session_id, session = opened
    return {"id": session_id, **session.snapshot()}


@router.get("/sessions/{session_id}")
async def get_session(session_id: str):
    """Current snapshot of a session."""
    return _session_or_404(session_id).snapshot()


@router.delete("/sessions/{session_id}")
async def close_session(session_id: str):
    """Close a session and cancel its timers."""
    if not sessions.close_session(session_id):
        raise HTTPException(404, "Session not found")
    return {"ok": True}


@router.post("/sessions/{session_id}/passcode")
async def submit_passcode(session_id: str, body: PasscodeBody):
    """Try a passcode at the gate."""
    session = _session_or_404(session_id)
    try:
        unlocked = session.submit_passcode(body.passcode)
    except IllegalTransition as e:
        raise HTTPException(409, str(e))
    return {"unlocked": unlocked, **session.snapshot()}


@router.post("/sessions/{session_id}/passcode/edit")
async def edit_passcode(session_id: str):
    """The passcode field changed; clears the gate error."""
    session = _session_or_404(session_id)
    session.edit_passcode()
    return session.snapshot()


@router.post("/sessions/{session_id}/audio/toggle")
async def toggle_audio(session_id: str):
    """Pause or resume background music."""
    session = _session_or_404(session_id)
    playing = session.toggle_audio()
    return {"playing": playing}


@router.post("/sessions/{session_id}/gallery/ended")
async def video_ended(session_id: str, body: VideoEndedBody):
    """A gallery video finished playing."""
    session = _session_or_404(session_id)
    advanced = session.video_ended(body.index)
    return {"advanced": advanced, **session.snapshot()}


@router.post("/sessions/{session_id}/accept")
async def accept(session_id: str):
    """Say yes."""
    session = _session_or_404(session_id)
    try:
        await session.accept()
    except IllegalTransition as e:
        raise HTTPException(409, str(e))
    return session.snapshot()


@router.post("/sessions/{session_id}/decline/hover")
async def decline_hover(session_id: str, body: ViewportBody):
    """The pointer reached the decline button; move it away."""
    session = _session_or_404(session_id)
    try:
        position = session.decline_hover(body.width, body.height)
    except IllegalTransition as e:
        raise HTTPException(409, str(e))
    return {"x": position.x, "y": position.y, "phase": session.phase.value}
