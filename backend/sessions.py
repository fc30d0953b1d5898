"""In-memory registry of live viewer sessions.

Sessions hold timers on the serving event loop, so they live only as long as
the process. init_sessions() is called by create_app() (and by tests) to pick
the asset loader and scheduler; by default assets are fetched over HTTP and
timers run on the running asyncio loop.

A session that is neither polled nor acted on for SESSION_IDLE_SECONDS is
closed the next time the registry is touched. Closing a session cancels its
background preload and with it any asset fetches still in flight.
"""

import asyncio
import logging
import time
import uuid
from typing import Callable

from journey_viewer.preloader import AssetLoader, HttpAssetLoader
from journey_viewer.session import JourneySession
from journey_viewer.timers import LoopScheduler, Scheduler

from backend import storage

logger = logging.getLogger(__name__)

SESSION_IDLE_SECONDS = 60 * 60

_sessions: dict[str, JourneySession] = {}
_preloads: dict[str, asyncio.Task] = {}
_last_seen: dict[str, float] = {}
_clock: Callable[[], float] = time.monotonic
_loader_factory: Callable[[], AssetLoader] | None = None
_scheduler: Scheduler | None = None


def init_sessions(
    loader_factory: Callable[[], AssetLoader] | None = None,
    scheduler: Scheduler | None = None,
) -> None:
    global _loader_factory, _scheduler
    close_all()
    _loader_factory = loader_factory
    _scheduler = scheduler


def _make_loader() -> AssetLoader:
    if _loader_factory is not None:
        return _loader_factory()
    settings = storage.get_loader_settings()
    return HttpAssetLoader(
        timeout=settings.asset_request_timeout,
        metadata_bytes=settings.metadata_bytes,
    )


async def _persist_acceptance(slug: str) -> None:
    if storage.mark_accepted(slug) is None:
        raise LookupError(f"Journey '{slug}' no longer exists")


def _evict_idle() -> None:
    cutoff = _clock() - SESSION_IDLE_SECONDS
    for session_id, seen in list(_last_seen.items()):
        if seen < cutoff:
            logger.info("session %s idle, closing", session_id)
            close_session(session_id)


def open_session(slug: str) -> tuple[str, JourneySession] | None:
    """Start a viewer session for a journey and begin preloading in the
    background. Returns None when the slug is unknown."""
    _evict_idle()
    journey = storage.load_journey(slug)
    if journey is None:
        return None
    session = JourneySession(
        journey,
        scheduler=_scheduler or LoopScheduler(),
        loader=_make_loader(),
        persist_acceptance=_persist_acceptance,
        timings=storage.get_timings(),
    )
    session_id = uuid.uuid4().hex
    _sessions[session_id] = session
    _last_seen[session_id] = _clock()

    task = asyncio.get_running_loop().create_task(session.preload())
    _preloads[session_id] = task
    task.add_done_callback(lambda _t: _preloads.pop(session_id, None))
    logger.info("session %s opened for %s (%d assets)", session_id, slug, len(session.view.assets))
    return session_id, session


def get_session(session_id: str) -> JourneySession | None:
    _evict_idle()
    session = _sessions.get(session_id)
    if session is not None:
        _last_seen[session_id] = _clock()
    return session


def close_session(session_id: str) -> bool:
    session = _sessions.pop(session_id, None)
    _last_seen.pop(session_id, None)
    task = _preloads.pop(session_id, None)
    if task is not None and not task.done() and not task.get_loop().is_closed():
        task.cancel()
    if session is None:
        return False
    session.close()
    return True


def close_all() -> None:
    for session_id in list(_sessions):
        close_session(session_id)
