"""FastAPI API endpoints under /api.

Endpoint groups: settings (health, settings), journeys (record CRUD keyed by
slug) and viewer (playback sessions). A session is opened under
/api/journeys/{slug}/sessions and then addressed as /api/sessions/{id}.
"""

from fastapi import APIRouter

from .journeys import router as journeys_router
from .settings import router as settings_router
from .viewer import router as viewer_router

router = APIRouter()
router.include_router(settings_router)
router.include_router(journeys_router)
router.include_router(viewer_router)
