import logging
import os
from pathlib import Path
from typing import Callable

from dotenv import load_dotenv
from fastapi import FastAPI

from backend.routes import router
from backend import sessions, storage
from journey_viewer.preloader import AssetLoader
from journey_viewer.timers import Scheduler

load_dotenv(Path(__file__).parent.parent / ".env")

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

DEFAULT_DATA_DIR = Path(__file__).parent.parent / "data"


def create_app(
    data_dir: Path | None = None,
    loader_factory: Callable[[], AssetLoader] | None = None,
    scheduler: Scheduler | None = None,
) -> FastAPI:
    resolved = data_dir or Path(os.getenv("DATA_DIR", str(DEFAULT_DATA_DIR)))
    storage.init_storage(resolved)
    sessions.init_sessions(loader_factory=loader_factory, scheduler=scheduler)

    app = FastAPI(title="Journey Viewer")
    app.include_router(router, prefix="/api")
    return app


# Default app instance for uvicorn (uses DATA_DIR env var or default)
app = create_app()
