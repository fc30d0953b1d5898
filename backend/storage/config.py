"""Global app configuration (playback timings, preload limits)."""

import json
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field

from journey_viewer.timings import Timings

from .core import data_dir


class LoaderSettings(BaseModel):
    """HTTP asset loader limits."""

    asset_request_timeout: float = Field(10.0, gt=0)
    metadata_bytes: int = Field(64 * 1024, gt=0)


_LOADER_KEYS = tuple(LoaderSettings.model_fields)

_CONFIG_DEFAULTS: dict[str, Any] = {
    "timings": Timings().model_dump(),
    **LoaderSettings().model_dump(),
}


def _config_path() -> Path:
    return data_dir() / "config.json"


def get_config() -> dict[str, Any]:
    """Read config, returning defaults merged with stored values."""
    config: dict[str, Any] = {
        "timings": dict(_CONFIG_DEFAULTS["timings"]),
        **{key: _CONFIG_DEFAULTS[key] for key in _LOADER_KEYS},
    }
    path = _config_path()
    if path.is_file():
        stored = json.loads(path.read_text())
        if isinstance(stored.get("timings"), dict):
            for key, value in stored["timings"].items():
                if key in config["timings"]:
                    config["timings"][key] = value
        for key in _LOADER_KEYS:
            if key in stored:
                config[key] = stored[key]
    return config


def update_config(fields: dict[str, Any]) -> dict[str, Any]:
    """Merge fields into config and persist. Returns full config.

    Timings and loader limits are validated before anything is written.
    """
    config = get_config()
    if isinstance(fields.get("timings"), dict):
        merged = {**config["timings"], **{
            k: v for k, v in fields["timings"].items() if k in config["timings"]
        }}
        config["timings"] = Timings.model_validate(merged).model_dump()
    loader = LoaderSettings.model_validate({
        **{key: config[key] for key in _LOADER_KEYS},
        **{key: fields[key] for key in _LOADER_KEYS if key in fields},
    })
    config.update(loader.model_dump())
    _config_path().write_text(json.dumps(config, indent=2))
    return config


def get_timings() -> Timings:
    return Timings.model_validate(get_config()["timings"])


def get_loader_settings() -> LoaderSettings:
    return LoaderSettings.model_validate(
        {key: get_config()[key] for key in _LOADER_KEYS}
    )
