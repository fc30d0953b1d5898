"""File-based JSON storage for journeys.

Data layout:
  data/
    journeys/
      <slug>.json        One journey record (names, passcode, media, photos,
                         music_url, how_we_met_text, love_reasons, is_accepted)
    config.json          App settings (playback timings, preload limits)

The viewer reads a journey by slug and writes back only is_accepted, through
mark_accepted(), which never clears the flag.

Config: get_config() returns defaults merged with stored values.
update_config() applies partial updates: timings merged key-by-key and
validated, loader limits validated and overwritten.
"""

# Re-export all public symbols so `from backend import storage` keeps working.

from .core import (  # noqa: F401
    data_dir,
    init_storage,
    journeys_dir,
)

from .journeys import (  # noqa: F401
    JourneyExists,
    create_journey,
    delete_journey,
    get_journey,
    list_journeys,
    load_journey,
    mark_accepted,
)

from .config import (  # noqa: F401
    LoaderSettings,
    get_config,
    get_loader_settings,
    get_timings,
    update_config,
)
