"""Create a demo journey for development/testing."""

import shutil

from backend import storage

DEMO_SLUG = "paris-forever"

DEMO_JOURNEY = {
    "slug": DEMO_SLUG,
    "partner_name": "Amelie",
    "proposer_name": "Jonas",
    "passcode": "paris",
    "media": [
        {"kind": "image", "url": "https://picsum.photos/id/1011/1600/900", "section": "gallery"},
        {"kind": "image", "url": "https://picsum.photos/id/1015/1600/900", "section": "gallery"},
        {"kind": "image", "url": "https://picsum.photos/id/1025/1600/900", "section": "gallery"},
        {"kind": "image", "url": "https://picsum.photos/id/1035/1600/900", "section": "how_we_met"},
    ],
    "how_we_met_text": (
        "We met on a rainy Tuesday at the Gare du Nord, both reaching for the "
        "last croissant.\n\n"
        "You let me have it. I have been trying to repay you ever since."
    ),
    "love_reasons": [
        {"text": "You laugh at my worst jokes"},
        {"text": "You always know the way home", "media_url": "https://picsum.photos/id/1040/800/600"},
        {"text": "Sunday mornings with you"},
    ],
}


def create_demo_data() -> None:
    """Wipe existing journeys and create a fresh demo journey."""
    if storage.journeys_dir().exists():
        shutil.rmtree(storage.journeys_dir())
    storage.journeys_dir().mkdir(parents=True, exist_ok=True)
    storage.create_journey(DEMO_JOURNEY)
