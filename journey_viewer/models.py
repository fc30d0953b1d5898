"""Core domain models.

The journey record is owned by storage; the playback engine reads it once per
session and only ever writes back the acceptance flag. Pydantic is used for
validation and serialisation at every data boundary.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Literal

from pydantic import AliasChoices, BaseModel, Field

MediaKind = Literal["image", "video"]
AssetKind = Literal["image", "video", "audio"]
Section = Literal["gallery", "how_we_met", "love"]

VIDEO_EXTENSIONS = (".mp4", ".webm", ".mov")


class MediaItem(BaseModel):
    """A photo or clip shown by one of the sub-players."""

    kind: MediaKind = Field(validation_alias=AliasChoices("kind", "type"))
    url: str
    caption: str | None = None
    section: Section | None = None  # None behaves as "gallery"


class LoveReason(BaseModel):
    text: str
    media_url: str | None = None

    @property
    def media_type(self) -> MediaKind | None:
        if not self.media_url:
            return None
        return media_type_for(self.media_url)


class Journey(BaseModel):
    """A stored journey record, keyed by slug."""

    slug: str
    partner_name: str
    proposer_name: str
    passcode: str
    media: list[MediaItem] = Field(default_factory=list)
    photos: list[str] = Field(default_factory=list)  # legacy, image-only
    music_url: str | None = None
    how_we_met_text: str | None = None
    love_reasons: list[LoveReason] = Field(default_factory=list)
    proposer_phone: str | None = None
    is_accepted: bool = False
    created_at: str = Field(
        default_factory=lambda: datetime.now(timezone.utc).isoformat()
    )


class Asset(BaseModel):
    """One url the preloader has to warm before playback."""

    url: str
    kind: AssetKind


def media_type_for(url: str) -> MediaKind:
    """Sniff image/video from the url's extension (query string ignored)."""
    path = url.split("?", 1)[0].split("#", 1)[0].lower()
    return "video" if path.endswith(VIDEO_EXTENSIONS) else "image"
