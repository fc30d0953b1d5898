"""Pydantic request/response models for API endpoints."""

import re

from pydantic import BaseModel, Field, field_validator, model_validator

from journey_viewer.models import LoveReason, MediaItem

_SLUG_RE = re.compile(r"^[a-z0-9-]+$")
_NAME_RE = re.compile(r"^[a-zA-Z\s'-]+$")
_PHONE_RE = re.compile(r"^\+?[1-9]\d{1,14}$")

MIN_MEDIA = 3
MAX_MEDIA = 10


class CreateJourney(BaseModel):
    slug: str
    partner_name: str
    proposer_name: str
    passcode: str = Field(min_length=3, max_length=50)
    proposer_phone: str | None = None
    music_url: str | None = None
    how_we_met_text: str | None = None
    media: list[MediaItem] = Field(default_factory=list)
    photos: list[str] = Field(default_factory=list)
    love_reasons: list[LoveReason] = Field(default_factory=list)

    @field_validator("slug", mode="before")
    @classmethod
    def _clean_slug(cls, v: str) -> str:
        v = str(v).strip().lower()
        if not 3 <= len(v) <= 50:
            raise ValueError("Slug must be between 3 and 50 characters")
        if not _SLUG_RE.match(v):
            raise ValueError("Slug can only contain lowercase letters, numbers, and hyphens")
        if v.startswith("-") or v.endswith("-"):
            raise ValueError("Slug cannot start or end with a hyphen")
        return v

    @field_validator("partner_name", "proposer_name", mode="before")
    @classmethod
    def _clean_name(cls, v: str) -> str:
        v = str(v).strip()
        if not 2 <= len(v) <= 50:
            raise ValueError("Name must be between 2 and 50 characters")
        if not _NAME_RE.match(v):
            raise ValueError("Name can only contain letters, spaces, hyphens, and apostrophes")
        return v

    @field_validator("passcode", mode="before")
    @classmethod
    def _clean_passcode(cls, v: str) -> str:
        return str(v).strip()

    @field_validator("proposer_phone", mode="before")
    @classmethod
    def _clean_phone(cls, v: str | None) -> str | None:
        if v is None or not str(v).strip():
            return None
        v = str(v).strip()
        if not 10 <= len(v) <= 15 or not _PHONE_RE.match(v):
            raise ValueError("Please enter a valid phone number (e.g., +1234567890)")
        return v

    @field_validator("music_url", mode="before")
    @classmethod
    def _clean_music_url(cls, v: str | None) -> str | None:
        if v is None or not str(v).strip():
            return None
        v = str(v).strip()
        if not v.startswith(("http://", "https://")):
            raise ValueError("Please enter a valid URL")
        return v

    @model_validator(mode="after")
    def _check_media_count(self) -> "CreateJourney":
        count = len(self.media) or len(self.photos)
        if count < MIN_MEDIA:
            raise ValueError(f"Please upload at least {MIN_MEDIA} photos")
        if count > MAX_MEDIA:
            raise ValueError(f"Maximum {MAX_MEDIA} photos allowed")
        return self


class PasscodeBody(BaseModel):
    passcode: str


class VideoEndedBody(BaseModel):
    index: int


class ViewportBody(BaseModel):
    width: float = Field(gt=0)
    height: float = Field(gt=0)
