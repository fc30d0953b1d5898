"""Playback durations, in seconds.

Stored under the "timings" key of the app config and merged key-by-key over
these defaults.
"""

from __future__ import annotations

from pydantic import BaseModel, Field


class Timings(BaseModel):
    preload_timeout: float = Field(15.0, gt=0)
    hero_seconds: float = Field(4.0, ge=0)
    image_seconds: float = Field(5.0, gt=0)
    video_ceiling_seconds: float = Field(120.0, gt=0)
    story_lead_in_seconds: float = Field(1.5, ge=0)
    reading_words_per_minute: float = Field(200.0, gt=0)
    story_min_seconds: float = Field(3.0, ge=0)
    story_settle_seconds: float = Field(0.2, ge=0)
    reason_seconds: float = Field(3.0, gt=0)
    reasons_settle_seconds: float = Field(1.5, ge=0)

    def reading_seconds(self, text: str) -> float:
        """Time to read text at the configured pace, floored to the minimum."""
        words = len(text.split())
        return max(words / self.reading_words_per_minute * 60.0, self.story_min_seconds)
