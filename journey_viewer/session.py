"""One recipient's viewing session of a journey.

Flow:
  1. preload()          warm every asset, then loading → splash
  2. submit_passcode()  splash → hero on match, and try to start the music
  3. hero               auto-advances to gallery after hero_seconds
  4. gallery/story/reasons sub-players signal completion to the sequencer
  5. accept()           proposal → accepted, acceptance written once
     decline_hover()    moves the decline button, nothing else

The session owns the scheduler-facing state for a single viewer. Nothing in
here raises on asset, audio, or persistence failures; user actions attempted
in the wrong phase raise IllegalTransition.
"""

from __future__ import annotations

import logging
import random
from typing import Any, Awaitable, Callable

from journey_viewer.audio import AudioController
from journey_viewer.decision import ConfettiBurst, DecisionHandler, Position, Viewport
from journey_viewer.gate import AccessGate
from journey_viewer.models import Journey
from journey_viewer.players import GalleryPlayer, ReasonsCarousel, StoryScroller, SubPlayer
from journey_viewer.preloader import AssetLoader, AssetPreloader, PreloadResult
from journey_viewer.sequencer import Phase, PhaseSequencer
from journey_viewer.timers import Scheduler, TimerScope
from journey_viewer.timings import Timings
from journey_viewer.view import JourneyView, build_view

logger = logging.getLogger(__name__)


class JourneySession:
    def __init__(
        self,
        journey: Journey,
        scheduler: Scheduler,
        loader: AssetLoader,
        persist_acceptance: Callable[[str], Awaitable[Any]],
        timings: Timings | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self.view: JourneyView = build_view(journey)
        self.timings = timings or Timings()
        self._scheduler = scheduler
        self._persist_acceptance = persist_acceptance

        self.audio: AudioController | None = None
        self.celebration: list[ConfettiBurst] = []
        self.preload_result: PreloadResult | None = None

        self.gallery = GalleryPlayer(
            self.view.gallery_items, scheduler, self.timings,
            on_complete=lambda: self.sequencer.advance_from(Phase.GALLERY),
        )
        self.story = StoryScroller(
            self.view.story_text, scheduler, self.timings,
            on_complete=lambda: self.sequencer.advance_from(Phase.STORY),
        )
        self.reasons = ReasonsCarousel(
            self.view.love_reasons, scheduler, self.timings,
            on_complete=lambda: self.sequencer.advance_from(Phase.REASONS),
        )

        self.sequencer = PhaseSequencer(
            scheduler,
            on_enter={
                Phase.HERO: self._enter_hero,
                Phase.GALLERY: self._enter_player(self.gallery),
                Phase.STORY: self._enter_player(self.story),
                Phase.REASONS: self._enter_player(self.reasons),
            },
        )
        self.preloader = AssetPreloader(loader, timeout=self.timings.preload_timeout)
        self.gate = AccessGate(journey.passcode, on_unlock=self._unlocked)
        self.decision = DecisionHandler(
            self.sequencer,
            persist_acceptance=self._persist,
            on_celebrate=self._celebrate,
            rng=rng,
        )

    @property
    def phase(self) -> Phase:
        return self.sequencer.phase

    # ------------------------------------------------------------------
    # Phase hooks
    # ------------------------------------------------------------------

    def _enter_hero(self, scope: TimerScope) -> None:
        scope.arm(self.timings.hero_seconds, lambda: self.sequencer.advance_from(Phase.HERO))

    @staticmethod
    def _enter_player(player: SubPlayer):
        def hook(scope: TimerScope) -> SubPlayer:
            player.start()
            return player
        return hook

    def _unlocked(self) -> None:
        self.sequencer.advance_from(Phase.SPLASH)
        # First user gesture: the platform may now allow playback
        if self.audio is not None:
            self.audio.try_play()

    def _celebrate(self, bursts: list[ConfettiBurst]) -> None:
        self.celebration = bursts

    async def _persist(self) -> None:
        await self._persist_acceptance(self.view.slug)

    # ------------------------------------------------------------------
    # Actions
    # ------------------------------------------------------------------

    async def preload(self) -> PreloadResult:
        """Warm all assets and open the gate. Safe to call more than once."""
        if self.preload_result is not None:
            return self.preload_result
        result = await self.preloader.preload(self.view.assets)
        self.preload_result = result
        if result.audio is not None:
            self.audio = AudioController(result.audio)
        self.sequencer.advance_from(Phase.LOADING)
        return result

    def submit_passcode(self, entry: str) -> bool:
        self.sequencer.require(Phase.SPLASH)
        return self.gate.submit(entry)

    def edit_passcode(self) -> None:
        self.gate.edit()

    def toggle_audio(self) -> bool:
        if self.sequencer.locked or self.audio is None:
            return False
        return self.audio.toggle()

    def video_ended(self, index: int) -> bool:
        if self.sequencer.phase is not Phase.GALLERY:
            return False
        return self.gallery.video_ended(index)

    async def accept(self) -> None:
        await self.decision.accept()

    def decline_hover(self, width: float, height: float) -> Position:
        return self.decision.decline_hover(Viewport(width=width, height=height))

    def close(self) -> None:
        self.sequencer.close()
        self.gallery.stop()
        self.story.stop()
        self.reasons.stop()

    # ------------------------------------------------------------------
    # Snapshot
    # ------------------------------------------------------------------

    def snapshot(self) -> dict[str, Any]:
        """Everything a client needs to render the current moment."""
        phase = self.sequencer.phase
        view = self.view
        state: dict[str, Any] = {
            "slug": view.slug,
            "phase": phase.value,
            "partner_name": view.partner_name,
            "proposer_name": view.proposer_name,
            "preload_progress": self.preloader.progress,
            "lock_visible": self.sequencer.locked,
            "passcode_error": self.gate.error,
            "audio": None,
            "is_accepted": view.is_accepted or phase is Phase.ACCEPTED,
        }
        if self.audio is not None and not self.sequencer.locked:
            state["audio"] = {"url": self.audio.url, "playing": self.audio.playing}

        if phase is Phase.HERO:
            state["hero"] = {"partner_name": view.partner_name}
        elif phase is Phase.GALLERY:
            current = self.gallery.current
            state["gallery"] = {
                "index": self.gallery.index,
                "count": len(self.gallery.items),
                "progress": self.gallery.progress,
                "item": current.model_dump() if current else None,
            }
        elif phase is Phase.STORY:
            featured = view.featured_media
            state["story"] = {
                "paragraphs": view.story_paragraphs,
                "featured_media": featured.model_dump() if featured else None,
                "progress": self.story.progress(),
                "scroll_fraction": self.story.scroll_fraction(),
                "duration": self.story.duration,
            }
        elif phase is Phase.REASONS:
            current = self.reasons.current
            state["reasons"] = {
                "index": self.reasons.index,
                "count": len(self.reasons.reasons),
                "direction": self.reasons.direction,
                "reason": (
                    {**current.model_dump(), "media_type": current.media_type}
                    if current else None
                ),
            }
        elif phase in (Phase.PROPOSAL, Phase.ACCEPTED):
            last = view.media[-1] if view.media else None
            position = self.decision.decline_position
            state["proposal"] = {
                "background_url": last.url if last else None,
                "decline_position": (
                    position.model_dump() if position else None
                ),
                "accepted": phase is Phase.ACCEPTED,
                "celebration": [b.model_dump() for b in self.celebration],
            }
        return state
