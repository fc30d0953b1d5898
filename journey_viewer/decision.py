"""Accept/decline at the end of the journey.

Accept is optimistic: the celebration and the move to the terminal phase
happen first, then the acceptance write is attempted once. A failed write is
logged and otherwise ignored. Decline never persists or changes phase; it
only moves its own button somewhere else on screen.
"""

from __future__ import annotations

import logging
import random
from typing import Awaitable, Callable

from pydantic import BaseModel, ConfigDict

from journey_viewer.sequencer import Phase, PhaseSequencer

logger = logging.getLogger(__name__)

CONFETTI_PARTICLES = 200
CONFETTI_ORIGIN_Y = 0.7
DECLINE_BUTTON_WIDTH = 100
DECLINE_BUTTON_HEIGHT = 50


class ConfettiBurst(BaseModel):
    model_config = ConfigDict(frozen=True)

    particle_count: int
    spread: int
    start_velocity: int | None = None
    decay: float | None = None
    scalar: float | None = None
    origin_y: float = CONFETTI_ORIGIN_Y


class Viewport(BaseModel):
    model_config = ConfigDict(frozen=True)

    width: float
    height: float


class Position(BaseModel):
    model_config = ConfigDict(frozen=True)

    x: float
    y: float


def celebration_bursts(count: int = CONFETTI_PARTICLES) -> list[ConfettiBurst]:
    """The layered confetti volley fired on acceptance."""
    layers = [
        (0.25, {"spread": 26, "start_velocity": 55}),
        (0.2, {"spread": 60}),
        (0.35, {"spread": 100, "decay": 0.91, "scalar": 0.8}),
        (0.1, {"spread": 120, "start_velocity": 25, "decay": 0.92, "scalar": 1.2}),
        (0.1, {"spread": 120, "start_velocity": 45}),
    ]
    return [
        ConfettiBurst(particle_count=int(count * ratio), **opts)
        for ratio, opts in layers
    ]


class DecisionHandler:
    def __init__(
        self,
        sequencer: PhaseSequencer,
        persist_acceptance: Callable[[], Awaitable[None]],
        on_celebrate: Callable[[list[ConfettiBurst]], None] | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self._sequencer = sequencer
        self._persist = persist_acceptance
        self._on_celebrate = on_celebrate
        self._rng = rng or random.Random()
        self.persisted: bool | None = None  # None until a write was attempted
        self.decline_position: Position | None = None

    async def accept(self) -> None:
        """Celebrate, enter the terminal phase, then record acceptance once."""
        if self._sequencer.phase is Phase.ACCEPTED:
            return
        self._sequencer.require(Phase.PROPOSAL)
        if self._on_celebrate is not None:
            self._on_celebrate(celebration_bursts())
        self._sequencer.advance_from(Phase.PROPOSAL)

        try:
            await self._persist()
        except Exception:
            logger.exception("Failed to record acceptance")
            self.persisted = False
            return
        self.persisted = True
        logger.info("acceptance recorded")

    def decline_hover(self, viewport: Viewport) -> Position:
        """Move the decline button to a random spot inside the viewport."""
        self._sequencer.require(Phase.PROPOSAL)
        x = self._rng.random() * max(viewport.width - DECLINE_BUTTON_WIDTH, 0)
        y = self._rng.random() * max(viewport.height - DECLINE_BUTTON_HEIGHT, 0)
        self.decline_position = Position(x=x, y=y)
        return self.decline_position
