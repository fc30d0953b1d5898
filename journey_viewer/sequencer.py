"""Phase state machine for the recipient-facing experience.

    loading ──preload resolved──▶ splash ──unlock──▶ hero ──hero_seconds──▶
    gallery ──gallery done──▶ story ──story done──▶ reasons ──reasons done──▶
    proposal ──accept──▶ accepted (terminal)

NEXT_PHASE is the whole transition table. The only way to move is
advance_from(expected), so a jump such as gallery → accepted cannot be
expressed. A signal whose expected phase is no longer current is stale and
ignored.

Every phase runs inside its own TimerScope. Leaving a phase stops its
sub-player and closes the scope before the next phase's enter hook runs, so
no timer from an exited phase can fire a transition.
"""

from __future__ import annotations

import enum
import logging
from typing import Callable, Mapping, Protocol

from journey_viewer.timers import Scheduler, TimerScope

logger = logging.getLogger(__name__)


class Phase(str, enum.Enum):
    LOADING = "loading"
    SPLASH = "splash"
    HERO = "hero"
    GALLERY = "gallery"
    STORY = "story"
    REASONS = "reasons"
    PROPOSAL = "proposal"
    ACCEPTED = "accepted"


NEXT_PHASE: dict[Phase, Phase] = {
    Phase.LOADING: Phase.SPLASH,
    Phase.SPLASH: Phase.HERO,
    Phase.HERO: Phase.GALLERY,
    Phase.GALLERY: Phase.STORY,
    Phase.STORY: Phase.REASONS,
    Phase.REASONS: Phase.PROPOSAL,
    Phase.PROPOSAL: Phase.ACCEPTED,
}

LOCKED_PHASES = frozenset({Phase.LOADING, Phase.SPLASH})


class Stoppable(Protocol):
    def stop(self) -> None: ...


# Called with the new phase's scope; may return a sub-player to stop on exit.
EnterHook = Callable[[TimerScope], "Stoppable | None"]


class PhaseSequencer:
    def __init__(
        self,
        scheduler: Scheduler,
        on_enter: Mapping[Phase, EnterHook] | None = None,
        on_change: Callable[[Phase, Phase], None] | None = None,
    ) -> None:
        self._scheduler = scheduler
        self._on_enter = dict(on_enter or {})
        self._on_change = on_change
        self._phase = Phase.LOADING
        self._scope = TimerScope(scheduler, Phase.LOADING.value)
        self._player: Stoppable | None = None
        self._entering = False
        self._closed = False

    @property
    def phase(self) -> Phase:
        return self._phase

    @property
    def locked(self) -> bool:
        return self._phase in LOCKED_PHASES

    @property
    def terminal(self) -> bool:
        return self._phase not in NEXT_PHASE

    @property
    def player(self) -> Stoppable | None:
        return self._player

    @property
    def pending_timers(self) -> int:
        return self._scope.pending

    def require(self, *phases: Phase) -> None:
        """Raise IllegalTransition unless the current phase is one of phases."""
        if self._phase not in phases:
            allowed = ", ".join(p.value for p in phases)
            raise IllegalTransition(
                f"Not allowed in phase {self._phase.value} (needs {allowed})"
            )

    def advance_from(self, expected: Phase) -> bool:
        """Move to the successor of expected if it is still the current phase.

        Returns False for stale or terminal signals. A signal raised while a
        phase is being entered is applied once its enter hook returns.
        """
        if self._closed or self._phase is not expected:
            logger.debug("ignoring stale advance from %s (now %s)", expected.value, self._phase.value)
            return False
        target = NEXT_PHASE.get(expected)
        if target is None:
            return False

        self._exit_current()
        self._phase = target
        if self._on_change is not None:
            self._on_change(expected, target)
        logger.info("phase %s -> %s", expected.value, target.value)
        if self._entering:
            return True

        self._entering = True
        try:
            while True:
                entering = self._phase
                self._scope = TimerScope(self._scheduler, entering.value)
                hook = self._on_enter.get(entering)
                player = hook(self._scope) if hook is not None else None
                if self._phase is entering:
                    self._player = player
                    break
                # Advanced again during the hook; that phase's scope is already closed
                if player is not None:
                    player.stop()
        finally:
            self._entering = False
        return True

    def close(self) -> None:
        """Tear down: stop the active sub-player and cancel all timers."""
        self._closed = True
        self._exit_current()

    def _exit_current(self) -> None:
        if self._player is not None:
            self._player.stop()
            self._player = None
        self._scope.close()


class IllegalTransition(RuntimeError):
    """Raised when a user action is not valid in the current phase."""
