"""Background music.

The preloader produces an AudioHandle once the music metadata resolves. The
AudioController owns it from then on; only its toggle and the gate's
unlock-time autoplay attempt may start or stop playback.
"""

from __future__ import annotations

import logging
from typing import Protocol, runtime_checkable

logger = logging.getLogger(__name__)


@runtime_checkable
class AudioHandle(Protocol):
    url: str
    loop: bool

    def play(self) -> None: ...

    def pause(self) -> None: ...


class AudioTrack:
    """A music track whose metadata has been fetched.

    Playback is tracked here and rendered by the client. A track whose
    content type is not audio/* cannot be decoded and rejects play().
    """

    def __init__(
        self,
        url: str,
        content_type: str = "",
        size: int | None = None,
        loop: bool = True,
    ) -> None:
        self.url = url
        self.content_type = content_type
        self.size = size
        self.loop = loop
        self.playing = False

    @property
    def decodable(self) -> bool:
        return not self.content_type or self.content_type.startswith("audio/")

    def play(self) -> None:
        if not self.decodable:
            raise PlaybackRejected(f"Cannot decode {self.content_type} at {self.url}")
        self.playing = True

    def pause(self) -> None:
        self.playing = False


class AudioController:
    """Looped, user-gated music playback. Never auto-starts."""

    def __init__(self, handle: AudioHandle) -> None:
        self._handle = handle
        self._handle.loop = True
        self._playing = False

    @property
    def playing(self) -> bool:
        return self._playing

    @property
    def url(self) -> str:
        return self._handle.url

    def try_play(self) -> bool:
        """Attempt playback. A rejection leaves the controller not playing."""
        try:
            self._handle.play()
        except PlaybackRejected as e:
            logger.debug("audio play blocked: %s", e)
            self._playing = False
            return False
        self._playing = True
        return True

    def toggle(self) -> bool:
        """Pause if playing, otherwise try to play. Returns the new state."""
        if self._playing:
            self._handle.pause()
            self._playing = False
            return False
        return self.try_play()


class PlaybackRejected(RuntimeError):
    """Raised by an AudioHandle when the platform refuses playback."""
