import asyncio
import heapq
import itertools
import shutil
from pathlib import Path

import pytest

from backend import sessions, storage
from journey_viewer.audio import AudioTrack
from journey_viewer.preloader import AssetLoadError

TEST_DATA_DIR = Path("data-tests")


@pytest.fixture(autouse=True)
def clean_test_data():
    """Wipe and re-init data-tests/ before every test."""
    if TEST_DATA_DIR.exists():
        shutil.rmtree(TEST_DATA_DIR)
    storage.init_storage(TEST_DATA_DIR)
    yield
    sessions.close_all()
    # leave data-tests around after tests for inspection; CI can ignore it


class ManualTimer:
    def __init__(self, when: float, callback) -> None:
        self.when = when
        self.callback = callback
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class ManualScheduler:
    """Virtual-time scheduler. Nothing fires until advance() is called."""

    def __init__(self) -> None:
        self.now = 0.0
        self.fired = 0
        self._queue: list[tuple[float, int, ManualTimer]] = []
        self._seq = itertools.count()

    def call_later(self, delay: float, callback) -> ManualTimer:
        timer = ManualTimer(self.now + max(delay, 0.0), callback)
        heapq.heappush(self._queue, (timer.when, next(self._seq), timer))
        return timer

    def time(self) -> float:
        return self.now

    @property
    def pending(self) -> int:
        return sum(1 for _, _, t in self._queue if not t.cancelled)

    def next_due(self) -> float | None:
        for when, _, timer in sorted(self._queue):
            if not timer.cancelled:
                return when
        return None

    def advance(self, seconds: float) -> None:
        """Move the clock forward, firing due timers in order (including
        ones armed while advancing)."""
        target = self.now + seconds
        while self._queue and self._queue[0][0] <= target + 1e-9:
            when, _, timer = heapq.heappop(self._queue)
            self.now = max(self.now, when)
            if timer.cancelled:
                continue
            self.fired += 1
            timer.callback()
        self.now = target

    def run_until_idle(self, limit: float = 3600.0) -> None:
        start = self.now
        while True:
            due = self.next_due()
            if due is None or due - start > limit:
                return
            self.advance(due - self.now)


@pytest.fixture
def scheduler() -> ManualScheduler:
    return ManualScheduler()


class StubLoader:
    """Asset loader with scripted outcomes per url.

    fail:  urls that raise AssetLoadError
    hang:  urls that never finish (until cancelled, recorded in .cancelled)
    crash: urls that raise an unexpected error
    Audio assets succeed with an AudioTrack unless listed in fail/hang.
    """

    def __init__(self, fail=(), hang=(), crash=(), audio_content_type: str = "audio/mpeg") -> None:
        self.fail = set(fail)
        self.hang = set(hang)
        self.crash = set(crash)
        self.audio_content_type = audio_content_type
        self.requested: list[str] = []
        self.cancelled: list[str] = []

    async def load(self, asset):
        self.requested.append(asset.url)
        if asset.url in self.hang:
            try:
                await asyncio.Event().wait()
            except asyncio.CancelledError:
                self.cancelled.append(asset.url)
                raise
        if asset.url in self.fail:
            raise AssetLoadError(f"{asset.url} returned HTTP 404")
        if asset.url in self.crash:
            raise TypeError(f"bad loader settings for {asset.url}")
        if asset.kind == "audio":
            return AudioTrack(asset.url, content_type=self.audio_content_type)
        return None


@pytest.fixture
def stub_loader() -> StubLoader:
    return StubLoader()


@pytest.fixture
def make_loader():
    return StubLoader
