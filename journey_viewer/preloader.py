"""Asset preloading.

Warms every asset a journey references before the gate is shown:

    image  fetched in full
    video  only the first metadata_bytes (enough for duration/dimensions)
    audio  same as video; success yields an AudioTrack for the controller

Loads run concurrently through an AssetLoader matching the protocol:

    async def load(self, asset: Asset) -> AudioHandle | None: ...

A loader signals failure by raising AssetLoadError; any other exception is
logged and treated the same way. Failed assets still count as completed, so
progress always reaches 100% unless the ceiling timeout resolves the preload
first. Either way the preload resolves exactly once.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Callable, Protocol

import httpx
from pydantic import BaseModel, ConfigDict, Field

from journey_viewer.audio import AudioHandle, AudioTrack
from journey_viewer.models import Asset

logger = logging.getLogger(__name__)

DEFAULT_METADATA_BYTES = 64 * 1024


# ---------------------------------------------------------------------------
# Protocol: every loader must match this signature
# ---------------------------------------------------------------------------

class AssetLoader(Protocol):
    async def load(self, asset: Asset) -> AudioHandle | None: ...


# ---------------------------------------------------------------------------
# HttpAssetLoader: fetches over HTTP(S)
# ---------------------------------------------------------------------------

class HttpAssetLoader:
    """Loads assets with httpx.

    Args:
        timeout:        Per-request timeout in seconds.
        metadata_bytes: How much of a video/audio file to read.
        client:         Optional shared AsyncClient (not closed by the loader).
    """

    def __init__(
        self,
        timeout: float = 10.0,
        metadata_bytes: int = DEFAULT_METADATA_BYTES,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._timeout = timeout
        self._metadata_bytes = metadata_bytes
        self._client = client

    async def load(self, asset: Asset) -> AudioHandle | None:
        try:
            if self._client is not None:
                return await self._load(self._client, asset)
            async with httpx.AsyncClient(
                timeout=self._timeout, follow_redirects=True
            ) as client:
                return await self._load(client, asset)
        except httpx.HTTPStatusError as e:
            raise AssetLoadError(
                f"{asset.kind} {asset.url} returned HTTP {e.response.status_code}"
            ) from e
        except httpx.HTTPError as e:
            raise AssetLoadError(f"{asset.kind} {asset.url} failed: {e}") from e

    async def _load(self, client: httpx.AsyncClient, asset: Asset) -> AudioHandle | None:
        if asset.kind == "image":
            resp = await client.get(asset.url)
            resp.raise_for_status()
            logger.debug("image loaded url=%s bytes=%d", asset.url, len(resp.content))
            return None

        content_type, size = await self._read_head(client, asset.url)
        if asset.kind == "audio":
            return AudioTrack(asset.url, content_type=content_type, size=size)
        return None

    async def _read_head(self, client: httpx.AsyncClient, url: str) -> tuple[str, int | None]:
        """Read the leading bytes of a media file and return (content type, total size)."""
        headers = {"Range": f"bytes=0-{self._metadata_bytes - 1}"}
        received = 0
        async with client.stream("GET", url, headers=headers) as resp:
            resp.raise_for_status()
            # Servers that ignore Range send the whole file; stop reading early
            async for chunk in resp.aiter_bytes():
                received += len(chunk)
                if received >= self._metadata_bytes:
                    break
            content_type = resp.headers.get("content-type", "").split(";")[0].strip()
            size = _total_size(resp.headers)
        logger.debug("metadata loaded url=%s type=%s size=%s", url, content_type, size)
        return content_type, size


def _total_size(headers: httpx.Headers) -> int | None:
    content_range = headers.get("content-range", "")
    if "/" in content_range:
        total = content_range.rsplit("/", 1)[1]
        if total.isdigit():
            return int(total)
    length = headers.get("content-length", "")
    return int(length) if length.isdigit() else None


# ---------------------------------------------------------------------------
# AssetPreloader
# ---------------------------------------------------------------------------

class PreloadResult(BaseModel):
    model_config = ConfigDict(arbitrary_types_allowed=True)

    loaded: list[str] = Field(default_factory=list)
    failed: list[str] = Field(default_factory=list)
    timed_out: bool = False
    audio: AudioHandle | None = None

    @property
    def completed(self) -> int:
        return len(self.loaded) + len(self.failed)


class AssetPreloader:
    """Loads a batch of assets concurrently and reports aggregate progress.

    on_progress receives a percentage that never decreases. The ceiling
    timeout cancels whatever is still in flight.
    """

    def __init__(
        self,
        loader: AssetLoader,
        timeout: float = 15.0,
        on_progress: Callable[[float], None] | None = None,
    ) -> None:
        self._loader = loader
        self._timeout = timeout
        self._on_progress = on_progress
        self._progress = 0.0
        self._total = 0
        self._resolved = False
        self._result = PreloadResult()

    @property
    def progress(self) -> float:
        return self._progress

    @property
    def resolved(self) -> bool:
        return self._resolved

    async def preload(self, assets: list[Asset]) -> PreloadResult:
        if self._resolved:
            return self._result
        self._total = len(assets)
        if self._total == 0:
            self._report(100.0)
            return self._resolve()

        tasks = [asyncio.create_task(self._load_one(a)) for a in assets]
        try:
            _done, pending = await asyncio.wait(tasks, timeout=self._timeout)
        except asyncio.CancelledError:
            for task in tasks:
                task.cancel()
            raise
        if pending:
            self._result.timed_out = True
            logger.warning(
                "preload timed out after %.1fs with %d of %d assets outstanding",
                self._timeout, len(pending), self._total,
            )
        result = self._resolve()
        for task in pending:
            task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)
        return result

    async def _load_one(self, asset: Asset) -> None:
        try:
            handle = await self._loader.load(asset)
        except AssetLoadError as e:
            logger.info("asset failed: %s", e)
            self._complete(asset, ok=False)
            return
        except Exception:
            logger.exception("asset loader crashed on %s %s", asset.kind, asset.url)
            self._complete(asset, ok=False)
            return
        self._complete(asset, ok=True, handle=handle)

    def _complete(self, asset: Asset, ok: bool, handle: AudioHandle | None = None) -> None:
        if self._resolved:
            return
        if ok:
            self._result.loaded.append(asset.url)
            if asset.kind == "audio" and handle is not None:
                self._result.audio = handle
        else:
            self._result.failed.append(asset.url)
        self._report(self._result.completed / self._total * 100.0)

    def _report(self, percent: float) -> None:
        if percent < self._progress:
            return
        self._progress = percent
        if self._on_progress is not None:
            self._on_progress(percent)

    def _resolve(self) -> PreloadResult:
        self._resolved = True
        logger.debug(
            "preload resolved loaded=%d failed=%d timed_out=%s",
            len(self._result.loaded), len(self._result.failed), self._result.timed_out,
        )
        return self._result


class AssetLoadError(RuntimeError):
    """Raised by a loader when an asset cannot be fetched or decoded."""
