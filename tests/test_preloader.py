"""Tests for the asset preloader and the HTTP loader."""

import asyncio

import httpx
import pytest

from journey_viewer.audio import AudioTrack
from journey_viewer.models import Asset
from journey_viewer.preloader import (
    AssetLoadError,
    AssetPreloader,
    HttpAssetLoader,
)


def _assets(*specs: tuple[str, str]) -> list[Asset]:
    return [Asset(url=url, kind=kind) for url, kind in specs]


# ── AssetPreloader ───────────────────────────────────────


@pytest.mark.asyncio
async def test_empty_resolves_immediately(stub_loader):
    reports = []
    preloader = AssetPreloader(stub_loader, on_progress=reports.append)
    result = await preloader.preload([])
    assert reports == [100.0]
    assert preloader.resolved
    assert result.completed == 0
    assert stub_loader.requested == []


@pytest.mark.asyncio
async def test_progress_reaches_100_and_never_decreases(stub_loader):
    reports = []
    assets = _assets(("a.jpg", "image"), ("b.jpg", "image"), ("c.mp4", "video"), ("d.jpg", "image"))
    preloader = AssetPreloader(stub_loader, on_progress=reports.append)
    result = await preloader.preload(assets)
    assert reports == sorted(reports)
    assert reports[-1] == 100.0
    assert len(reports) == 4
    assert sorted(result.loaded) == ["a.jpg", "b.jpg", "c.mp4", "d.jpg"]
    assert not result.timed_out


@pytest.mark.asyncio
async def test_failures_count_toward_completion(make_loader):
    loader = make_loader(fail={"b.jpg", "song.mp3"})
    reports = []
    preloader = AssetPreloader(loader, on_progress=reports.append)
    result = await preloader.preload(_assets(("a.jpg", "image"), ("b.jpg", "image"), ("song.mp3", "audio")))
    assert reports[-1] == 100.0
    assert result.loaded == ["a.jpg"]
    assert sorted(result.failed) == ["b.jpg", "song.mp3"]
    assert result.audio is None


@pytest.mark.asyncio
async def test_audio_handle_kept(stub_loader):
    result = await AssetPreloader(stub_loader).preload(_assets(("a.jpg", "image"), ("song.mp3", "audio")))
    assert isinstance(result.audio, AudioTrack)
    assert result.audio.url == "song.mp3"


@pytest.mark.asyncio
async def test_timeout_forces_resolution(make_loader):
    loader = make_loader(hang={"slow.mp4"})
    reports = []
    preloader = AssetPreloader(loader, timeout=0.05, on_progress=reports.append)
    result = await preloader.preload(_assets(("a.jpg", "image"), ("slow.mp4", "video")))
    assert result.timed_out
    assert preloader.resolved
    assert result.loaded == ["a.jpg"]
    assert reports == [50.0]


@pytest.mark.asyncio
async def test_resolves_once(stub_loader):
    preloader = AssetPreloader(stub_loader)
    first = await preloader.preload(_assets(("a.jpg", "image")))
    second = await preloader.preload(_assets(("b.jpg", "image")))
    assert first is second
    assert stub_loader.requested == ["a.jpg"]


@pytest.mark.asyncio
async def test_late_completion_ignored(make_loader):
    preloader = AssetPreloader(make_loader(), timeout=1)
    await preloader.preload(_assets(("a.jpg", "image")))
    preloader._complete(Asset(url="late.jpg", kind="image"), ok=True)
    assert preloader.progress == 100.0
    assert "late.jpg" not in preloader._result.loaded


@pytest.mark.asyncio
async def test_unexpected_loader_error_counts_as_failed(make_loader):
    loader = make_loader(crash={"song.mp3"})
    reports = []
    preloader = AssetPreloader(loader, on_progress=reports.append)
    result = await preloader.preload(_assets(("a.jpg", "image"), ("song.mp3", "audio")))
    assert reports[-1] == 100.0
    assert preloader.progress == 100.0
    assert result.loaded == ["a.jpg"]
    assert result.failed == ["song.mp3"]
    assert not result.timed_out


@pytest.mark.asyncio
async def test_cancelling_preload_cancels_in_flight_loads(make_loader):
    loader = make_loader(hang={"slow.mp4", "slow.mp3"})
    preloader = AssetPreloader(loader, timeout=60)
    task = asyncio.create_task(
        preloader.preload(_assets(("slow.mp4", "video"), ("slow.mp3", "audio")))
    )
    while len(loader.requested) < 2:
        await asyncio.sleep(0)
    task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await task
    for _ in range(3):
        await asyncio.sleep(0)
    assert sorted(loader.cancelled) == ["slow.mp3", "slow.mp4"]
    assert not preloader.resolved


# ── HttpAssetLoader ──────────────────────────────────────


def _client(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


@pytest.mark.asyncio
async def test_http_image_fetched_in_full():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, content=b"x" * 1000, headers={"content-type": "image/jpeg"})

    async with _client(handler) as client:
        loader = HttpAssetLoader(client=client)
        assert await loader.load(Asset(url="https://cdn/a.jpg", kind="image")) is None
    assert "range" not in seen[0].headers


@pytest.mark.asyncio
async def test_http_video_requests_only_metadata_range():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(
            206,
            content=b"\0" * 1024,
            headers={"content-type": "video/mp4", "content-range": "bytes 0-1023/9000000"},
        )

    async with _client(handler) as client:
        loader = HttpAssetLoader(client=client, metadata_bytes=1024)
        assert await loader.load(Asset(url="https://cdn/v.mp4", kind="video")) is None
    assert seen[0].headers["range"] == "bytes=0-1023"


@pytest.mark.asyncio
async def test_http_audio_returns_track_with_metadata():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            206,
            content=b"\0" * 16,
            headers={"content-type": "audio/mpeg; charset=binary", "content-range": "bytes 0-15/4096"},
        )

    async with _client(handler) as client:
        track = await HttpAssetLoader(client=client).load(Asset(url="https://cdn/s.mp3", kind="audio"))
    assert isinstance(track, AudioTrack)
    assert track.content_type == "audio/mpeg"
    assert track.size == 4096
    assert track.loop is True
    assert track.playing is False


@pytest.mark.asyncio
async def test_http_audio_size_from_content_length_when_range_ignored():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, content=b"\0" * 2048, headers={"content-type": "audio/ogg"})

    async with _client(handler) as client:
        track = await HttpAssetLoader(client=client, metadata_bytes=512).load(
            Asset(url="https://cdn/s.ogg", kind="audio")
        )
    assert track.size == 2048


@pytest.mark.asyncio
async def test_http_404_raises_asset_load_error():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(404)

    async with _client(handler) as client:
        with pytest.raises(AssetLoadError, match="404"):
            await HttpAssetLoader(client=client).load(Asset(url="https://cdn/gone.jpg", kind="image"))


@pytest.mark.asyncio
async def test_http_connection_error_raises_asset_load_error():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("refused", request=request)

    async with _client(handler) as client:
        with pytest.raises(AssetLoadError):
            await HttpAssetLoader(client=client).load(Asset(url="https://cdn/v.mp4", kind="video"))


@pytest.mark.asyncio
async def test_http_loader_misconfiguration_still_completes_preload():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(206, content=b"\0" * 16, headers={"content-type": "video/mp4"})

    async with _client(handler) as client:
        loader = HttpAssetLoader(client=client, metadata_bytes="65536")
        preloader = AssetPreloader(loader)
        result = await preloader.preload(_assets(("https://cdn/v.mp4", "video")))
    assert preloader.progress == 100.0
    assert result.failed == ["https://cdn/v.mp4"]
