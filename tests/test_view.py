"""Tests for the normalized journey view."""

from journey_viewer.models import Journey, LoveReason, MediaItem
from journey_viewer.view import (
    DEFAULT_LOVE_REASONS,
    build_view,
    collect_assets,
    featured_media,
    gallery_items,
    normalize_media,
    split_paragraphs,
)


def _journey(**fields) -> Journey:
    base = {"slug": "paris", "partner_name": "Amelie", "proposer_name": "Jonas", "passcode": "paris"}
    return Journey(**{**base, **fields})


# ── Media ────────────────────────────────────────────────


def test_legacy_photos_become_gallery_images():
    media = normalize_media(_journey(photos=["a.jpg", "b.jpg"]))
    assert [m.url for m in media] == ["a.jpg", "b.jpg"]
    assert all(m.kind == "image" and m.section == "gallery" for m in media)


def test_media_wins_over_photos():
    j = _journey(media=[MediaItem(kind="video", url="v.mp4")], photos=["a.jpg"])
    assert [m.url for m in normalize_media(j)] == ["v.mp4"]


def test_gallery_includes_untagged_and_gallery_only():
    media = [
        MediaItem(kind="image", url="1", section="gallery"),
        MediaItem(kind="image", url="2"),
        MediaItem(kind="image", url="3", section="how_we_met"),
        MediaItem(kind="video", url="4", section="love"),
    ]
    assert [m.url for m in gallery_items(media)] == ["1", "2"]


def test_featured_prefers_how_we_met():
    media = [
        MediaItem(kind="image", url="1", section="gallery"),
        MediaItem(kind="video", url="2", section="how_we_met"),
        MediaItem(kind="image", url="3", section="how_we_met"),
    ]
    assert featured_media(media).url == "2"


def test_featured_falls_back_to_first_item():
    media = [MediaItem(kind="image", url="1", section="gallery")]
    assert featured_media(media).url == "1"


def test_featured_none_without_media():
    assert featured_media([]) is None


# ── Text ─────────────────────────────────────────────────


def test_default_story_names_partner():
    view = build_view(_journey())
    assert "Amelie" in view.story_text
    assert len(view.story_paragraphs) == 3


def test_blank_story_uses_default():
    view = build_view(_journey(how_we_met_text="   "))
    assert view.story_text.startswith("Every love story")


def test_split_paragraphs_trims_and_drops_empty():
    assert split_paragraphs("  one \n\n\n\n two  \n\n") == ["one", "two"]


def test_default_reasons_when_empty():
    view = build_view(_journey())
    assert [r.text for r in view.love_reasons] == DEFAULT_LOVE_REASONS
    assert len(view.love_reasons) == 5


def test_own_reasons_kept():
    view = build_view(_journey(love_reasons=[LoveReason(text="Your laugh")]))
    assert [r.text for r in view.love_reasons] == ["Your laugh"]


# ── Assets ───────────────────────────────────────────────


def test_assets_cover_media_reasons_and_music_in_order():
    media = [MediaItem(kind="image", url="a.jpg"), MediaItem(kind="video", url="b.mp4")]
    reasons = [
        LoveReason(text="x", media_url="r.mov"),
        LoveReason(text="no media"),
        LoveReason(text="y", media_url="r.png"),
    ]
    assets = collect_assets(media, reasons, "song.mp3")
    assert [(a.url, a.kind) for a in assets] == [
        ("a.jpg", "image"),
        ("b.mp4", "video"),
        ("r.mov", "video"),
        ("r.png", "image"),
        ("song.mp3", "audio"),
    ]


def test_no_assets_for_empty_journey():
    assert build_view(_journey()).assets == []


def test_view_never_carries_passcode():
    view = build_view(_journey(passcode="secret-key"))
    assert "passcode" not in view.model_dump()
    assert "secret-key" not in view.model_dump_json()


def test_empty_music_url_treated_as_absent():
    view = build_view(_journey(music_url=""))
    assert view.music_url is None
    assert view.assets == []
