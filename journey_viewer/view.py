"""Normalized view model derived from a raw journey record.

Everything here is a pure function of the record. The session builds a
JourneyView once and every sub-player reads its slice from it:

  media          journey.media, or legacy photos wrapped as gallery images
  gallery_items  media tagged "gallery" or untagged
  featured_media first "how_we_met" item, else the first media item
  story_text     how_we_met_text, or a templated default naming the partner
  love_reasons   the journey's reasons, or five generic defaults
  assets         every url the preloader must warm, music last

The passcode never reaches the view; the gate gets its own normalized copy.
"""

from __future__ import annotations

from pydantic import BaseModel

from journey_viewer.models import Asset, Journey, LoveReason, MediaItem

DEFAULT_LOVE_REASONS = [
    "Your beautiful smile that lights up my world",
    "The way you make ordinary moments feel special",
    "Your kindness and the way you care for others",
    "How you always believe in me",
    "The adventures we share together",
]

DEFAULT_STORY_TEMPLATE = (
    "Every love story is beautiful, but ours is my favorite.\n\n"
    "From the moment we first met, I knew there was something special about "
    "you, {partner_name}. The way you smiled, the way you laughed \N{EN DASH} "
    "it all felt like coming home.\n\n"
    "Every day with you is an adventure I never want to end."
)


class JourneyView(BaseModel):
    slug: str
    partner_name: str
    proposer_name: str
    media: list[MediaItem]
    gallery_items: list[MediaItem]
    featured_media: MediaItem | None
    story_text: str
    story_paragraphs: list[str]
    love_reasons: list[LoveReason]
    music_url: str | None
    assets: list[Asset]
    is_accepted: bool


def normalize_media(journey: Journey) -> list[MediaItem]:
    if journey.media:
        return list(journey.media)
    return [
        MediaItem(kind="image", url=url, section="gallery")
        for url in journey.photos
    ]


def gallery_items(media: list[MediaItem]) -> list[MediaItem]:
    return [m for m in media if m.section in (None, "gallery")]


def featured_media(media: list[MediaItem]) -> MediaItem | None:
    for item in media:
        if item.section == "how_we_met":
            return item
    return media[0] if media else None


def story_text(journey: Journey) -> str:
    if journey.how_we_met_text and journey.how_we_met_text.strip():
        return journey.how_we_met_text
    return DEFAULT_STORY_TEMPLATE.format(partner_name=journey.partner_name)


def split_paragraphs(text: str) -> list[str]:
    return [p.strip() for p in text.split("\n\n") if p.strip()]


def love_reasons(journey: Journey) -> list[LoveReason]:
    if journey.love_reasons:
        return list(journey.love_reasons)
    return [LoveReason(text=text) for text in DEFAULT_LOVE_REASONS]


def collect_assets(
    media: list[MediaItem], reasons: list[LoveReason], music_url: str | None
) -> list[Asset]:
    """Every referenced url with its kind. Duplicates are kept so each
    reference counts toward preload progress."""
    assets = [Asset(url=m.url, kind=m.kind) for m in media]
    for reason in reasons:
        if reason.media_url:
            assets.append(Asset(url=reason.media_url, kind=reason.media_type))
    if music_url:
        assets.append(Asset(url=music_url, kind="audio"))
    return assets


def build_view(journey: Journey) -> JourneyView:
    media = normalize_media(journey)
    reasons = love_reasons(journey)
    text = story_text(journey)
    return JourneyView(
        slug=journey.slug,
        partner_name=journey.partner_name,
        proposer_name=journey.proposer_name,
        media=media,
        gallery_items=gallery_items(media),
        featured_media=featured_media(media),
        story_text=text,
        story_paragraphs=split_paragraphs(text),
        love_reasons=reasons,
        music_url=journey.music_url or None,
        assets=collect_assets(media, reasons, journey.music_url or None),
        is_accepted=journey.is_accepted,
    )
