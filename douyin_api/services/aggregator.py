"""Quality source aggregation.

Builds the ordered quality list shown to clients from three sources of
decreasing priority:

1. the quality-URL document's bit-rate ladder, matched by tier name,
2. the quality-URL document's flat play URL list, by position,
3. the share page item's own bit-rate ladder, by position.

Three informational entries always come first, then the optional original
(master) rendition, then at most one entry per tier in 1080P, 720P, 540P
order. A tier filled by a higher-priority source is never overwritten.
"""

from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple

import structlog

from douyin_api.core.config import BrandingConfig
from douyin_api.core.formatting import (
    UNKNOWN_RESOLUTION,
    UNKNOWN_SIZE,
    format_file_size,
    format_play_count,
)
from douyin_api.core.http import HttpClient
from douyin_api.models.payload import BitRateRung, PageItem, QualitySourceDocument
from douyin_api.models.video import QualityEntry, QualityList, Statistics, VideoMetadata
from douyin_api.services.statistics import StatisticsFetcher

logger = structlog.get_logger(__name__)

PLACEHOLDER_URL = "javascript:void(0)"
ORIGINAL_LABEL = "[原画]"


@dataclass(frozen=True)
class Tier:
    """A quality bucket and the gear-name keyword that identifies it."""

    label: str
    keyword: str


TIERS = (
    Tier("[1080P]", "1080"),
    Tier("[720P]", "720"),
    Tier("[540P]", "540"),
)

MAX_TIERS = len(TIERS)


class TierSlots:
    """Tracks which tiers are filled and by which URL."""

    def __init__(self) -> None:
        self._urls: Dict[str, str] = {}

    def __len__(self) -> int:
        return len(self._urls)

    @property
    def full(self) -> bool:
        return len(self._urls) >= MAX_TIERS

    def is_filled(self, tier: Tier) -> bool:
        return tier.label in self._urls

    def fill(self, tier: Tier, url: str, source: str) -> None:
        self._urls[tier.label] = url
        logger.debug("tier_filled", tier=tier.label, source=source)

    def in_order(self) -> List[Tuple[Tier, str]]:
        return [(tier, self._urls[tier.label]) for tier in TIERS if tier.label in self._urls]


def fill_from_named_ladder(slots: TierSlots, ladder: Sequence[BitRateRung]) -> None:
    """Fill each tier from the first rung whose gear name contains its keyword.

    Rungs without a playable URL are skipped. Rungs without a gear name
    never match.
    """
    for tier in TIERS:
        if slots.full:
            break
        if slots.is_filled(tier):
            continue
        for rung in ladder:
            if rung.url and tier.keyword in rung.gear_name:
                slots.fill(tier, rung.url, source="ladder")
                break


def fill_by_position(slots: TierSlots, urls: Sequence[Optional[str]], source: str) -> None:
    """Map positions 0, 1, 2 to 1080P, 720P, 540P, filling only empty tiers."""
    for position, tier in enumerate(TIERS):
        if slots.full:
            break
        if slots.is_filled(tier) or position >= len(urls):
            continue
        url = urls[position]
        if url:
            slots.fill(tier, url, source=source)


class QualityAggregator:
    """Merges the ranked quality sources into the final quality list."""

    def __init__(
        self,
        http: HttpClient,
        statistics: StatisticsFetcher,
        branding: BrandingConfig,
    ) -> None:
        self.http = http
        self.statistics = statistics
        self.branding = branding

    async def _file_size(self, url: str) -> str:
        size = await self.http.probe_size(url)
        return format_file_size(size) if size else UNKNOWN_SIZE

    def info_entries(self, statistics: Statistics) -> List[QualityEntry]:
        play_count = format_play_count(statistics.play_count)
        return [
            QualityEntry(PLACEHOLDER_URL, self.branding.title),
            QualityEntry(PLACEHOLDER_URL, self.branding.disclaimer),
            QualityEntry(PLACEHOLDER_URL, f"当前作品播放量: {play_count}"),
        ]

    async def build(
        self,
        document: QualitySourceDocument,
        page_item: PageItem,
        video_id: str,
        metadata: VideoMetadata,
    ) -> QualityList:
        """Build the quality list and fetch fresh statistics for ``video_id``.

        Args:
            document: Quality-URL document (possibly empty)
            page_item: Item scraped from the share page (possibly empty)
            video_id: Content ID
            metadata: fps/width/height, UNKNOWN where missing

        Returns:
            QualityList with informational entries first, then playable ones
        """
        statistics = await self.statistics.fetch(video_id)
        entries = self.info_entries(statistics)
        fps = metadata.fps

        original_url = document.original_url
        if original_url:
            size = await self._file_size(original_url)
            resolution = metadata.resolution or UNKNOWN_RESOLUTION
            entries.append(
                QualityEntry(original_url, f"{ORIGINAL_LABEL}-[{fps}FPS]-[{resolution}]-[{size}]")
            )

        slots = TierSlots()
        fill_from_named_ladder(slots, document.ladder)

        fallback_urls = document.fallback_urls
        if not slots.full and fallback_urls is not None:
            fill_by_position(slots, fallback_urls, source="play_url")

        if not slots.full and page_item.has_ladder:
            fill_by_position(slots, [rung.url for rung in page_item.ladder], source="page")

        tiers = []
        for tier, url in slots.in_order():
            size = await self._file_size(url)
            entries.append(QualityEntry(url, f"{tier.label}-[{fps}FPS]-[{size}]"))
            tiers.append(tier.label)

        logger.info(
            "quality_list_built",
            video_id=video_id,
            original=bool(original_url),
            tiers=tiers,
        )

        return QualityList(entries=entries, statistics=statistics, tiers=tiers)
