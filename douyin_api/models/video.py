"""Video data models for the resolution pipeline."""

from dataclasses import asdict, dataclass, field
from enum import IntEnum
from typing import Any, Dict, List, Mapping, Optional, Union

from douyin_api.core.formatting import UNKNOWN
from douyin_api.models.payload import QualitySourceDocument, dig

# fps/width/height are either the upstream value or the UNKNOWN marker
MetaValue = Union[int, str]


class ResultCode(IntEnum):
    """Codes carried in the ``code`` field of every response envelope."""

    SUCCESS = 200
    RESOLUTION_FAILED = 201
    BAD_REQUEST = 400
    FORBIDDEN = 403
    NOT_FOUND = 404
    INTERNAL_ERROR = 500


@dataclass(frozen=True)
class QualityEntry:
    """A playable source (or informational marker) and its label."""

    url: str
    level: str

    def to_dict(self) -> Dict[str, str]:
        return {"url": self.url, "level": self.level}


def _count(value: Any) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return 0


@dataclass(frozen=True)
class Statistics:
    """Volatile engagement counters for one video."""

    aweme_id: str
    play_count: int = 0
    digg_count: int = 0
    comment_count: int = 0
    share_count: int = 0
    download_count: int = 0

    @classmethod
    def empty(cls, aweme_id: str) -> "Statistics":
        return cls(aweme_id=str(aweme_id))

    @classmethod
    def from_payload(cls, raw: Mapping[str, Any]) -> "Statistics":
        return cls(
            aweme_id=str(dig(raw, "aweme_id", default="")),
            play_count=_count(dig(raw, "play_count")),
            digg_count=_count(dig(raw, "digg_count")),
            comment_count=_count(dig(raw, "comment_count")),
            share_count=_count(dig(raw, "share_count")),
            download_count=_count(dig(raw, "download_count")),
        )


def known_or_unknown(value: Any) -> MetaValue:
    """Render empty/zero metadata values as the explicit UNKNOWN marker."""
    if value is None or value == "" or value == 0:
        return UNKNOWN
    if isinstance(value, (int, str)):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return str(value)


@dataclass(frozen=True)
class VideoMetadata:
    """Frame rate and resolution of the master rendition."""

    fps: MetaValue = UNKNOWN
    width: MetaValue = UNKNOWN
    height: MetaValue = UNKNOWN

    @classmethod
    def from_document(cls, document: QualitySourceDocument) -> "VideoMetadata":
        return cls(
            fps=known_or_unknown(document.fps),
            width=known_or_unknown(document.width),
            height=known_or_unknown(document.height),
        )

    @property
    def resolution(self) -> Optional[str]:
        """``"{width}×{height}"`` when both dimensions are known."""
        if self.width == UNKNOWN or self.height == UNKNOWN:
            return None
        return f"{self.width}×{self.height}"


@dataclass
class CacheRecord:
    """Non-volatile resolution payload persisted per video ID."""

    video_id: str
    timestamp: float
    document: QualitySourceDocument
    metadata: VideoMetadata

    def to_json_dict(self) -> Dict[str, Any]:
        return {
            "aweme_id": self.video_id,
            "timestamp": self.timestamp,
            "highQualityData": self.document.raw,
            "fps": self.metadata.fps,
            "width": self.metadata.width,
            "height": self.metadata.height,
        }

    @classmethod
    def from_json_dict(cls, video_id: str, raw: Mapping[str, Any]) -> "CacheRecord":
        """Rebuild a record from its serialized form.

        Raises:
            ValueError: If the timestamp is missing or not numeric
        """
        timestamp = raw.get("timestamp")
        if isinstance(timestamp, bool) or not isinstance(timestamp, (int, float)):
            raise ValueError("cache record has no numeric timestamp")

        return cls(
            video_id=str(raw.get("aweme_id", video_id)),
            timestamp=float(timestamp),
            document=QualitySourceDocument(raw.get("highQualityData")),
            metadata=VideoMetadata(
                fps=known_or_unknown(raw.get("fps")),
                width=known_or_unknown(raw.get("width")),
                height=known_or_unknown(raw.get("height")),
            ),
        )


@dataclass
class QualityList:
    """Output of the aggregator: ordered entries plus fresh statistics."""

    entries: List[QualityEntry]
    statistics: Statistics
    tiers: List[str] = field(default_factory=list)


@dataclass
class ResolutionResult:
    """Response envelope ``{code, message, data}``."""

    code: int
    message: str
    data: Dict[str, Any] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.code == ResultCode.SUCCESS

    def to_dict(self) -> Dict[str, Any]:
        result = asdict(self)
        result["code"] = int(self.code)
        return result
