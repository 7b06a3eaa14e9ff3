"""Loosely typed upstream payloads.

Neither the quality-URL provider nor the share page guarantee their shape,
so both are kept as the raw mapping they arrived as and every field is read
through :func:`dig`, which returns a default instead of raising.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union

PathKey = Union[str, int]


def dig(payload: Any, *path: PathKey, default: Any = None) -> Any:
    """Walk ``path`` through nested mappings/lists, returning ``default`` on any gap.

    >>> dig({"a": [{"b": 1}]}, "a", 0, "b")
    1
    >>> dig({"a": []}, "a", 0, "b", default="x")
    'x'
    """
    current = payload
    for key in path:
        if isinstance(key, int):
            if not isinstance(current, Sequence) or isinstance(current, (str, bytes)):
                return default
            if key >= len(current) or key < -len(current):
                return default
            current = current[key]
        else:
            if not isinstance(current, Mapping) or key not in current:
                return default
            current = current[key]
        if current is None:
            return default
    return current


@dataclass(frozen=True)
class BitRateRung:
    """One rendition on a bit-rate ladder."""

    gear_name: str
    url: Optional[str]
    fps: Optional[Any] = None

    @classmethod
    def from_payload(cls, raw: Any) -> "BitRateRung":
        url = dig(raw, "play_addr", "url_list", 0)
        return cls(
            gear_name=str(dig(raw, "gear_name", default="")),
            url=url if isinstance(url, str) and url else None,
            fps=dig(raw, "FPS"),
        )


def _ladder(raw: Any) -> List[BitRateRung]:
    if not isinstance(raw, list):
        return []
    return [BitRateRung.from_payload(rung) for rung in raw]


class QualitySourceDocument:
    """Response of the high-quality play URL endpoint.

    Relevant shape::

        {"data": {"original_video_url": str,
                  "play_url": {"url_list": [str, ...]},
                  "video_data": {"aweme_detail": {"video": {
                      "width": int, "height": int,
                      "bit_rate": [{"gear_name": str, "FPS": int,
                                    "play_addr": {"url_list": [str]}}]}}}}}
    """

    def __init__(self, raw: Optional[Mapping[str, Any]] = None) -> None:
        self.raw: Dict[str, Any] = dict(raw) if isinstance(raw, Mapping) else {}

    @property
    def is_empty(self) -> bool:
        return not self.raw

    @property
    def original_url(self) -> str:
        url = dig(self.raw, "data", "original_video_url", default="")
        return url if isinstance(url, str) else ""

    @property
    def video(self) -> Dict[str, Any]:
        video = dig(self.raw, "data", "video_data", "aweme_detail", "video", default={})
        return video if isinstance(video, dict) else {}

    @property
    def ladder(self) -> List[BitRateRung]:
        return _ladder(dig(self.video, "bit_rate"))

    @property
    def has_ladder(self) -> bool:
        return isinstance(dig(self.video, "bit_rate"), list)

    @property
    def fallback_urls(self) -> Optional[List[Optional[str]]]:
        """Flat play URL list, or None when the document carries none.

        Non-string entries become None so later URLs keep their positions.
        """
        urls = dig(self.raw, "data", "play_url", "url_list")
        if not isinstance(urls, list):
            return None
        return [u if isinstance(u, str) else None for u in urls]

    @property
    def fps(self) -> Any:
        return dig(self.video, "bit_rate", 0, "FPS")

    @property
    def width(self) -> Any:
        return dig(self.video, "width")

    @property
    def height(self) -> Any:
        return dig(self.video, "height")

    def __eq__(self, other: object) -> bool:
        return isinstance(other, QualitySourceDocument) and self.raw == other.raw

    def __repr__(self) -> str:
        return f"QualitySourceDocument(original={bool(self.original_url)}, rungs={len(self.ladder)})"


class PageItem:
    """First ``item_list`` entry scraped from the share page's embedded state."""

    def __init__(self, raw: Optional[Mapping[str, Any]] = None) -> None:
        self.raw: Dict[str, Any] = dict(raw) if isinstance(raw, Mapping) else {}

    @property
    def ladder(self) -> List[BitRateRung]:
        return _ladder(dig(self.raw, "video", "bit_rate"))

    @property
    def has_ladder(self) -> bool:
        return isinstance(dig(self.raw, "video", "bit_rate"), list)

    def __repr__(self) -> str:
        return f"PageItem(rungs={len(self.ladder)})"
