"""Data models for resolved TikTok media."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

# Quality labels, in the order the result payload is probed
LABEL_VIDEO_HD = "HD (videoHD)"
LABEL_NO_WATERMARK = "HD No Watermark"
LABEL_WATERMARK = "Watermark"
LABEL_DOWNLOAD_ADDR = "Watermark (downloadAddr)"


@dataclass(frozen=True)
class Candidate:
    """A direct media link produced by one extraction strategy.

    Attributes:
        media_url: Directly fetchable URL of the video file
        quality_label: Human-readable quality tag (see LABEL_* constants)
        strategy_id: Extraction strategy that produced it ("v3", "v2" or "v1")
    """

    media_url: str
    quality_label: str
    strategy_id: str

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the JSON shape returned by the API."""
        return {
            "url": self.media_url,
            "quality": self.quality_label,
            "version": self.strategy_id,
        }
