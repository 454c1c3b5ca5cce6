"""Multi-strategy resolution of a TikTok link to its best direct media URL."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Optional, Protocol, Sequence, Tuple

from .models import (
    LABEL_DOWNLOAD_ADDR,
    LABEL_NO_WATERMARK,
    LABEL_VIDEO_HD,
    LABEL_WATERMARK,
    Candidate,
)

logger = logging.getLogger(__name__)

# Tried in this order; the order only decides ties, selection is by score
STRATEGY_VERSIONS: Tuple[str, ...] = ("v3", "v2", "v1")

# (path inside the result payload, quality label), first string match wins
RESULT_PROBES: Tuple[Tuple[Tuple[str, ...], str], ...] = (
    (("videoHD",), LABEL_VIDEO_HD),
    (("video", "noWatermark"), LABEL_NO_WATERMARK),
    (("videoWatermark",), LABEL_WATERMARK),
    (("video", "downloadAddr"), LABEL_DOWNLOAD_ADDR),
)


class Extractor(Protocol):
    """Anything that can run one extraction strategy for a URL."""

    async def extract(self, url: str, version: str) -> dict[str, Any]: ...


def score_candidate(quality_label: str) -> int:
    """Score a quality label, higher is better.

    The checks are plain substring tests, so "no watermark" also triggers
    the "watermark" penalty: "HD No Watermark" nets 50 + 20 - 20 = 50.
    """
    label = quality_label.lower()
    score = 0
    if "no watermark" in label:
        score += 50
    if "hd" in label:
        score += 20
    if "watermark" in label:
        score -= 20
    return score


def _dig(payload: Any, path: Sequence[str]) -> Any:
    for key in path:
        if not isinstance(payload, dict):
            return None
        payload = payload.get(key)
    return payload


def probe_result(result: dict[str, Any]) -> Optional[Tuple[str, str]]:
    """Find the first usable media URL in an extraction result.

    The first string-typed field ends the probe. If that string is empty
    the result has no usable URL, even when a later field holds one.

    Returns:
        Tuple of (media_url, quality_label), or None if no probe matched.
    """
    for path, label in RESULT_PROBES:
        value = _dig(result, path)
        if isinstance(value, str):
            if not value:
                return None
            return value, label
    return None


def _is_usable(response: Any) -> bool:
    return (
        isinstance(response, dict)
        and response.get("status") == "success"
        and isinstance(response.get("result"), dict)
        and bool(response["result"])
    )


async def resolve(
    url: str,
    extractor: Extractor,
    versions: Sequence[str] = STRATEGY_VERSIONS,
) -> Optional[Candidate]:
    """Resolve a TikTok URL to the best direct media link.

    Every strategy is tried once, sequentially. A strategy that raises or
    returns an unusable response contributes nothing and does not stop the
    others.

    Args:
        url: TikTok video URL, already validated by the caller
        extractor: Extraction capability, usually a TikTokClient
        versions: Strategy identifiers in priority order

    Returns:
        The highest-scoring Candidate, or None if no strategy produced one.
    """
    logger.info(f"Resolving TikTok: {url}")
    candidates: list[Candidate] = []

    for version in versions:
        logger.debug(f"Trying strategy {version} for {url}")
        try:
            response = await extractor.extract(url, version)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.warning(f"Strategy {version} error for {url}: {e}")
            continue

        status = response.get("status") if isinstance(response, dict) else None
        logger.info(f"Strategy {version} status: {status}")

        if not _is_usable(response):
            if isinstance(response, dict) and response.get("message"):
                logger.debug(f"Strategy {version} message: {response['message']}")
            continue

        found = probe_result(response["result"])
        if found is None:
            logger.debug(f"Strategy {version} returned no media URL")
            continue

        media_url, quality_label = found
        candidates.append(Candidate(media_url, quality_label, version))

    if not candidates:
        logger.warning(f"No candidates found for {url}")
        return None

    # sorted() is stable, so equal scores keep the order strategies were tried
    best = sorted(
        candidates, key=lambda c: score_candidate(c.quality_label), reverse=True
    )[0]
    logger.info(
        f"Selected {best.quality_label} from {best.strategy_id} "
        f"out of {len(candidates)} candidate(s)"
    )
    return best
