"""TikTok extraction and link resolution.

This package turns a TikTok video URL into a direct media link. The client
exposes several independent extraction strategies; the resolver tries them
all and keeps the best-scoring link.

Example:
    >>> from tiktok_api import TikTokClient, resolve
    >>>
    >>> client = TikTokClient()
    >>> candidate = await resolve("https://www.tiktok.com/@user/video/123", client)
    >>> if candidate is None:
    ...     print("Nothing found")
    ... else:
    ...     print(candidate.quality_label, candidate.media_url)
"""

from .client import TikTokClient
from .exceptions import (
    TikTokDeletedError,
    TikTokError,
    TikTokExtractionError,
    TikTokNetworkError,
    TikTokPrivateError,
    TikTokRateLimitError,
    TikTokRegionError,
)
from .models import Candidate
from .resolver import STRATEGY_VERSIONS, Extractor, probe_result, resolve, score_candidate

__all__ = [
    # Client
    "TikTokClient",
    # Resolution
    "resolve",
    "score_candidate",
    "probe_result",
    "Extractor",
    "STRATEGY_VERSIONS",
    # Models
    "Candidate",
    # Exceptions
    "TikTokError",
    "TikTokDeletedError",
    "TikTokPrivateError",
    "TikTokNetworkError",
    "TikTokRateLimitError",
    "TikTokRegionError",
    "TikTokExtractionError",
]
