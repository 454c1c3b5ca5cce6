"""TikTok extraction exception classes."""


class TikTokError(Exception):
    """Base exception for TikTok extraction errors."""

    pass


class TikTokDeletedError(TikTokError):
    """Video has been deleted by the creator."""

    pass


class TikTokPrivateError(TikTokError):
    """Video is private and cannot be accessed."""

    pass


class TikTokNetworkError(TikTokError):
    """Network error occurred during request."""

    pass


class TikTokRateLimitError(TikTokError):
    """Too many requests - rate limited."""

    pass


class TikTokRegionError(TikTokError):
    """Video is not available in the server's region (geo-blocked)."""

    pass


class TikTokExtractionError(TikTokError):
    """Generic extraction/parsing error (unknown strategy, bad payload, etc.)."""

    pass
