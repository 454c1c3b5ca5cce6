"""TikTok extraction client with several independent backend strategies."""

import asyncio
import logging
import os
import threading
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Awaitable, Callable, Optional

import aiohttp
from aiohttp import ClientTimeout, TCPConnector
import yt_dlp

from .exceptions import (
    TikTokDeletedError,
    TikTokError,
    TikTokExtractionError,
    TikTokNetworkError,
    TikTokPrivateError,
    TikTokRateLimitError,
    TikTokRegionError,
)
from data.config import config

logger = logging.getLogger(__name__)

RAPID_HOST = "tokapi-mobile-version.p.rapidapi.com"
RAPID_LINK = f"https://{RAPID_HOST}/v1/post"
HYBRID_PATH = "/api/hybrid/video_data"

# Minimum height for a non-watermarked yt-dlp format to count as HD
HD_MIN_HEIGHT = 720


def _first_url(addr: Any) -> Optional[str]:
    """Return the first entry of an aweme ``url_list`` block, if any."""
    if not isinstance(addr, dict):
        return None
    url_list = addr.get("url_list") or []
    if url_list and isinstance(url_list[0], str):
        return url_list[0]
    return None


class TikTokClient:
    """Client exposing TikTok extraction as named strategies.

    Each strategy is one backend, tried once per call:

    - ``v3``: yt-dlp's TikTok extractor (runs in a thread pool)
    - ``v2``: self-hosted hybrid parsing API (``API_LINK``)
    - ``v1``: RapidAPI mobile endpoint (``RAPID_TOKEN``)

    ``extract`` returns the response shape of an extraction library:
    ``{"status": "success", "result": {...}}`` on success, or
    ``{"status": "error", "message": "..."}`` when the backend reports a
    TikTok error. Unexpected exceptions propagate.

    Args:
        api_link: Base URL of the hybrid API. Defaults to ``API_LINK``.
        rapid_token: RapidAPI key. Defaults to ``RAPID_TOKEN``.
        timeout: Total timeout in seconds for HTTP backends.
        cookies: Optional path to a Netscape-format cookies file for yt-dlp.
            Defaults to ``YTDLP_COOKIES``. Missing files are ignored with
            a warning.

    Example:
        >>> client = TikTokClient()
        >>> response = await client.extract("https://www.tiktok.com/@user/video/123", "v3")
        >>> response["status"]
        'success'
    """

    # Thread pool for sync yt-dlp extraction calls
    _executor: Optional[ThreadPoolExecutor] = None
    _executor_lock = threading.Lock()
    _executor_size: int = 16

    _aiohttp_connector: Optional[TCPConnector] = None
    _connector_lock = threading.Lock()

    @classmethod
    def _get_executor(cls) -> ThreadPoolExecutor:
        """Get or create the shared ThreadPoolExecutor."""
        with cls._executor_lock:
            if cls._executor is None:
                cls._executor = ThreadPoolExecutor(
                    max_workers=cls._executor_size,
                    thread_name_prefix="tiktok_sync_",
                )
                logger.info(
                    f"Created TikTokClient executor with {cls._executor_size} workers"
                )
            return cls._executor

    @classmethod
    def _get_connector(cls) -> TCPConnector:
        """Get or create the shared aiohttp connector for HTTP backends."""
        with cls._connector_lock:
            if cls._aiohttp_connector is None or cls._aiohttp_connector.closed:
                cls._aiohttp_connector = TCPConnector(
                    limit=100,
                    ttl_dns_cache=300,
                    enable_cleanup_closed=True,
                )
            return cls._aiohttp_connector

    @classmethod
    async def close_connector(cls) -> None:
        """Close shared aiohttp connector. Call on application shutdown."""
        with cls._connector_lock:
            connector = cls._aiohttp_connector
            cls._aiohttp_connector = None
        if connector and not connector.closed:
            await connector.close()

    @classmethod
    def shutdown_executor(cls) -> None:
        """Shutdown the shared executor. Call on application shutdown."""
        with cls._executor_lock:
            if cls._executor is not None:
                cls._executor.shutdown(wait=False)
                cls._executor = None

    def __init__(
        self,
        api_link: Optional[str] = None,
        rapid_token: Optional[str] = None,
        timeout: Optional[float] = None,
        cookies: Optional[str] = None,
    ):
        api_config = config["api"]
        self.api_link = (api_link if api_link is not None else api_config["api_link"]).rstrip("/")
        self.rapid_token = rapid_token if rapid_token is not None else api_config["rapid_token"]
        self.timeout = timeout if timeout is not None else api_config["timeout"]

        cookies_path = cookies or api_config["cookies"]
        if cookies_path:
            if not os.path.isabs(cookies_path):
                cookies_path = os.path.abspath(cookies_path)

            if os.path.isfile(cookies_path):
                self.cookies = cookies_path
            else:
                logger.warning(
                    f"Cookie file not found: {cookies_path} - cookies will not be used"
                )
                self.cookies = None
        else:
            self.cookies = None

        self._backends: dict[str, Callable[[str], Awaitable[dict[str, Any]]]] = {
            "v3": self._ytdlp_result,
            "v2": self._hybrid_result,
            "v1": self._rapid_result,
        }

    @property
    def versions(self) -> tuple[str, ...]:
        """Strategy identifiers this client understands."""
        return tuple(self._backends)

    async def extract(self, url: str, version: str) -> dict[str, Any]:
        """Run one extraction strategy for a TikTok URL.

        Args:
            url: TikTok video URL
            version: Strategy identifier ("v3", "v2" or "v1")

        Returns:
            Extraction response dict with "status" and "result" or "message".

        Raises:
            TikTokExtractionError: If the version is unknown.
        """
        backend = self._backends.get(version)
        if backend is None:
            raise TikTokExtractionError(f"Unknown extraction version: {version}")

        try:
            result = await backend(url)
        except TikTokError as e:
            logger.debug(f"{version} backend failed for {url}: {type(e).__name__}: {e}")
            return {"status": "error", "message": str(e)}

        return {"status": "success", "result": result}

    # yt-dlp (v3)

    async def _run_sync(self, func: Any, *args: Any) -> Any:
        """Run synchronous function in executor."""
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(self._get_executor(), func, *args)

    def _get_ydl_opts(self) -> dict[str, Any]:
        """Get base yt-dlp options."""
        opts: dict[str, Any] = {
            "quiet": True,
            "no_warnings": True,
            "skip_download": True,
            "socket_timeout": self.timeout,
        }
        if self.cookies:
            opts["cookiefile"] = self.cookies
            logger.debug(f"yt-dlp using cookie file: {self.cookies}")
        return opts

    def _raise_for_download_error(self, error: Exception, url: str) -> None:
        """Map a yt-dlp DownloadError onto the TikTok exception hierarchy."""
        error_msg = str(error).lower()
        if "unavailable" in error_msg or "removed" in error_msg or "deleted" in error_msg:
            raise TikTokDeletedError(f"Video {url} was deleted") from error
        elif "private" in error_msg:
            raise TikTokPrivateError(f"Video {url} is private") from error
        elif "rate" in error_msg or "too many" in error_msg or "429" in error_msg:
            raise TikTokRateLimitError("Rate limited by TikTok") from error
        elif (
            "region" in error_msg
            or "geo" in error_msg
            or "country" in error_msg
            or "not available in your" in error_msg
        ):
            raise TikTokRegionError(f"Video {url} is not available in this region") from error
        logger.error(
            f"yt-dlp download error for {url}: {error}\n"
            f"  yt-dlp version: {yt_dlp.version.__version__}\n"
            f"  Cookies: {self.cookies or 'None'}"
        )
        raise TikTokExtractionError(f"Failed to extract video {url}") from error

    def _extract_info_sync(self, url: str) -> dict[str, Any]:
        """Extract video metadata with yt-dlp, without downloading."""
        try:
            with yt_dlp.YoutubeDL(self._get_ydl_opts()) as ydl:
                info = ydl.extract_info(url, download=False)
        except yt_dlp.utils.DownloadError as e:
            self._raise_for_download_error(e, url)
        if not isinstance(info, dict):
            raise TikTokExtractionError(f"yt-dlp returned no data for {url}")
        return ydl.sanitize_info(info)

    @staticmethod
    def _formats_to_result(info: dict[str, Any]) -> dict[str, Any]:
        """Map yt-dlp formats onto the videoHD / video / videoWatermark shape.

        yt-dlp marks the downloadAddr format with a "watermarked" note; every
        other video format is treated as watermark-free.
        """
        formats = [
            f
            for f in info.get("formats") or []
            if isinstance(f.get("url"), str) and f.get("vcodec") != "none"
        ]
        watermarked = [
            f for f in formats if "watermark" in (f.get("format_note") or "").lower()
        ]
        clean = [f for f in formats if f not in watermarked]

        result: dict[str, Any] = {}
        best = max(
            clean,
            key=lambda f: (f.get("height") or 0, f.get("tbr") or 0),
            default=None,
        )
        if best is not None:
            if (best.get("height") or 0) >= HD_MIN_HEIGHT:
                result["videoHD"] = best["url"]
            result["video"] = {"noWatermark": best["url"]}
        if watermarked:
            result["videoWatermark"] = watermarked[0]["url"]
        return result

    async def _ytdlp_result(self, url: str) -> dict[str, Any]:
        info = await self._run_sync(self._extract_info_sync, url)
        return self._formats_to_result(info)

    # HTTP backends (v2, v1)

    async def _get_json(
        self,
        url: str,
        params: Optional[dict[str, str]] = None,
        headers: Optional[dict[str, str]] = None,
    ) -> Any:
        """GET a JSON document through the shared connector.

        Raises:
            TikTokRateLimitError: HTTP 429
            TikTokNetworkError: Connection errors and timeouts
            TikTokExtractionError: Body is not JSON
        """
        timeout = ClientTimeout(total=self.timeout)
        try:
            async with aiohttp.ClientSession(
                connector=self._get_connector(),
                timeout=timeout,
                connector_owner=False,  # Don't close shared connector
                headers=headers,
            ) as session:
                async with session.get(url, params=params) as response:
                    if response.status == 429:
                        raise TikTokRateLimitError(f"Rate limited by {response.url.host}")
                    try:
                        return await response.json(content_type=None)
                    except ValueError as e:
                        raise TikTokExtractionError(
                            f"Non-JSON response ({response.status}) from {response.url.host}"
                        ) from e
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise TikTokNetworkError(f"Network error: {e}") from e

    async def _hybrid_result(self, url: str) -> dict[str, Any]:
        if not self.api_link:
            raise TikTokExtractionError("Hybrid API link is not configured")

        res = await self._get_json(
            self.api_link + HYBRID_PATH, params={"url": url, "minimal": "true"}
        )
        if not isinstance(res, dict) or not isinstance(res.get("data"), dict):
            raise TikTokExtractionError("Hybrid API returned no video data")

        video_data = res["data"].get("video_data") or {}
        if not isinstance(video_data, dict):
            raise TikTokExtractionError("Hybrid API returned malformed video data")
        result: dict[str, Any] = {}
        if video_data.get("nwm_video_url_HQ"):
            result["videoHD"] = video_data["nwm_video_url_HQ"]
        if video_data.get("nwm_video_url"):
            result["video"] = {"noWatermark": video_data["nwm_video_url"]}
        watermark = video_data.get("wm_video_url_HQ") or video_data.get("wm_video_url")
        if watermark:
            result["videoWatermark"] = watermark
        return result

    def _rapid_headers(self) -> dict[str, str]:
        return {
            "X-RapidAPI-Key": self.rapid_token,
            "X-RapidAPI-Host": RAPID_HOST,
        }

    async def _rapid_result(self, url: str) -> dict[str, Any]:
        if not self.rapid_token:
            raise TikTokExtractionError("RapidAPI token is not configured")

        res = await self._get_json(
            RAPID_LINK, params={"video_url": url}, headers=self._rapid_headers()
        )
        if not isinstance(res, dict):
            raise TikTokExtractionError("RapidAPI returned an unexpected payload")
        if "error" in res:
            raise TikTokExtractionError(f"RapidAPI error: {res['error']}")

        detail = res.get("aweme_detail")
        if not isinstance(detail, dict):
            raise TikTokDeletedError(f"Video {url} was not found")

        video = detail.get("video") or {}
        result: dict[str, Any] = {}
        play = _first_url(video.get("play_addr_h264")) or _first_url(video.get("play_addr"))
        download = _first_url(video.get("download_addr"))
        if play or download:
            result["video"] = {}
            if play:
                result["video"]["noWatermark"] = play
            if download:
                result["video"]["downloadAddr"] = download
        return result
