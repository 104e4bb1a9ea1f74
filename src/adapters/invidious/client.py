"""Invidious API client with mirror rotation and retry backoff."""

from __future__ import annotations

import json
import logging
import re
import time
import urllib.parse
import urllib.request
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Optional

from src.config import HTTP_TIMEOUT, INVIDIOUS_INSTANCES, INVIDIOUS_MAX_RETRIES, USER_AGENT
from src.domain.errors import ProviderError

logger = logging.getLogger("bingo_musical.invidious")

DEFAULT_VIDEO_DURATION = 180

_VIDEO_ID_PATTERNS = [
    re.compile(r"(?:youtube\.com/watch\?v=|youtu\.be/|youtube\.com/embed/)([^&?/]+)"),
    re.compile(r"^([a-zA-Z0-9_-]{11})$"),
]
_PLAYLIST_ID_PATTERN = re.compile(r"[?&]list=([^&]+)")


@dataclass
class RequestLogEntry:
    timestamp: str
    method: str
    endpoint: str
    instance: str
    success: bool


@dataclass
class VideoInfo:
    id: str
    title: str
    artist: str
    duration: int
    thumbnail: str


def _thumbnail(item: dict, video_id: str) -> str:
    thumbs = item.get("videoThumbnails") or []
    if thumbs and isinstance(thumbs[0], dict) and thumbs[0].get("url"):
        return thumbs[0]["url"]
    return f"https://img.youtube.com/vi/{video_id}/maxresdefault.jpg"


def _video_from_item(item: dict) -> VideoInfo:
    video_id = str(item.get("videoId", ""))
    return VideoInfo(
        id=video_id,
        title=item.get("title") or "Untitled video",
        artist=item.get("author") or "Unknown channel",
        duration=int(item.get("lengthSeconds") or DEFAULT_VIDEO_DURATION),
        thumbnail=_thumbnail(item, video_id),
    )


def _urllib_fetch_json(url: str, timeout: float) -> Any:
    req = urllib.request.Request(url, headers={"User-Agent": USER_AGENT, "Accept": "application/json"})
    with urllib.request.urlopen(req, timeout=timeout) as resp:
        return json.loads(resp.read().decode("utf-8"))


class InvidiousClient:
    """Blocking client; callers on the event loop go through ``asyncio.to_thread``."""

    def __init__(
        self,
        instances: list[str] | None = None,
        max_retries: int = INVIDIOUS_MAX_RETRIES,
        timeout: float = HTTP_TIMEOUT,
        fetch_json: Callable[[str, float], Any] | None = None,
        sleep: Callable[[float], None] = time.sleep,
        backoff_seconds: float = 1.0,
    ):
        self.instances = list(instances or INVIDIOUS_INSTANCES)
        if not self.instances:
            raise ValueError("At least one Invidious instance is required")
        self.max_retries = max_retries
        self.timeout = timeout
        self.backoff_seconds = backoff_seconds
        self._fetch_json = fetch_json or _urllib_fetch_json
        self._sleep = sleep
        self._current_index = 0
        self._request_log: list[RequestLogEntry] = []

    # ── Instance rotation ───────────────────────────────────────────

    @property
    def current_instance(self) -> str:
        return self.instances[self._current_index]

    def rotate_instance(self) -> str:
        self._current_index = (self._current_index + 1) % len(self.instances)
        logger.info("Rotating to Invidious instance %s", self.current_instance)
        return self.current_instance

    def fetch_with_retry(self, endpoint: str) -> Any:
        last_error: Optional[Exception] = None
        for attempt in range(self.max_retries):
            instance = self.current_instance
            url = f"{instance}{endpoint}"
            try:
                data = self._fetch_json(url, self.timeout)
            except Exception as exc:
                last_error = exc
                logger.warning(
                    "Invidious attempt %s/%s failed (instance=%s): %s",
                    attempt + 1,
                    self.max_retries,
                    instance,
                    exc,
                )
                self._log_request(endpoint, instance, success=False)
                self.rotate_instance()
                if attempt < self.max_retries - 1:
                    self._sleep(self.backoff_seconds * (attempt + 1))
                continue
            self._log_request(endpoint, instance, success=True)
            return data

        raise ProviderError(f"Invidious request failed after {self.max_retries} attempts: {last_error}")

    # ── Request log ─────────────────────────────────────────────────

    def _log_request(self, endpoint: str, instance: str, success: bool) -> None:
        self._request_log.append(
            RequestLogEntry(
                timestamp=datetime.now().isoformat(),
                method="GET",
                endpoint=endpoint,
                instance=instance,
                success=success,
            )
        )

    @property
    def request_log(self) -> list[RequestLogEntry]:
        return list(self._request_log)

    def clear_request_log(self) -> None:
        self._request_log = []

    def get_stats(self) -> dict:
        total = len(self._request_log)
        successful = sum(1 for entry in self._request_log if entry.success)
        usage: dict[str, int] = {}
        for entry in self._request_log:
            usage[entry.instance] = usage.get(entry.instance, 0) + 1
        return {
            "total_requests": total,
            "successful": successful,
            "failed": total - successful,
            "success_rate": f"{successful / total * 100:.2f}%" if total else "0%",
            "instance_usage": usage,
        }

    # ── API ─────────────────────────────────────────────────────────

    def search_videos(self, query: str, max_results: int = 20) -> list[VideoInfo]:
        encoded = urllib.parse.quote(query)
        data = self.fetch_with_retry(f"/api/v1/search?q={encoded}&type=video&sort_by=relevance")
        if not data:
            return []
        return [_video_from_item(item) for item in data[:max_results] if item.get("videoId")]

    def get_video_info(self, video_id: str) -> VideoInfo:
        data = self.fetch_with_retry(f"/api/v1/videos/{video_id}")
        return _video_from_item({**data, "videoId": video_id})

    def get_playlist_videos(self, playlist_id: str) -> list[VideoInfo]:
        data = self.fetch_with_retry(f"/api/v1/playlists/{playlist_id}")
        videos = data.get("videos") or []
        if not videos:
            raise ProviderError(f"Playlist {playlist_id} is empty or was not found")
        return [_video_from_item(item) for item in videos]

    def get_audio_url(self, video_id: str) -> dict:
        """Return the highest-bitrate audio-only stream of a video."""
        data = self.fetch_with_retry(f"/api/v1/videos/{video_id}")
        formats = [
            f for f in data.get("adaptiveFormats") or []
            if str(f.get("type", "")).startswith("audio/") and f.get("url")
        ]
        if not formats:
            raise ProviderError(f"No audio stream for video {video_id}")
        best = max(formats, key=lambda f: int(f.get("bitrate") or 0))
        return {
            "url": best["url"],
            "type": best.get("type", ""),
            "bitrate": int(best.get("bitrate") or 0),
            "duration": int(data.get("lengthSeconds") or 0) or None,
        }

    @staticmethod
    def extract_video_id(url: str) -> Optional[str]:
        for pattern in _VIDEO_ID_PATTERNS:
            match = pattern.search(url.strip())
            if match:
                return match.group(1)
        return None

    @staticmethod
    def extract_playlist_id(url: str) -> Optional[str]:
        match = _PLAYLIST_ID_PATTERN.search(url)
        return match.group(1) if match else None
