"""Local speaker output through pygame.mixer."""

import io
import logging
import threading
import urllib.request
from typing import Optional

import pygame

from src.config import HTTP_TIMEOUT, USER_AGENT
from src.domain.ports import AudioDevicePort

logger = logging.getLogger("bingo_musical.audio.pygame")


class PygameAudioDevice(AudioDevicePort):
    """Streams are downloaded into memory before playback starts.

    ``prefetch`` runs in worker threads. The cache holds one ``(url, data)``
    pair and only the most recent request may fill it, so a slow download of
    a song the host already skipped never replaces the current one.
    """

    def __init__(self, timeout: float = HTTP_TIMEOUT):
        self.timeout = timeout
        self._lock = threading.Lock()
        self._cached: Optional[tuple[str, bytes]] = None
        self._cached_request = 0
        self._requests = 0
        pygame.mixer.init()

    def prefetch(self, url: str) -> None:
        self._fetch(url)

    def play(self, url: str, start_seconds: float = 0.0) -> None:
        pygame.mixer.music.stop()
        data = self._fetch(url)
        pygame.mixer.music.load(io.BytesIO(data))
        pygame.mixer.music.play(start=start_seconds)

    def pause(self) -> None:
        pygame.mixer.music.pause()

    def resume(self) -> None:
        pygame.mixer.music.unpause()

    def stop(self) -> None:
        pygame.mixer.music.stop()

    def get_elapsed(self) -> float:
        position_ms = pygame.mixer.music.get_pos()
        return max(0, position_ms) / 1000

    def _fetch(self, url: str) -> bytes:
        with self._lock:
            self._requests += 1
            request_number = self._requests
            cached = self._cached
        if cached is not None and cached[0] == url:
            return cached[1]

        data = self._download(url)
        with self._lock:
            if request_number > self._cached_request:
                self._cached = (url, data)
                self._cached_request = request_number
            else:
                logger.debug("Discarding stale download of %s", url)
        return data

    def _download(self, url: str) -> bytes:
        req = urllib.request.Request(url, headers={"User-Agent": USER_AGENT})
        with urllib.request.urlopen(req, timeout=self.timeout) as response:
            data = response.read()
        logger.info("Audio downloaded (%s bytes)", len(data))
        return data
