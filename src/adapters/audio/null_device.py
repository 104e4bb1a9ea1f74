"""Silent device used when no sound output can be opened."""

import logging
import time
from typing import Optional

from src.domain.ports import AudioDevicePort

logger = logging.getLogger("bingo_musical.audio.null")


class NullAudioDevice(AudioDevicePort):
    """Keeps time like a real device so clip timers and the UI still work."""

    def __init__(self):
        self.current_url: Optional[str] = None
        self._started_at: Optional[float] = None
        self._elapsed = 0.0

    def play(self, url: str, start_seconds: float = 0.0) -> None:
        logger.info("No audio output; pretending to play %s", url)
        self.current_url = url
        self._elapsed = 0.0
        self._started_at = time.monotonic()

    def pause(self) -> None:
        if self._started_at is not None:
            self._elapsed += time.monotonic() - self._started_at
            self._started_at = None

    def resume(self) -> None:
        if self.current_url and self._started_at is None:
            self._started_at = time.monotonic()

    def stop(self) -> None:
        self.current_url = None
        self._started_at = None
        self._elapsed = 0.0

    def get_elapsed(self) -> float:
        running = time.monotonic() - self._started_at if self._started_at is not None else 0.0
        return self._elapsed + running
