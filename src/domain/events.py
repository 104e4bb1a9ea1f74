"""Synchronous observer list used by the playback session."""

import logging
from typing import Any, Callable

logger = logging.getLogger("bingo_musical.events")

SONGS_LOADED = "songs_loaded"
SONG_DRAWN = "song_drawn"
PLAYBACK_STARTED = "playback_started"
PLAYBACK_ENDED = "playback_ended"
PLAYBACK_PAUSED = "playback_paused"
PLAYBACK_RESUMED = "playback_resumed"
PLAYBACK_STOPPED = "playback_stopped"
PLAYBACK_ERROR = "playback_error"
BINGO_FINISHED = "bingo_finished"
AUTO_PLAY_CHANGED = "auto_play_changed"
RESET = "reset"

SESSION_EVENTS = (
    SONGS_LOADED,
    SONG_DRAWN,
    PLAYBACK_STARTED,
    PLAYBACK_ENDED,
    PLAYBACK_PAUSED,
    PLAYBACK_RESUMED,
    PLAYBACK_STOPPED,
    PLAYBACK_ERROR,
    BINGO_FINISHED,
    AUTO_PLAY_CHANGED,
    RESET,
)

Listener = Callable[..., Any]


class EventEmitter:
    """Per-event ordered listener lists, delivered in registration order."""

    def __init__(self):
        self._listeners: dict[str, list[Listener]] = {}

    def on(self, event: str, listener: Listener) -> Callable[[], None]:
        self._listeners.setdefault(event, []).append(listener)
        return lambda: self.off(event, listener)

    def off(self, event: str, listener: Listener) -> None:
        listeners = self._listeners.get(event, [])
        if listener in listeners:
            listeners.remove(listener)

    def listener_count(self, event: str) -> int:
        return len(self._listeners.get(event, []))

    def emit(self, event: str, *args: Any) -> None:
        for listener in list(self._listeners.get(event, [])):
            try:
                listener(*args)
            except Exception:
                logger.exception("Listener for %s failed", event)
