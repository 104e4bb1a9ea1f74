"""Game session: draws songs without replacement and drives the audio port.

State machine::

    IDLE -> LOADING -> PLAYING <-> PAUSED
    LOADING -> ERRORED -> IDLE          (provider could not resolve audio)
    PLAYING / PAUSED -> IDLE            (clip timer fired)
    any -> STOPPED -> IDLE              (stop_playback)

Everything runs on one asyncio loop. Only ``play_current_song`` suspends
(while the audio port resolves a URL); the clip timer is a loop callback.
Each play attempt gets a token; timer callbacks and late URL resolutions
carrying an outdated token are ignored.
"""

import asyncio
import logging
import random
from typing import Any, Callable, Optional

from src.config import FALLBACK_CLIP_SECONDS
from src.domain import events
from src.domain.errors import NoCurrentSongError, SessionBusyError
from src.domain.events import EventEmitter
from src.domain.model import (
    PlaybackError,
    PlaybackState,
    ResolvedAudio,
    SessionSnapshot,
    Song,
    SongDrawn,
)
from src.domain.ports import AudioPort

logger = logging.getLogger("bingo_musical.session")


class PlaybackSession:

    def __init__(
        self,
        audio: AudioPort,
        rng: Optional[random.Random] = None,
        auto_play: bool = True,
        fallback_clip_seconds: float = FALLBACK_CLIP_SECONDS,
    ):
        self.audio = audio
        self.events = EventEmitter()
        self.fallback_clip_seconds = fallback_clip_seconds
        self._rng = rng or random.Random()
        self._auto_play = auto_play

        self._pool: list[Song] = []
        self._drawn: list[Song] = []
        self._current: Optional[Song] = None
        self._state = PlaybackState.IDLE

        self._play_token = 0
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._timer: Optional[asyncio.TimerHandle] = None
        self._clip_remaining: Optional[float] = None

    # ── Observers ───────────────────────────────────────────────────

    def on(self, event: str, listener: Callable[..., Any]) -> Callable[[], None]:
        return self.events.on(event, listener)

    def off(self, event: str, listener: Callable[..., Any]) -> None:
        self.events.off(event, listener)

    # ── Read-only views ─────────────────────────────────────────────

    @property
    def state(self) -> PlaybackState:
        return self._state

    @property
    def current_song(self) -> Optional[Song]:
        return self._current

    @property
    def drawn(self) -> tuple[Song, ...]:
        return tuple(self._drawn)

    @property
    def pool(self) -> tuple[Song, ...]:
        return tuple(self._pool)

    @property
    def auto_play_enabled(self) -> bool:
        return self._auto_play

    def drawn_ids(self) -> list[str]:
        return [song.id for song in self._drawn]

    def get_state(self) -> SessionSnapshot:
        return SessionSnapshot(
            total_songs=len(self._pool) + len(self._drawn),
            remaining_songs=len(self._pool),
            drawn_songs=len(self._drawn),
            current_song=self._current,
            playback_state=self._state,
            auto_play_enabled=self._auto_play,
        )

    # ── Game lifecycle ──────────────────────────────────────────────

    def load_songs(self, songs: list[Song]) -> None:
        """Start a new game over the playable songs in ``songs``."""
        self._abort_playback()
        self._pool = [song for song in songs if song.has_audio]
        skipped = len(songs) - len(self._pool)
        if skipped:
            logger.warning("Skipped %s songs without a playable source", skipped)
        self._drawn = []
        self._current = None
        self._set_state(PlaybackState.IDLE)
        logger.info("Songs loaded (count=%s)", len(self._pool))
        self.events.emit(events.SONGS_LOADED, len(self._pool))

    async def draw_next_song(self) -> Optional[Song]:
        if self._state is PlaybackState.LOADING:
            raise SessionBusyError("Cannot draw while the current song is loading")

        if not self._pool:
            logger.info("Pool exhausted after %s draws", len(self._drawn))
            self.events.emit(events.BINGO_FINISHED)
            return None

        if self._state in (PlaybackState.PLAYING, PlaybackState.PAUSED):
            self.stop_playback()

        song = self._pool.pop(self._rng.randrange(len(self._pool)))
        self._drawn.append(song)
        self._current = song
        logger.info(
            "Song drawn: %s - %s (remaining=%s, drawn=%s)",
            song.artist,
            song.title,
            len(self._pool),
            len(self._drawn),
        )
        self.events.emit(
            events.SONG_DRAWN,
            SongDrawn(song=song, remaining=len(self._pool), drawn=len(self._drawn)),
        )

        if self._auto_play:
            await self.play_current_song()
        return song

    def set_auto_play(self, enabled: bool) -> None:
        self._auto_play = bool(enabled)
        self.events.emit(events.AUTO_PLAY_CHANGED, self._auto_play)

    def reset(self) -> None:
        self.stop_playback()
        self._pool = []
        self._drawn = []
        self._current = None
        logger.info("Session reset")
        self.events.emit(events.RESET)

    # ── Playback ────────────────────────────────────────────────────

    async def play_current_song(self) -> bool:
        if self._current is None:
            raise NoCurrentSongError()
        if self._state in (PlaybackState.LOADING, PlaybackState.PLAYING):
            logger.warning("Play request ignored (state=%s)", self._state.value)
            return False
        if self._state is PlaybackState.PAUSED:
            self._cancel_timer()
            self.audio.stop()

        song = self._current
        self._play_token += 1
        token = self._play_token
        self._set_state(PlaybackState.LOADING)
        self.events.emit(events.PLAYBACK_STARTED, song)

        try:
            resolved = await self.audio.resolve_playable_url(song)
            if token != self._play_token:
                logger.info("Discarding audio for %s: playback was cancelled while loading", song.id)
                return False
            self.audio.play(resolved.url, resolved.start_seconds)
        except Exception as exc:
            if token != self._play_token:
                return False
            logger.exception("Playback failed for %s - %s", song.artist, song.title)
            self._set_state(PlaybackState.ERRORED)
            self.events.emit(events.PLAYBACK_ERROR, PlaybackError(song=song, error=str(exc)))
            if self._state is PlaybackState.ERRORED:
                self._set_state(PlaybackState.IDLE)
            return False

        self._set_state(PlaybackState.PLAYING)
        self._schedule_clip_end(self._clip_length(song, resolved), token)
        return True

    async def repeat_current_song(self) -> bool:
        """Play the current song again from its cue-in point."""
        if self._current is None:
            raise NoCurrentSongError()
        if self._state is PlaybackState.LOADING:
            logger.warning("Repeat ignored while loading")
            return False
        self._abort_playback()
        self._set_state(PlaybackState.IDLE)
        return await self.play_current_song()

    def pause_playback(self) -> None:
        if self._state is not PlaybackState.PLAYING:
            return
        self.audio.pause()
        if self._timer is not None and self._loop is not None:
            self._clip_remaining = max(0.0, self._timer.when() - self._loop.time())
            self._timer.cancel()
            self._timer = None
        self._set_state(PlaybackState.PAUSED)
        self.events.emit(events.PLAYBACK_PAUSED)

    def resume_playback(self) -> None:
        if self._state is not PlaybackState.PAUSED:
            return
        self.audio.resume()
        self._set_state(PlaybackState.PLAYING)
        if self._clip_remaining is not None and self._loop is not None:
            self._timer = self._loop.call_later(self._clip_remaining, self._on_clip_end, self._play_token)
        self.events.emit(events.PLAYBACK_RESUMED)

    def stop_playback(self) -> None:
        self._play_token += 1
        self._cancel_timer()
        self.audio.stop()
        self._set_state(PlaybackState.STOPPED)
        self.events.emit(events.PLAYBACK_STOPPED)
        if self._state is PlaybackState.STOPPED:
            self._set_state(PlaybackState.IDLE)

    # ── Internals ───────────────────────────────────────────────────

    def _clip_length(self, song: Song, resolved: ResolvedAudio) -> float:
        length = song.clip_seconds or self.fallback_clip_seconds
        if resolved.duration_hint and resolved.duration_hint < length:
            length = resolved.duration_hint
        return length

    def _schedule_clip_end(self, delay: float, token: int) -> None:
        self._loop = asyncio.get_running_loop()
        self._clip_remaining = delay
        self._timer = self._loop.call_later(delay, self._on_clip_end, token)

    def _on_clip_end(self, token: int) -> None:
        if token != self._play_token or self._state is not PlaybackState.PLAYING:
            return
        self._timer = None
        self._clip_remaining = None
        song = self._current
        self.audio.stop()
        self._set_state(PlaybackState.IDLE)
        self.events.emit(events.PLAYBACK_ENDED, song)

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        self._clip_remaining = None

    def _abort_playback(self) -> None:
        """Stop the device without emitting events."""
        self._play_token += 1
        self._cancel_timer()
        if self._state in (PlaybackState.LOADING, PlaybackState.PLAYING, PlaybackState.PAUSED):
            self.audio.stop()

    def _set_state(self, state: PlaybackState) -> None:
        if state is not self._state:
            logger.debug("Playback state %s -> %s", self._state.value, state.value)
        self._state = state
