"""Shared in-memory adapters and fixtures for all bounded contexts."""

import asyncio
from dataclasses import replace
from typing import Optional

import pytest

from src.domain.errors import AudioResolutionError
from src.domain.model import BingoCard, ResolvedAudio, Song
from src.domain.ports import (
    AudioDevicePort,
    AudioPort,
    AudioResolverPort,
    CardStorePort,
    ConfigPort,
    SongCatalogPort,
)


# ── In-memory adapters ──────────────────────────────────────────────


class InMemorySongCatalog(SongCatalogPort):
    def __init__(self, songs: Optional[list[Song]] = None):
        self._songs: list[Song] = list(songs or [])

    def find_all(self) -> list[Song]:
        return list(self._songs)

    def find_by_id(self, song_id: str) -> Optional[Song]:
        return next((s for s in self._songs if s.id == song_id), None)

    def search(self, query: str) -> list[Song]:
        needle = query.lower()
        return [s for s in self._songs if needle in s.title.lower() or needle in s.artist.lower()]

    def insert(self, song: Song) -> Song:
        self._songs.append(song)
        return song

    def insert_many(self, songs: list[Song]) -> list[Song]:
        self._songs.extend(songs)
        return list(songs)

    def update(self, song_id: str, **changes) -> Song:
        for index, song in enumerate(self._songs):
            if song.id == song_id:
                self._songs[index] = replace(song, **changes)
                return self._songs[index]
        raise KeyError(song_id)

    def delete(self, song_id: str) -> None:
        self._songs = [s for s in self._songs if s.id != song_id]

    def delete_many(self, song_ids: list[str]) -> None:
        doomed = set(song_ids)
        self._songs = [s for s in self._songs if s.id not in doomed]

    def clear(self) -> None:
        self._songs = []

    def count(self) -> int:
        return len(self._songs)


class InMemoryCardStore(CardStorePort):
    def __init__(self):
        self._cards: Optional[list[BingoCard]] = None
        self.save_count = 0

    def save_all(self, cards: list[BingoCard]) -> None:
        self._cards = list(cards)
        self.save_count += 1

    def load_all(self) -> list[BingoCard]:
        return list(self._cards or [])

    def clear(self) -> None:
        self._cards = None

    def exists(self) -> bool:
        return self._cards is not None


class InMemoryConfig(ConfigPort):
    def __init__(self, data: Optional[dict] = None):
        self._data = data or {}

    def load(self) -> dict:
        return dict(self._data)

    def save(self, cfg: dict) -> None:
        self._data = dict(cfg)

    def is_configured(self) -> bool:
        return bool(self._data.get("invidious_instances"))

    def forget_secrets(self) -> list[str]:
        self._data["spotify_client_secret"] = ""
        return ["spotify_client_secret"]


class FakeAudioPort(AudioPort):
    """Records device calls; resolution can be held open with ``gate``."""

    def __init__(self, duration_hint: Optional[float] = None):
        self.duration_hint = duration_hint
        self.failing: set[str] = set()
        self.gate: Optional[asyncio.Event] = None
        self.resolved: list[str] = []
        self.calls: list[tuple] = []

    async def resolve_playable_url(self, song: Song) -> ResolvedAudio:
        self.resolved.append(song.id)
        if self.gate is not None:
            await self.gate.wait()
        if song.id in self.failing:
            raise AudioResolutionError(f"No playable audio for {song.id}")
        return ResolvedAudio(
            url=f"https://audio.test/{song.id}",
            duration_hint=self.duration_hint,
            start_seconds=song.cue_in or 0.0,
            source="fake",
        )

    def play(self, url: str, start_seconds: float = 0.0) -> None:
        self.calls.append(("play", url, start_seconds))

    def pause(self) -> None:
        self.calls.append(("pause",))

    def resume(self) -> None:
        self.calls.append(("resume",))

    def stop(self) -> None:
        self.calls.append(("stop",))

    def get_elapsed(self) -> float:
        return 0.0

    def played_urls(self) -> list[str]:
        return [call[1] for call in self.calls if call[0] == "play"]


class FakeAudioDevice(AudioDevicePort):
    def __init__(self):
        self.prefetched: list[str] = []
        self.calls: list[tuple] = []

    def prefetch(self, url: str) -> None:
        self.prefetched.append(url)

    def play(self, url: str, start_seconds: float = 0.0) -> None:
        self.calls.append(("play", url, start_seconds))

    def pause(self) -> None:
        self.calls.append(("pause",))

    def resume(self) -> None:
        self.calls.append(("resume",))

    def stop(self) -> None:
        self.calls.append(("stop",))

    def get_elapsed(self) -> float:
        return 0.0


class FakeResolver(AudioResolverPort):
    def __init__(self, name: str, url: Optional[str] = None, error: Optional[Exception] = None):
        self.name = name
        self.url = url
        self.error = error
        self.requests: list[str] = []

    async def resolve(self, song: Song) -> Optional[ResolvedAudio]:
        self.requests.append(song.id)
        if self.error:
            raise self.error
        if not self.url:
            return None
        return ResolvedAudio(url=self.url, source=self.name)


# ── Song factories ──────────────────────────────────────────────────


def make_song(index: int, artist: Optional[str] = None, **overrides) -> Song:
    fields = {
        "id": f"s{index}",
        "title": f"Song {index}",
        "artist": artist or f"Artist {index}",
        "duration_seconds": 200.0,
        "cue_in": 30.0,
        "cue_out": 45.0,
        "has_audio": True,
    }
    fields.update(overrides)
    return Song(**fields)


def make_songs(count: int) -> list[Song]:
    return [make_song(i) for i in range(1, count + 1)]


def short_clip_song(index: int, clip: float) -> Song:
    """Song whose cue window lasts ``clip`` seconds, for timer tests."""
    return make_song(index, cue_in=0.0, cue_out=clip)


# ── Shared fixtures ─────────────────────────────────────────────────


@pytest.fixture
def songs15():
    return make_songs(15)


@pytest.fixture
def songs24():
    return make_songs(24)


@pytest.fixture
def catalog(songs24):
    return InMemorySongCatalog(songs24)


@pytest.fixture
def card_store():
    return InMemoryCardStore()


@pytest.fixture
def audio():
    return FakeAudioPort()


@pytest.fixture
def device():
    return FakeAudioDevice()


@pytest.fixture
def song_factory():
    return make_song


@pytest.fixture
def clip_song():
    return short_clip_song


@pytest.fixture
def resolver_factory():
    return FakeResolver


@pytest.fixture
def memory_config():
    return InMemoryConfig({"invidious_instances": ["https://inv.test"], "audio_source": "invidious"})
