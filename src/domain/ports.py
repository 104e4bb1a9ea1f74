"""Ports (interfaces) for the hexagonal architecture."""

from abc import ABC, abstractmethod
from typing import Optional

from src.domain.model import BingoCard, ResolvedAudio, Song


class SongCatalogPort(ABC):
    @abstractmethod
    def find_all(self) -> list[Song]:
        ...

    @abstractmethod
    def find_by_id(self, song_id: str) -> Optional[Song]:
        ...

    @abstractmethod
    def search(self, query: str) -> list[Song]:
        ...

    @abstractmethod
    def insert(self, song: Song) -> Song:
        ...

    @abstractmethod
    def insert_many(self, songs: list[Song]) -> list[Song]:
        ...

    @abstractmethod
    def update(self, song_id: str, **changes) -> Song:
        ...

    @abstractmethod
    def delete(self, song_id: str) -> None:
        ...

    @abstractmethod
    def delete_many(self, song_ids: list[str]) -> None:
        ...

    @abstractmethod
    def clear(self) -> None:
        ...

    @abstractmethod
    def count(self) -> int:
        ...


class AudioResolverPort(ABC):
    """A single provider able to turn a song into a streamable URL."""

    name: str = ""

    @abstractmethod
    async def resolve(self, song: Song) -> Optional[ResolvedAudio]:
        ...


class AudioDevicePort(ABC):
    def prefetch(self, url: str) -> None:
        """Optionally download ``url`` ahead of ``play``. Blocking; run off-loop."""
        return None

    @abstractmethod
    def play(self, url: str, start_seconds: float = 0.0) -> None:
        ...

    @abstractmethod
    def pause(self) -> None:
        ...

    @abstractmethod
    def resume(self) -> None:
        ...

    @abstractmethod
    def stop(self) -> None:
        ...

    @abstractmethod
    def get_elapsed(self) -> float:
        ...


class AudioPort(ABC):
    @abstractmethod
    async def resolve_playable_url(self, song: Song) -> ResolvedAudio:
        ...

    @abstractmethod
    def play(self, url: str, start_seconds: float = 0.0) -> None:
        ...

    @abstractmethod
    def pause(self) -> None:
        ...

    @abstractmethod
    def resume(self) -> None:
        ...

    @abstractmethod
    def stop(self) -> None:
        ...

    @abstractmethod
    def get_elapsed(self) -> float:
        ...


class CardStorePort(ABC):
    @abstractmethod
    def save_all(self, cards: list[BingoCard]) -> None:
        ...

    @abstractmethod
    def load_all(self) -> list[BingoCard]:
        ...

    @abstractmethod
    def clear(self) -> None:
        ...

    @abstractmethod
    def exists(self) -> bool:
        ...


class ConfigPort(ABC):
    @abstractmethod
    def load(self) -> dict:
        ...

    @abstractmethod
    def save(self, cfg: dict) -> None:
        ...

    @abstractmethod
    def is_configured(self) -> bool:
        ...

    @abstractmethod
    def forget_secrets(self) -> list[str]:
        ...
