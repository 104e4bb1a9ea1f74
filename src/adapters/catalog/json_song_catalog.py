"""JSON file-based song catalog adapter."""

import json
import logging
from dataclasses import asdict, fields, replace
from datetime import datetime
from pathlib import Path
from typing import Optional

from src.config import SONGS_FILE, data_path
from src.domain.model import Song
from src.domain.ports import SongCatalogPort

logger = logging.getLogger("bingo_musical.catalog")

_SONG_FIELDS = {f.name for f in fields(Song)}


def song_from_dict(data: dict) -> Song:
    return Song(**{key: value for key, value in data.items() if key in _SONG_FIELDS})


class JsonSongCatalogAdapter(SongCatalogPort):

    def __init__(self, path: str | None = None):
        self.path = Path(path or data_path(SONGS_FILE))
        self._songs: list[Song] = []
        self._load()

    def find_all(self) -> list[Song]:
        return list(self._songs)

    def find_by_id(self, song_id: str) -> Optional[Song]:
        for song in self._songs:
            if song.id == song_id:
                return song
        return None

    def search(self, query: str) -> list[Song]:
        needle = query.lower()
        return [
            s for s in self._songs
            if needle in s.title.lower() or needle in s.artist.lower() or needle in s.album.lower()
        ]

    def insert(self, song: Song) -> Song:
        self._songs.append(song)
        self._save()
        return song

    def insert_many(self, songs: list[Song]) -> list[Song]:
        self._songs.extend(songs)
        self._save()
        return list(songs)

    def update(self, song_id: str, **changes) -> Song:
        index = self._index_of(song_id)
        changes.pop("id", None)
        updated = replace(self._songs[index], **changes)
        self._songs[index] = updated
        self._save()
        return updated

    def delete(self, song_id: str) -> None:
        index = self._index_of(song_id)
        del self._songs[index]
        self._save()

    def delete_many(self, song_ids: list[str]) -> None:
        doomed = set(song_ids)
        self._songs = [s for s in self._songs if s.id not in doomed]
        self._save()

    def clear(self) -> None:
        self._songs = []
        self._save()

    def count(self) -> int:
        return len(self._songs)

    def _index_of(self, song_id: str) -> int:
        for index, song in enumerate(self._songs):
            if song.id == song_id:
                return index
        raise KeyError(f"Song not found: {song_id}")

    def _load(self) -> None:
        if not self.path.exists():
            return
        try:
            payload = json.loads(self.path.read_text(encoding="utf-8"))
            items = payload.get("songs", []) if isinstance(payload, dict) else payload
            self._songs = [song_from_dict(item) for item in items if isinstance(item, dict)]
        except Exception:
            logger.exception("Failed to load song catalog from %s", self.path)
            self._songs = []

    def _save(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        temp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        payload = {
            "updated_at": datetime.now().isoformat(),
            "songs": [asdict(s) for s in self._songs],
        }
        temp_path.write_text(json.dumps(payload, ensure_ascii=False, indent=2), encoding="utf-8")
        temp_path.replace(self.path)
