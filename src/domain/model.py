"""Pure domain objects — no framework dependency."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Optional, Union


@dataclass(frozen=True)
class Song:
    id: str
    title: str
    artist: str
    duration_seconds: float = 0.0
    cue_in: Optional[float] = None
    cue_out: Optional[float] = None
    has_audio: bool = False
    album: str = ""
    year: Optional[int] = None
    youtube_id: Optional[str] = None
    spotify_id: Optional[str] = None
    cover_image: Optional[str] = None
    source_type: str = ""
    created_at: str = ""

    @property
    def clip_seconds(self) -> Optional[float]:
        """Length of the cue window, or None when no usable window is set."""
        if self.cue_in is None or self.cue_out is None:
            return None
        length = self.cue_out - self.cue_in
        return length if length > 0 else None


class _FreeSpace:
    """Marker for the centre cell of a 5x5 card."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "FREE_SPACE"

    def __reduce__(self):
        return (_FreeSpace, ())


FREE_SPACE = _FreeSpace()

Cell = Union[str, _FreeSpace]


@dataclass(frozen=True)
class CardLayout:
    name: str
    rows: int
    cols: int
    free_cells: frozenset = frozenset()

    @property
    def song_count(self) -> int:
        return self.rows * self.cols - len(self.free_cells)

    def is_free(self, row: int, col: int) -> bool:
        return (row, col) in self.free_cells


@dataclass
class BingoCard:
    id: str
    seed: str
    layout: str
    grid: tuple[tuple[Cell, ...], ...]
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    marked: set[str] = field(default_factory=set)

    def song_ids(self) -> list[str]:
        return [cell for row in self.grid for cell in row if cell is not FREE_SPACE]

    def contains(self, song_id: str) -> bool:
        return any(song_id in row for row in self.grid)

    def song_at(self, row: int, col: int) -> Optional[str]:
        if row < 0 or row >= len(self.grid) or col < 0 or col >= len(self.grid[row]):
            return None
        cell = self.grid[row][col]
        return None if cell is FREE_SPACE else cell

    def is_free_space(self, row: int, col: int) -> bool:
        return self.grid[row][col] is FREE_SPACE

    def mark(self, song_id: str) -> bool:
        """Flag a called song on this card. Returns True when newly marked."""
        if song_id in self.marked or not self.contains(song_id):
            return False
        self.marked.add(song_id)
        return True

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "seed": self.seed,
            "layout": self.layout,
            "grid": [[None if cell is FREE_SPACE else cell for cell in row] for row in self.grid],
            "created_at": self.created_at.isoformat(),
            "marked": sorted(self.marked),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "BingoCard":
        grid = tuple(
            tuple(FREE_SPACE if cell is None else str(cell) for cell in row)
            for row in data.get("grid", [])
        )
        created_raw = data.get("created_at")
        created_at = datetime.fromisoformat(created_raw) if created_raw else datetime.now(timezone.utc)
        return cls(
            id=str(data["id"]),
            seed=str(data.get("seed") or ""),
            layout=str(data.get("layout", "")),
            grid=grid,
            created_at=created_at,
            marked=set(data.get("marked", [])),
        )


@dataclass(frozen=True)
class CardOptions:
    seed: Optional[str] = None
    base_seed: Optional[str] = None
    prevent_duplicate_artist: bool = False
    layout: str = "3x5"


class PlaybackState(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    PLAYING = "playing"
    PAUSED = "paused"
    STOPPED = "stopped"
    ERRORED = "errored"


@dataclass(frozen=True)
class ResolvedAudio:
    url: str
    duration_hint: Optional[float] = None
    start_seconds: float = 0.0
    source: str = ""


@dataclass(frozen=True)
class SongDrawn:
    song: Song
    remaining: int
    drawn: int


@dataclass(frozen=True)
class PlaybackError:
    song: Song
    error: str


@dataclass(frozen=True)
class SessionSnapshot:
    total_songs: int
    remaining_songs: int
    drawn_songs: int
    current_song: Optional[Song]
    playback_state: PlaybackState
    auto_play_enabled: bool


class WinMode(str, Enum):
    FULL_CARD = "full_card"
    LINE = "line"


@dataclass(frozen=True)
class WinResult:
    is_winner: bool
    mode: WinMode
    evaluated_at: datetime
    supported: bool = True
    missing: tuple[str, ...] = ()
    message: str = ""
