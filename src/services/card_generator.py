"""Build reproducible bingo cards from a song pool."""

import logging
import uuid
from typing import Optional

from src.config import LAYOUTS
from src.domain.errors import InsufficientSongsError
from src.domain.model import FREE_SPACE, BingoCard, CardLayout, CardOptions, Cell, Song
from src.domain.seeded_rng import generate_seed, seeded_shuffle

logger = logging.getLogger("bingo_musical.cards")


def get_layout(name: str) -> CardLayout:
    try:
        return LAYOUTS[name]
    except KeyError:
        raise ValueError(f"Unknown card layout: {name!r} (expected one of {sorted(LAYOUTS)})") from None


def _artist_key(song: Song) -> str:
    return song.artist.strip().casefold()


class CardGenerator:
    """Stateless: every call works only on the arguments it receives."""

    def generate_card(self, songs: list[Song], options: Optional[CardOptions] = None) -> BingoCard:
        options = options or CardOptions()
        layout = get_layout(options.layout)
        self._validate_pool(songs, layout)
        seed = options.seed or generate_seed()
        return self._build_card(songs, layout, seed, options.prevent_duplicate_artist)

    def generate_cards(
        self,
        songs: list[Song],
        count: int,
        options: Optional[CardOptions] = None,
    ) -> list[BingoCard]:
        if count < 1:
            raise ValueError(f"Card count must be at least 1, got {count}")
        options = options or CardOptions()
        layout = get_layout(options.layout)
        self._validate_pool(songs, layout)

        cards = []
        for index in range(count):
            seed = f"{options.base_seed}_{index}" if options.base_seed else generate_seed()
            cards.append(self._build_card(songs, layout, seed, options.prevent_duplicate_artist))

        logger.info(
            "Generated %s cards (layout=%s, pool=%s, base_seed=%s)",
            count,
            layout.name,
            len(songs),
            options.base_seed,
        )
        return cards

    @staticmethod
    def _validate_pool(songs: list[Song], layout: CardLayout) -> None:
        if len(songs) < layout.song_count:
            raise InsufficientSongsError(layout.song_count, len(songs), layout.name)
        seen: set[str] = set()
        for song in songs:
            if song.id in seen:
                raise ValueError(f"Duplicate song id in pool: {song.id}")
            seen.add(song.id)

    def _build_card(self, songs: list[Song], layout: CardLayout, seed: str, prevent_duplicate_artist: bool) -> BingoCard:
        # Songs skipped for an artist clash stay at the front of the queue
        # so later cells still consume the shuffled order linearly.
        remaining = seeded_shuffle(songs, seed)
        rows: list[tuple[Cell, ...]] = []

        for r in range(layout.rows):
            row: list[Cell] = []
            row_artists: set[str] = set()
            for c in range(layout.cols):
                if layout.is_free(r, c):
                    row.append(FREE_SPACE)
                    continue
                pick = self._pick_index(remaining, row_artists) if prevent_duplicate_artist else 0
                song = remaining.pop(pick)
                row_artists.add(_artist_key(song))
                row.append(song.id)
            rows.append(tuple(row))

        return BingoCard(id=uuid.uuid4().hex, seed=seed, layout=layout.name, grid=tuple(rows))

    @staticmethod
    def _pick_index(remaining: list[Song], row_artists: set[str]) -> int:
        for offset, song in enumerate(remaining):
            if _artist_key(song) not in row_artists:
                return offset
        # Best effort: every remaining artist clashes with this row.
        return 0
