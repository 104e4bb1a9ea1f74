"""Decide whether a card has won given the drawn history."""

from datetime import datetime, timezone
from typing import Iterable

from src.domain.model import BingoCard, WinMode, WinResult


def check_win(card: BingoCard, drawn_song_ids: Iterable[str], mode: WinMode | str = WinMode.FULL_CARD) -> WinResult:
    """Evaluate ``card`` against the drawn ids. Never mutates the card.

    Only full-card wins are scored. Line mode is reported as unsupported
    rather than guessed.
    """
    mode = WinMode(mode)
    now = datetime.now(timezone.utc)

    if mode is WinMode.LINE:
        return WinResult(
            is_winner=False,
            mode=mode,
            evaluated_at=now,
            supported=False,
            message="Line mode is not supported yet",
        )

    drawn = set(drawn_song_ids)
    missing = tuple(song_id for song_id in card.song_ids() if song_id not in drawn)
    is_winner = not missing
    return WinResult(
        is_winner=is_winner,
        mode=mode,
        evaluated_at=now,
        missing=missing,
        message="BINGO! Full card" if is_winner else f"{len(missing)} songs still missing",
    )
