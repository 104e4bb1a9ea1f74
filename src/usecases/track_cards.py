"""Use case: mark called songs on the players' cards and detect winners."""

import logging
from typing import Callable, Optional

from src.domain import events
from src.domain.model import BingoCard, SongDrawn, WinMode, WinResult
from src.domain.ports import CardStorePort
from src.services.playback_session import PlaybackSession
from src.services.win_evaluator import check_win

logger = logging.getLogger("bingo_musical.cards.tracker")

WinnerCallback = Callable[[BingoCard, WinResult], None]


class CardTracker:
    """Follows a session's draws; each winning card is reported once."""

    def __init__(
        self,
        session: PlaybackSession,
        cards: list[BingoCard],
        store: Optional[CardStorePort] = None,
        mode: WinMode = WinMode.FULL_CARD,
        on_winner: Optional[WinnerCallback] = None,
    ):
        self.session = session
        self.cards = list(cards)
        self.store = store
        self.mode = mode
        self.on_winner = on_winner
        self.winners: list[BingoCard] = []
        self._unsubscribe = [
            session.on(events.SONG_DRAWN, self._on_song_drawn),
            session.on(events.RESET, self._on_reset),
        ]

    def detach(self) -> None:
        for unsubscribe in self._unsubscribe:
            unsubscribe()
        self._unsubscribe = []

    def evaluate(self, card: BingoCard) -> WinResult:
        return check_win(card, self.session.drawn_ids(), self.mode)

    def _on_song_drawn(self, drawn: SongDrawn) -> None:
        changed = [card for card in self.cards if card.mark(drawn.song.id)]
        if not changed:
            return

        drawn_ids = self.session.drawn_ids()
        for card in changed:
            if card in self.winners:
                continue
            result = check_win(card, drawn_ids, self.mode)
            if result.is_winner:
                self.winners.append(card)
                logger.info("Card %s completed after %s draws", card.id, len(drawn_ids))
                if self.on_winner:
                    self.on_winner(card, result)

        if self.store:
            self.store.save_all(self.cards)

    def _on_reset(self) -> None:
        for card in self.cards:
            card.marked.clear()
        self.winners = []
        if self.store:
            self.store.save_all(self.cards)
