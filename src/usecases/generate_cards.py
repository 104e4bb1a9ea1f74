"""Use case: generate a batch of cards from the song catalog and persist it."""

from typing import Optional

from src.domain.model import BingoCard, CardOptions
from src.domain.ports import CardStorePort, SongCatalogPort
from src.services.card_generator import CardGenerator


class GenerateCardsUseCase:

    def __init__(
        self,
        catalog: SongCatalogPort,
        store: CardStorePort,
        generator: Optional[CardGenerator] = None,
    ):
        self.catalog = catalog
        self.store = store
        self.generator = generator or CardGenerator()

    def execute(self, count: int, options: Optional[CardOptions] = None, playable_only: bool = True) -> list[BingoCard]:
        """Cards only use playable songs by default so every cell can be called."""
        songs = self.catalog.find_all()
        if playable_only:
            songs = [s for s in songs if s.has_audio]
        cards = self.generator.generate_cards(songs, count, options)
        self.store.save_all(cards)
        return cards
