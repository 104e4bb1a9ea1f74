"""Use case: export cards to a printable HTML file."""

from src.config import EXPORT_HTML_FILE
from src.domain.model import BingoCard
from src.domain.ports import SongCatalogPort
from src.services.card_renderer import render_cards_html


class ExportCardsUseCase:

    def __init__(self, catalog: SongCatalogPort):
        self.catalog = catalog

    def execute(self, cards: list[BingoCard], path: str = EXPORT_HTML_FILE) -> str:
        html = render_cards_html(cards, self.catalog.find_all())
        with open(path, "w", encoding="utf-8") as f:
            f.write(html)
        return path
