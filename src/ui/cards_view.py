"""Flet view for generating, previewing and exporting bingo cards."""

import logging
import os

import flet as ft

from src.config import DEFAULT_LAYOUT, EXPORT_HTML_FILE, LAYOUTS, MAX_CARDS_PER_BATCH, data_path
from src.domain.errors import BingoError
from src.domain.model import FREE_SPACE, BingoCard, CardOptions
from src.domain.ports import CardStorePort, SongCatalogPort
from src.services.song_formatter import format_song_for_bingo
from src.ui.theme import ACCENT, BG, BG_CARD, BG_INPUT, BORDER, DANGER, FG, FG_DIM, SUCCESS
from src.usecases.export_cards import ExportCardsUseCase
from src.usecases.generate_cards import GenerateCardsUseCase

logger = logging.getLogger("bingo_musical.ui.cards")

PREVIEW_CELL_WIDTH = 118
PREVIEW_LIMIT = 6


def _field(**kwargs) -> ft.TextField:
    return ft.TextField(
        bgcolor=BG_INPUT,
        color=FG,
        border_color=BORDER,
        focused_border_color=ACCENT,
        label_style=ft.TextStyle(color=FG_DIM),
        cursor_color=FG,
        **kwargs,
    )


class CardsView(ft.Column):
    """Card batch generation with printable HTML export."""

    def __init__(
        self,
        page: ft.Page,
        catalog: SongCatalogPort,
        card_store: CardStorePort,
        default_layout: str = DEFAULT_LAYOUT,
        prevent_duplicate_artist: bool = False,
    ):
        super().__init__(expand=True, scroll=ft.ScrollMode.AUTO, spacing=12)
        self._page = page
        self.catalog = catalog
        self.card_store = card_store
        self.generate_uc = GenerateCardsUseCase(catalog, card_store)
        self.export_uc = ExportCardsUseCase(catalog)
        self.cards: list[BingoCard] = card_store.load_all()

        self.count_field = _field(label="Number of cards", value="10", width=180,
                                  keyboard_type=ft.KeyboardType.NUMBER)
        self.seed_field = _field(label="Base seed (optional)", value="", width=260)
        self.layout_group = ft.RadioGroup(
            value=default_layout if default_layout in LAYOUTS else DEFAULT_LAYOUT,
            content=ft.Row([ft.Radio(value=key, label=key) for key in LAYOUTS]),
            on_change=lambda _: self._refresh(),
        )
        self.duplicate_switch = ft.Switch(
            label="Avoid repeated artists in a row",
            value=prevent_duplicate_artist,
            active_color=ACCENT,
        )
        self.message = ft.Text("", size=12, color=FG_DIM)
        self.pool_label = ft.Text("", size=11, color=FG_DIM)
        self.preview = ft.Column(spacing=12)

        self._build_ui()
        self._refresh()

    def _build_ui(self):
        form = ft.Container(
            bgcolor=BG_CARD,
            border=ft.border.all(1, BORDER),
            border_radius=10,
            padding=14,
            content=ft.Column(
                [
                    ft.Text("Generate cards", size=14, weight=ft.FontWeight.BOLD, color=FG),
                    ft.Container(height=1, bgcolor=BORDER),
                    ft.Row([self.count_field, self.seed_field], wrap=True, spacing=10),
                    ft.Row([ft.Text("Layout", size=12, color=FG_DIM), self.layout_group], spacing=10),
                    self.duplicate_switch,
                    self.pool_label,
                    ft.Row(
                        [
                            ft.ElevatedButton("Generate", bgcolor=ACCENT, color="white", on_click=self._on_generate),
                            ft.OutlinedButton("Export HTML", on_click=self._on_export),
                            ft.TextButton("Clear cards", on_click=self._on_clear, style=ft.ButtonStyle(color=DANGER)),
                        ],
                        spacing=8,
                        wrap=True,
                    ),
                    self.message,
                ],
                spacing=10,
            ),
        )
        self.controls = [form, self.preview]

    # ── Actions ─────────────────────────────────────────────────────

    def _on_generate(self, _):
        try:
            count = int(self.count_field.value or "0")
        except ValueError:
            self._show("Enter a whole number of cards.", DANGER)
            return
        if count > MAX_CARDS_PER_BATCH:
            self._show(f"At most {MAX_CARDS_PER_BATCH} cards per batch.", DANGER)
            return

        options = CardOptions(
            base_seed=(self.seed_field.value or "").strip() or None,
            prevent_duplicate_artist=bool(self.duplicate_switch.value),
            layout=self.layout_group.value or DEFAULT_LAYOUT,
        )
        try:
            self.cards = self.generate_uc.execute(count, options)
        except (BingoError, ValueError) as exc:
            self._show(str(exc), DANGER)
            return
        self._show(f"{len(self.cards)} cards generated.", SUCCESS)

    def _on_export(self, _):
        if not self.cards:
            self._show("Generate cards first.", DANGER)
            return
        try:
            path = self.export_uc.execute(self.cards, data_path(EXPORT_HTML_FILE))
        except OSError as exc:
            logger.error("Card export failed: %s", exc)
            self._show(f"Export failed: {exc}", DANGER)
            return
        self._show(f"Cards exported to {os.path.abspath(path)}", SUCCESS)

    def _on_clear(self, _):
        self.card_store.clear()
        self.cards = []
        self._show("Cards cleared.")

    # ── Rendering ───────────────────────────────────────────────────

    def _show(self, text: str, color: str = FG_DIM):
        self.message.value = text
        self.message.color = color
        self._refresh()

    def _refresh(self):
        playable = sum(1 for s in self.catalog.find_all() if s.has_audio)
        layout = LAYOUTS.get(self.layout_group.value or DEFAULT_LAYOUT, LAYOUTS[DEFAULT_LAYOUT])
        self.pool_label.value = f"{playable} playable songs; a {layout.name} card needs at least {layout.song_count}."

        songs = {s.id: s for s in self.catalog.find_all()}
        self.preview.controls = [self._card_preview(i, card, songs) for i, card in enumerate(self.cards[:PREVIEW_LIMIT], 1)]
        if len(self.cards) > PREVIEW_LIMIT:
            self.preview.controls.append(
                ft.Text(f"... and {len(self.cards) - PREVIEW_LIMIT} more in the HTML export", size=11, color=FG_DIM)
            )
        self._page.update()

    @staticmethod
    def _card_preview(number: int, card: BingoCard, songs: dict) -> ft.Container:
        rows = []
        for row in card.grid:
            cells = []
            for cell in row:
                if cell is FREE_SPACE:
                    text = ft.Text("FREE", size=11, weight=ft.FontWeight.BOLD, color=ACCENT)
                else:
                    formatted = format_song_for_bingo(songs.get(cell))
                    text = ft.Column(
                        [
                            ft.Text(formatted["title"] or cell, size=10, color=FG, max_lines=2),
                            ft.Text(formatted["artist"], size=9, color=FG_DIM, max_lines=1),
                        ],
                        spacing=1,
                    )
                marked = cell is not FREE_SPACE and cell in card.marked
                cells.append(
                    ft.Container(
                        width=PREVIEW_CELL_WIDTH,
                        height=54,
                        padding=4,
                        bgcolor=ACCENT if marked else BG,
                        border=ft.border.all(1, BORDER),
                        content=text,
                    )
                )
            rows.append(ft.Row(cells, spacing=0))

        return ft.Container(
            bgcolor=BG_CARD,
            border=ft.border.all(1, BORDER),
            border_radius=10,
            padding=10,
            content=ft.Column(
                [
                    ft.Text(f"Card {number} - {card.layout} - seed {card.seed}", size=11, color=FG_DIM),
                    ft.Column(rows, spacing=0),
                ],
                spacing=6,
            ),
        )
