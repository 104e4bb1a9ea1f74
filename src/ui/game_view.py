"""Flet game view: draw songs, control playback, follow the cards."""

import logging
from typing import Optional

import flet as ft

from src.adapters.cards.json_card_store import JsonCardStoreAdapter
from src.config import GAME_EXPORT_FILE, data_path
from src.domain import events
from src.domain.errors import BingoError
from src.domain.model import BingoCard, PlaybackError, PlaybackState, SongDrawn, WinResult
from src.domain.ports import CardStorePort, SongCatalogPort
from src.services.playback_session import PlaybackSession
from src.services.song_formatter import format_song_for_bingo
from src.ui.theme import ACCENT, BG, BG_CARD, BG_INPUT, BORDER, DANGER, FG, FG_DIM, SUCCESS, WARNING
from src.usecases.start_game import StartGameUseCase
from src.usecases.track_cards import CardTracker

logger = logging.getLogger("bingo_musical.ui.game")

HISTORY_MAX = 200

STATE_LABELS = {
    PlaybackState.IDLE: ("Ready", FG_DIM),
    PlaybackState.LOADING: ("Loading audio...", WARNING),
    PlaybackState.PLAYING: ("Playing", SUCCESS),
    PlaybackState.PAUSED: ("Paused", WARNING),
    PlaybackState.STOPPED: ("Stopped", FG_DIM),
    PlaybackState.ERRORED: ("Audio error", DANGER),
}


class GameView(ft.Column):
    """Game master console."""

    def __init__(
        self,
        page: ft.Page,
        session: PlaybackSession,
        catalog: SongCatalogPort,
        card_store: CardStorePort,
    ):
        super().__init__(expand=True, scroll=ft.ScrollMode.AUTO, spacing=12)
        self._page = page
        self.session = session
        self.catalog = catalog
        self.card_store = card_store
        self.start_uc = StartGameUseCase(catalog, session)
        self.tracker: Optional[CardTracker] = None

        self.status_label = ft.Text("", size=12, color=FG_DIM)
        self.counter_label = ft.Text("", size=12, color=FG)
        self.progress_bar = ft.ProgressBar(value=0, bgcolor=BG_INPUT, color=ACCENT, width=float("inf"))
        self.current_title = ft.Text("Press Start to begin", size=22, weight=ft.FontWeight.BOLD, color=FG,
                                     text_align=ft.TextAlign.CENTER)
        self.current_artist = ft.Text("", size=14, color=FG_DIM, text_align=ft.TextAlign.CENTER)
        self.winners_label = ft.Text("", size=12, color=SUCCESS)
        self.history = ft.ListView(spacing=4, auto_scroll=True, height=260)
        self.auto_play_switch = ft.Switch(
            label="Auto-play",
            value=session.auto_play_enabled,
            active_color=ACCENT,
            on_change=self._on_auto_play_change,
        )

        self.start_button = ft.ElevatedButton("Start game", bgcolor=ACCENT, color="white", on_click=self._on_start)
        self.draw_button = ft.ElevatedButton("Draw next", bgcolor=ACCENT, color="white", on_click=self._on_draw)
        self.play_button = ft.OutlinedButton("Play", on_click=self._on_play)
        self.repeat_button = ft.OutlinedButton("Repeat", on_click=self._on_repeat)
        self.pause_button = ft.OutlinedButton("Pause", on_click=self._on_pause)
        self.resume_button = ft.OutlinedButton("Resume", on_click=self._on_resume)
        self.stop_button = ft.OutlinedButton("Stop", on_click=self._on_stop)
        self.reset_button = ft.TextButton("Reset", on_click=self._on_reset, style=ft.ButtonStyle(color=DANGER))
        self.export_button = ft.TextButton("Export game", on_click=self._on_export, style=ft.ButtonStyle(color=FG_DIM))

        self.snack = ft.SnackBar(content=ft.Text(""))

        for name, handler in (
            (events.SONGS_LOADED, self._handle_songs_loaded),
            (events.SONG_DRAWN, self._handle_song_drawn),
            (events.PLAYBACK_STARTED, self._handle_state_change),
            (events.PLAYBACK_ENDED, self._handle_state_change),
            (events.PLAYBACK_PAUSED, self._handle_state_change),
            (events.PLAYBACK_RESUMED, self._handle_state_change),
            (events.PLAYBACK_STOPPED, self._handle_state_change),
            (events.PLAYBACK_ERROR, self._handle_playback_error),
            (events.BINGO_FINISHED, self._handle_finished),
            (events.RESET, self._handle_reset),
        ):
            session.on(name, handler)

        self._build_ui()
        self._refresh()

    def _build_ui(self):
        now_playing = ft.Container(
            bgcolor=BG_CARD,
            border=ft.border.all(2, ACCENT),
            border_radius=10,
            padding=18,
            content=ft.Column(
                [
                    ft.Text("Now playing", size=12, color=ACCENT, weight=ft.FontWeight.BOLD),
                    self.current_title,
                    self.current_artist,
                    self.status_label,
                ],
                horizontal_alignment=ft.CrossAxisAlignment.CENTER,
                spacing=6,
            ),
        )

        controls_row = ft.Row(
            [
                self.start_button,
                self.draw_button,
                self.play_button,
                self.repeat_button,
                self.pause_button,
                self.resume_button,
                self.stop_button,
                self.auto_play_switch,
            ],
            wrap=True,
            spacing=8,
        )

        history_card = ft.Container(
            bgcolor=BG_CARD,
            border=ft.border.all(1, BORDER),
            border_radius=10,
            padding=14,
            content=ft.Column(
                [
                    ft.Text("Called songs", size=14, weight=ft.FontWeight.BOLD, color=FG),
                    ft.Container(height=1, bgcolor=BORDER),
                    self.history,
                ],
                spacing=8,
            ),
        )

        self.controls = [
            ft.Row([self.counter_label, ft.Container(expand=True), self.export_button, self.reset_button]),
            self.progress_bar,
            now_playing,
            controls_row,
            self.winners_label,
            history_card,
        ]

    # ── Button handlers ─────────────────────────────────────────────
    # Session calls are scheduled on the page loop; the clip timer lives there.

    def _on_start(self, _):
        self._page.run_task(self._start)

    def _on_draw(self, _):
        self._page.run_task(self._guarded, self.session.draw_next_song)

    def _on_play(self, _):
        self._page.run_task(self._guarded, self.session.play_current_song)

    def _on_repeat(self, _):
        self._page.run_task(self._guarded, self.session.repeat_current_song)

    def _on_pause(self, _):
        self._page.run_task(self._call, self.session.pause_playback)

    def _on_resume(self, _):
        self._page.run_task(self._call, self.session.resume_playback)

    def _on_stop(self, _):
        self._page.run_task(self._call, self.session.stop_playback)

    def _on_reset(self, _):
        self._page.run_task(self._call, self.session.reset)

    def _on_auto_play_change(self, e):
        self._page.run_task(self._call, self.session.set_auto_play, bool(e.control.value))

    def _on_export(self, _):
        cards = self.tracker.cards if self.tracker else self.card_store.load_all()
        path = JsonCardStoreAdapter.export_game(cards, self.session.drawn_ids(), data_path(GAME_EXPORT_FILE))
        self._notify(f"Game exported to {path}")

    async def _start(self):
        if self.tracker:
            self.tracker.detach()
        cards = self.card_store.load_all()
        self.tracker = CardTracker(self.session, cards, store=self.card_store, on_winner=self._handle_winner)
        self.history.controls.clear()
        self.winners_label.value = ""
        count = self.start_uc.execute()
        if not count:
            self._notify("No playable songs in the library. Import some first.", DANGER)
        logger.info("Game started with %s songs and %s cards", count, len(cards))
        self._refresh()

    async def _guarded(self, action):
        try:
            await action()
        except BingoError as exc:
            self._notify(str(exc), DANGER)
        self._refresh()

    async def _call(self, action, *args):
        action(*args)
        self._refresh()

    # ── Session events ──────────────────────────────────────────────

    def _handle_songs_loaded(self, count: int):
        self.current_title.value = "Game ready" if count else "No songs loaded"
        self.current_artist.value = f"{count} songs in the draw"
        self._refresh()

    def _handle_song_drawn(self, drawn: SongDrawn):
        formatted = format_song_for_bingo(drawn.song)
        self.current_title.value = formatted["title"]
        self.current_artist.value = formatted["artist"]
        self.history.controls.append(
            ft.Text(f"{drawn.drawn}. {formatted['artist']} - {formatted['title']}", size=11, color=FG)
        )
        if len(self.history.controls) > HISTORY_MAX:
            self.history.controls.pop(0)
        self._refresh()

    def _handle_state_change(self, *_):
        self._refresh()

    def _handle_playback_error(self, error: PlaybackError):
        self._notify(f"Could not play {error.song.title}: {error.error}", DANGER)
        self._refresh()

    def _handle_finished(self):
        self.current_title.value = "All songs have been called"
        self.current_artist.value = ""
        self._refresh()

    def _handle_reset(self):
        self.history.controls.clear()
        self.current_title.value = "Press Start to begin"
        self.current_artist.value = ""
        self.winners_label.value = ""
        self._refresh()

    def _handle_winner(self, card: BingoCard, result: WinResult):
        names = ", ".join(c.id[:8] for c in self.tracker.winners) if self.tracker else card.id[:8]
        self.winners_label.value = f"Full card: {names}"
        self._notify(f"Bingo! Card {card.id[:8]} is complete", SUCCESS)

    # ── Rendering ───────────────────────────────────────────────────

    def _refresh(self):
        snapshot = self.session.get_state()
        label, color = STATE_LABELS[snapshot.playback_state]
        self.status_label.value = label
        self.status_label.color = color
        self.counter_label.value = f"{snapshot.drawn_songs} / {snapshot.total_songs} songs called"
        self.progress_bar.value = snapshot.drawn_songs / snapshot.total_songs if snapshot.total_songs else 0
        self.auto_play_switch.value = snapshot.auto_play_enabled

        state = snapshot.playback_state
        has_song = snapshot.current_song is not None
        loading = state is PlaybackState.LOADING
        self.draw_button.disabled = loading or not snapshot.total_songs
        self.play_button.disabled = not has_song or state in (PlaybackState.LOADING, PlaybackState.PLAYING)
        self.repeat_button.disabled = not has_song or loading
        self.pause_button.disabled = state is not PlaybackState.PLAYING
        self.resume_button.disabled = state is not PlaybackState.PAUSED
        self.stop_button.disabled = state not in (PlaybackState.LOADING, PlaybackState.PLAYING, PlaybackState.PAUSED)
        self._page.update()

    def _notify(self, message: str, color: str = FG):
        self.snack.content = ft.Text(message, color=color)
        self.snack.bgcolor = BG
        if self.snack not in self._page.overlay:
            self._page.overlay.append(self.snack)
        self.snack.open = True
        self._page.update()
