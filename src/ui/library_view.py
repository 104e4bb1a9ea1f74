"""Flet view for building the song library from YouTube and Spotify."""

import asyncio
import logging
from typing import Optional

import flet as ft

from src.adapters.invidious.client import InvidiousClient, VideoInfo
from src.domain.errors import BingoError
from src.domain.model import Song
from src.domain.ports import SongCatalogPort
from src.ui.theme import ACCENT, BG_CARD, BG_INPUT, BORDER, DANGER, FG, FG_DIM, SUCCESS
from src.usecases.import_playlist import ImportSpotifyPlaylistUseCase
from src.usecases.import_youtube import ImportYouTubeUseCase

logger = logging.getLogger("bingo_musical.ui.library")

SEARCH_RESULTS = 10
LIST_LIMIT = 300


class LibraryView(ft.Column):
    """Song catalog management."""

    def __init__(
        self,
        page: ft.Page,
        catalog: SongCatalogPort,
        youtube: ImportYouTubeUseCase,
        spotify: Optional[ImportSpotifyPlaylistUseCase] = None,
    ):
        super().__init__(expand=True, scroll=ft.ScrollMode.AUTO, spacing=12)
        self._page = page
        self.catalog = catalog
        self.youtube = youtube
        self.spotify = spotify
        self._busy = False

        self.url_field = self._field("YouTube video or playlist URL")
        self.search_field = self._field("Search YouTube")
        self.spotify_field = self._field("Spotify playlist URL", disabled=spotify is None)
        self.filter_field = self._field("Filter library", on_change=lambda _: self._refresh())
        self.activity = ft.ProgressRing(width=14, height=14, color=ACCENT, visible=False)
        self.message = ft.Text("", size=12, color=FG_DIM)
        self.count_label = ft.Text("", size=12, color=FG)
        self.results = ft.Column(spacing=4)
        self.song_list = ft.ListView(spacing=2, height=360)

        self._build_ui()
        self._refresh()

    @staticmethod
    def _field(label: str, **kwargs) -> ft.TextField:
        return ft.TextField(
            label=label,
            expand=True,
            bgcolor=BG_INPUT,
            color=FG,
            border_color=BORDER,
            focused_border_color=ACCENT,
            label_style=ft.TextStyle(color=FG_DIM),
            cursor_color=FG,
            **kwargs,
        )

    def _section(self, title: str, controls: list[ft.Control]) -> ft.Container:
        return ft.Container(
            bgcolor=BG_CARD,
            border=ft.border.all(1, BORDER),
            border_radius=10,
            padding=14,
            content=ft.Column(
                [ft.Text(title, size=14, weight=ft.FontWeight.BOLD, color=FG), ft.Container(height=1, bgcolor=BORDER)]
                + controls,
                spacing=8,
            ),
        )

    def _build_ui(self):
        spotify_hint = [] if self.spotify else [
            ft.Text("Add Spotify credentials in Settings to import playlists.", size=11, color=FG_DIM)
        ]
        self.controls = [
            ft.Row([self.count_label, ft.Container(expand=True), self.activity, self.message]),
            self._section(
                "YouTube",
                [
                    ft.Row([self.url_field, ft.ElevatedButton("Import", bgcolor=ACCENT, color="white",
                                                              on_click=self._on_import_url)]),
                    ft.Row([self.search_field, ft.OutlinedButton("Search", on_click=self._on_search)]),
                    self.results,
                ],
            ),
            self._section(
                "Spotify",
                [
                    ft.Row([self.spotify_field, ft.ElevatedButton("Import playlist", bgcolor=ACCENT, color="white",
                                                                  on_click=self._on_import_spotify,
                                                                  disabled=self.spotify is None)]),
                    *spotify_hint,
                ],
            ),
            self._section(
                "Library",
                [
                    ft.Row([self.filter_field, ft.TextButton("Clear library", on_click=self._on_clear,
                                                             style=ft.ButtonStyle(color=DANGER))]),
                    self.song_list,
                ],
            ),
        ]

    # ── Actions ─────────────────────────────────────────────────────

    def _on_import_url(self, _):
        url = (self.url_field.value or "").strip()
        if not url:
            return
        if InvidiousClient.extract_playlist_id(url):
            self._page.run_task(self._run, "Importing playlist...", self._import_youtube_playlist, url)
        else:
            self._page.run_task(self._run, "Importing video...", self._import_youtube_video, url)

    def _on_search(self, _):
        query = (self.search_field.value or "").strip()
        if query:
            self._page.run_task(self._run, "Searching...", self._search, query)

    def _on_import_spotify(self, _):
        url = (self.spotify_field.value or "").strip()
        if url and self.spotify:
            self._page.run_task(self._run, "Importing Spotify playlist...", self._import_spotify, url)

    def _on_clear(self, _):
        self.catalog.clear()
        self._show("Library cleared.")

    def _on_add_result(self, video: VideoInfo):
        song = self.youtube.add_video(video)
        self._show(f"Added {song.title}" if song else f"{video.title} is already in the library",
                   SUCCESS if song else FG_DIM)

    def _on_delete(self, song: Song):
        self.catalog.delete(song.id)
        self._refresh()

    async def _run(self, label: str, job, *args):
        if self._busy:
            return
        self._busy = True
        self.activity.visible = True
        self._show(label)
        try:
            message = await job(*args)
            self._show(message, SUCCESS)
        except BingoError as exc:
            logger.warning("%s failed: %s", label, exc)
            self._show(str(exc), DANGER)
        finally:
            self._busy = False
            self.activity.visible = False
            self._refresh()

    async def _import_youtube_video(self, url: str) -> str:
        song = await asyncio.to_thread(self.youtube.import_video, url)
        return f"Added {song.title}" if song else "Video already in the library"

    async def _import_youtube_playlist(self, url: str) -> str:
        songs = await asyncio.to_thread(self.youtube.import_playlist, url)
        return f"{len(songs)} songs imported"

    async def _import_spotify(self, url: str) -> str:
        name, songs = await asyncio.to_thread(self.spotify.execute, url)
        return f"{len(songs)} songs imported from {name or 'playlist'}"

    async def _search(self, query: str) -> str:
        videos = await asyncio.to_thread(self.youtube.search, query, SEARCH_RESULTS)
        self.results.controls = [
            ft.Row(
                [
                    ft.Text(f"{v.artist} - {v.title}", size=11, color=FG, expand=True, max_lines=1),
                    ft.Text(f"{v.duration // 60}:{v.duration % 60:02d}", size=11, color=FG_DIM),
                    ft.IconButton(icon=ft.Icons.ADD, icon_color=ACCENT, on_click=lambda _, v=v: self._on_add_result(v)),
                ]
            )
            for v in videos
        ]
        return f"{len(videos)} results"

    # ── Rendering ───────────────────────────────────────────────────

    def _show(self, text: str, color: str = FG_DIM):
        self.message.value = text
        self.message.color = color
        self._refresh()

    def _refresh(self):
        needle = (self.filter_field.value or "").strip()
        songs = self.catalog.search(needle) if needle else self.catalog.find_all()
        playable = sum(1 for s in songs if s.has_audio)
        self.count_label.value = f"{self.catalog.count()} songs ({playable} playable shown)"
        self.song_list.controls = [
            ft.Row(
                [
                    ft.Text(f"{s.artist} - {s.title}", size=11, color=FG if s.has_audio else FG_DIM,
                            expand=True, max_lines=1),
                    ft.Text(s.source_type, size=10, color=FG_DIM),
                    ft.IconButton(icon=ft.Icons.DELETE_OUTLINE, icon_color=DANGER,
                                  on_click=lambda _, s=s: self._on_delete(s)),
                ]
            )
            for s in songs[:LIST_LIMIT]
        ]
        self._page.update()
