"""Main Flet application: composes adapters and hosts the game, cards, library and settings tabs."""

import atexit
import json
import logging
import os
import platform
import signal
import traceback
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Optional

import flet as ft
import pygame

from src.adapters.audio.null_device import NullAudioDevice
from src.adapters.audio.provider_audio_adapter import ProviderAudioAdapter
from src.adapters.audio.pygame_device import PygameAudioDevice
from src.adapters.cards.json_card_store import JsonCardStoreAdapter
from src.adapters.catalog.json_song_catalog import JsonSongCatalogAdapter
from src.adapters.config.json_config_adapter import JsonConfigAdapter
from src.adapters.invidious.audio_resolver import InvidiousAudioResolver
from src.adapters.invidious.client import InvidiousClient
from src.adapters.spotify.auth import get_spotify_client
from src.adapters.spotify.preview_resolver import SpotifyPreviewResolver
from src.adapters.spotify.track_adapter import SpotifyPlaylistImporter
from src.config import APP_NAME, FALLBACK_CLIP_SECONDS
from src.domain.errors import ProviderError
from src.domain.ports import AudioDevicePort, AudioResolverPort, CardStorePort, SongCatalogPort
from src.services.playback_session import PlaybackSession
from src.ui.cards_view import CardsView
from src.ui.game_view import GameView
from src.ui.library_view import LibraryView
from src.ui.settings_view import SettingsView
from src.ui.theme import ACCENT, BG, FG, FG_DIM
from src.usecases.import_playlist import ImportSpotifyPlaylistUseCase
from src.usecases.import_youtube import ImportYouTubeUseCase
from src.version import __version__

LOCK_FILE = Path.home() / ".bingo-musical.lock"

logger = logging.getLogger("bingo_musical.ui")


def _get_lock_pid() -> int | None:
    """Read PID from lock file, return None if not found or invalid."""
    try:
        if LOCK_FILE.exists():
            return int(LOCK_FILE.read_text().strip())
    except (ValueError, OSError):
        pass
    return None


def _is_process_running(pid: int) -> bool:
    try:
        os.kill(pid, 0)
        return True
    except (OSError, ProcessLookupError):
        return False


def _kill_previous_instance() -> bool:
    """Two instances would fight over the sound device."""
    pid = _get_lock_pid()
    if pid and pid != os.getpid() and _is_process_running(pid):
        try:
            os.kill(pid, signal.SIGTERM)
            return True
        except OSError:
            return False
    return False


def _create_lock():
    LOCK_FILE.write_text(str(os.getpid()))
    atexit.register(_remove_lock)


def _remove_lock():
    try:
        LOCK_FILE.unlink(missing_ok=True)
    except OSError:
        pass


def _generate_bug_report(error: Exception, config: dict, context: str = "") -> str:
    """Bug report with secrets masked."""
    safe_config = {}
    for key, value in config.items():
        if any(secret in key.lower() for secret in ["secret", "key", "token", "password"]):
            safe_config[key] = "***MASKED***" if value else "(empty)"
        else:
            safe_config[key] = value

    report = {
        "timestamp": datetime.now().isoformat(),
        "version": __version__,
        "platform": {
            "system": platform.system(),
            "release": platform.release(),
            "python": platform.python_version(),
        },
        "context": context,
        "error": {
            "type": type(error).__name__,
            "message": str(error),
            "traceback": "".join(traceback.format_exception(type(error), error, error.__traceback__)),
        },
        "config": safe_config,
    }
    return json.dumps(report, indent=2, default=str)


def open_audio_device() -> AudioDevicePort:
    try:
        return PygameAudioDevice()
    except pygame.error:
        logger.exception("Audio output unavailable; songs will be drawn without sound")
        return NullAudioDevice()


@dataclass
class AppServices:
    catalog: SongCatalogPort
    card_store: CardStorePort
    session: PlaybackSession
    youtube: ImportYouTubeUseCase
    spotify: Optional[ImportSpotifyPlaylistUseCase] = None


def _youtube_finder(client: InvidiousClient):
    def find(title: str, artist: str) -> Optional[str]:
        try:
            results = client.search_videos(f"{title} {artist}", 1)
        except ProviderError as exc:
            logger.info("No YouTube match for %s - %s: %s", artist, title, exc)
            return None
        return results[0].id if results else None

    return find


def build_services(
    cfg: dict,
    device: AudioDevicePort | None = None,
    catalog: SongCatalogPort | None = None,
    card_store: CardStorePort | None = None,
) -> AppServices:
    catalog = catalog or JsonSongCatalogAdapter()
    card_store = card_store or JsonCardStoreAdapter()
    invidious = InvidiousClient(instances=cfg.get("invidious_instances") or None)
    resolvers: list[AudioResolverPort] = [InvidiousAudioResolver(invidious)]

    spotify_uc = None
    if cfg.get("spotify_client_id") and cfg.get("spotify_client_secret"):
        sp = get_spotify_client(cfg["spotify_client_id"], cfg["spotify_client_secret"])
        resolvers.append(SpotifyPreviewResolver(sp))
        importer = SpotifyPlaylistImporter(sp, video_finder=_youtube_finder(invidious))
        spotify_uc = ImportSpotifyPlaylistUseCase(importer, catalog)

    audio = ProviderAudioAdapter(resolvers, device or open_audio_device())
    if cfg.get("audio_source") in {r.name for r in resolvers}:
        audio.set_primary(cfg["audio_source"])

    session = PlaybackSession(
        audio,
        auto_play=bool(cfg.get("auto_play", True)),
        fallback_clip_seconds=float(cfg.get("fallback_clip_seconds") or FALLBACK_CLIP_SECONDS),
    )
    logger.info(
        "Services ready (primary audio=%s, spotify=%s, songs=%s)",
        audio.primary_source,
        spotify_uc is not None,
        catalog.count(),
    )
    return AppServices(
        catalog=catalog,
        card_store=card_store,
        session=session,
        youtube=ImportYouTubeUseCase(invidious, catalog),
        spotify=spotify_uc,
    )


def run_app():
    _kill_previous_instance()
    _create_lock()
    logger.info("App boot sequence started")

    def main(page: ft.Page):
        page.title = f"{APP_NAME} {__version__}"
        page.bgcolor = BG
        page.window.width = 1100
        page.window.height = 860
        page.window.min_width = 760
        page.window.min_height = 640

        config = JsonConfigAdapter()
        device = open_audio_device()
        state: dict = {"services": None}

        def show_error_view(error: Exception, context: str, cfg: dict):
            report_path = Path(os.getcwd()) / f"bingo-musical-bug-report-{datetime.now().strftime('%Y%m%d-%H%M%S')}.json"

            def save_report(_):
                report_path.write_text(_generate_bug_report(error, cfg, context))
                details.value = f"Report saved to {report_path}"
                page.update()

            details = ft.Text(f"Technical details: {type(error).__name__}: {error}", color=FG_DIM, size=11)
            page.controls.clear()
            page.add(
                ft.Container(
                    expand=True,
                    alignment=ft.Alignment(0, 0),
                    content=ft.Column(
                        [
                            ft.Icon(ft.Icons.ERROR_OUTLINE, color="red", size=48),
                            ft.Text("Could not start the game", color="red", size=20, weight=ft.FontWeight.BOLD),
                            ft.Text("Check the Spotify credentials and Invidious instances in config.json.",
                                    color=FG, size=14),
                            details,
                            ft.OutlinedButton("Save bug report", icon=ft.Icons.DOWNLOAD, on_click=save_report),
                        ],
                        horizontal_alignment=ft.CrossAxisAlignment.CENTER,
                        alignment=ft.MainAxisAlignment.CENTER,
                        spacing=8,
                    ),
                )
            )
            page.update()

        async def _reload_after_settings(cfg: dict):
            previous = state["services"]
            if previous:
                previous.session.reset()
            launch(cfg, selected_index=3)

        def launch(cfg: dict, selected_index: int = 0):
            try:
                services = build_services(cfg, device=device)
            except Exception as exc:
                logger.exception("Service composition failed")
                show_error_view(exc, "build_services", cfg)
                return
            state["services"] = services

            tabs = ft.Tabs(
                selected_index=selected_index,
                expand=True,
                indicator_color=ACCENT,
                label_color=FG,
                unselected_label_color=FG_DIM,
                tabs=[
                    ft.Tab(text="Game", content=GameView(page, services.session, services.catalog, services.card_store)),
                    ft.Tab(
                        text="Cards",
                        content=CardsView(
                            page,
                            services.catalog,
                            services.card_store,
                            default_layout=cfg.get("card_layout"),
                            prevent_duplicate_artist=bool(cfg.get("prevent_duplicate_artist")),
                        ),
                    ),
                    ft.Tab(text="Library", content=LibraryView(page, services.catalog, services.youtube, services.spotify)),
                    ft.Tab(
                        text="Settings",
                        content=SettingsView(
                            page,
                            config,
                            on_saved=lambda new_cfg: page.run_task(_reload_after_settings, new_cfg),
                        ),
                    ),
                ],
            )
            page.controls.clear()
            page.add(tabs)
            page.update()

        launch(config.load())

    ft.app(target=main)
