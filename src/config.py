"""Configuration: card layouts, playback constants, and provider settings."""

import os
import sys

from src.domain.model import CardLayout

APP_NAME = "Bingo Musical"

# Card layouts
LAYOUTS = {
    "3x5": CardLayout(name="3x5", rows=3, cols=5),
    "5x5": CardLayout(name="5x5", rows=5, cols=5, free_cells=frozenset({(2, 2)})),
}
DEFAULT_LAYOUT = "3x5"
MAX_CARDS_PER_BATCH = 50

# Playback
FALLBACK_CLIP_SECONDS = 15.0
SPOTIFY_PREVIEW_SECONDS = 30.0
DEFAULT_CUE_IN = 30.0
DEFAULT_CLIP_LENGTH = 15.0

# Invidious mirrors, tried in order and rotated on failure
INVIDIOUS_INSTANCES = [
    "https://inv.nadeko.net",
    "https://invidious.fdn.fr",
    "https://invidious.privacyredirect.com",
    "https://invidious.protokolla.fi",
    "https://inv.riverside.rocks",
    "https://yt.artemislena.eu",
    "https://invidious.flokinet.to",
    "https://invidious.kavin.rocks",
]
INVIDIOUS_MAX_RETRIES = 3
HTTP_TIMEOUT = float(os.getenv("BINGO_MUSICAL_HTTP_TIMEOUT", "15"))
USER_AGENT = "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36"

# Local files
DATA_DIR = os.getenv("BINGO_MUSICAL_DATA_DIR", "")
SONGS_FILE = "songs.json"
CARDS_FILE = "cards.json"
EXPORT_HTML_FILE = "bingo-cards.html"
GAME_EXPORT_FILE = "bingo-game.json"


def app_dir() -> str:
    """Directory holding config.json and the local data files.

    - BINGO_MUSICAL_DATA_DIR when set
    - PyInstaller bundle: next to the .exe
    - Normal Python: project root (cwd)
    """
    if DATA_DIR:
        return DATA_DIR
    if getattr(sys, "frozen", False):
        return os.path.dirname(sys.executable)
    return os.getcwd()


def data_path(filename: str) -> str:
    return os.path.join(app_dir(), filename)
