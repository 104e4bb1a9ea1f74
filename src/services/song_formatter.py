"""Clean up imported titles so they fit on a printed card."""

import re

from src.domain.model import Song

MAX_TITLE_LENGTH = 60
MAX_ARTIST_LENGTH = 40

_BRACKETED = re.compile(r"[(\[][^)\]]*[)\]]")

_NOISE_PATTERNS = [
    # English
    r"official\s*music\s*video",
    r"official\s*video",
    r"official\s*audio",
    r"official\s*lyric\s*video",
    r"lyric\s*video",
    r"music\s*video",
    r"visualizer",
    r"\bofficial\b",
    r"\bvideo\b",
    r"\baudio\b",
    r"\blyrics?\b",
    r"\bremix\b",
    r"\bremastered\b",
    r"\blive\b",
    r"\bperformance\b",
    r"\bfeat\b\.?",
    r"\bft\b\.?",
    # Spanish
    r"v[íi]deo\s*oficial",
    r"audio\s*oficial",
    r"letra\s*oficial",
    r"con\s*letra",
    r"\boficial\b",
    r"\bv[íi]deo\b",
    r"\bletras?\b",
    r"\ben\s*vivo\b",
    r"\bpresentaci[óo]n\b",
    r"\bpart\.?\s*\d+\b",
]
_NOISE = [re.compile(pattern, re.IGNORECASE) for pattern in _NOISE_PATTERNS]


def clean_song_title(title: str) -> str:
    if not title:
        return ""
    cleaned = _BRACKETED.sub("", title)
    for pattern in _NOISE:
        cleaned = pattern.sub("", cleaned)
    cleaned = re.sub(r"\s+", " ", cleaned)
    cleaned = re.sub(r"^[\s\-|]+|[\s\-|]+$", "", cleaned)
    cleaned = re.sub(r"\s*\|\s*", " ", cleaned)
    return cleaned.strip()


def _truncate(value: str, limit: int) -> str:
    if len(value) > limit:
        return value[: limit - 3] + "..."
    return value


def format_song_for_bingo(song: Song | None) -> dict[str, str]:
    """Return ``{"title", "artist"}`` ready for a card cell."""
    if song is None:
        return {"title": "", "artist": ""}

    title = song.title or ""
    artist = song.artist or ""

    # "Artist - Title" uploads with no artist field
    if " - " in title and not artist:
        head, _, tail = title.partition(" - ")
        if head.strip():
            artist = head.strip()
            title = tail.strip()

    cleaned = clean_song_title(title)
    if len(cleaned.strip()) >= 3:
        title = cleaned
    else:
        title = song.title or ""

    return {
        "title": _truncate(title, MAX_TITLE_LENGTH),
        "artist": _truncate(artist, MAX_ARTIST_LENGTH),
    }
