"""Printable HTML rendering of bingo cards."""

import logging
from dataclasses import dataclass
from datetime import datetime
from html import escape
from typing import Callable, Iterable

from src.config import APP_NAME
from src.domain.model import FREE_SPACE, BingoCard, Song
from src.services.song_formatter import format_song_for_bingo

CellLookup = Callable[[str], dict[str, str]]

FREE_LABEL = "FREE"
REMOVED_LABEL = "(removed from library)"

logger = logging.getLogger("bingo_musical.services.card_renderer")

_STYLE = """
body { font-family: Arial, sans-serif; margin: 0; padding: 24px; }
.card { page-break-after: always; margin: 0 auto 32px; max-width: 900px; }
.card:last-child { page-break-after: auto; }
.card h2 { text-align: center; margin: 0 0 4px; color: #667eea; }
.card .meta { text-align: center; font-size: 11px; color: #666; margin-bottom: 12px; }
.card table { width: 100%; border-collapse: collapse; table-layout: fixed; }
.card td { border: 2px solid #333; height: 110px; padding: 6px; text-align: center; vertical-align: middle; }
.card td .title { font-weight: bold; font-size: 14px; display: block; }
.card td .artist { font-size: 11px; color: #555; display: block; margin-top: 4px; }
.card td.free { background: #667eea; color: white; font-size: 20px; font-weight: bold; }
@media print { body { padding: 0; } }
"""


@dataclass(frozen=True)
class RenderCell:
    title: str
    artist: str
    free: bool = False


def song_lookup(songs: Iterable[Song]) -> CellLookup:
    """Build a cell lookup over a song list, formatting titles for print.

    Cards outlive the library: a song deleted after the cards were generated
    resolves to a placeholder cell instead of failing the whole export.
    """
    by_id = {song.id: song for song in songs}
    reported: set[str] = set()

    def lookup(song_id: str) -> dict[str, str]:
        song = by_id.get(song_id)
        if song is None:
            if song_id not in reported:
                reported.add(song_id)
                logger.warning("Song %s is no longer in the library, printing a placeholder", song_id)
            return {"title": REMOVED_LABEL, "artist": ""}
        return format_song_for_bingo(song)

    return lookup


def build_render_model(card: BingoCard, lookup: CellLookup) -> list[list[RenderCell]]:
    """Resolve every cell of ``card``. Errors raised by ``lookup`` propagate."""
    rows = []
    for row in card.grid:
        cells = []
        for cell in row:
            if cell is FREE_SPACE:
                cells.append(RenderCell(title=FREE_LABEL, artist="", free=True))
                continue
            info = lookup(cell)
            cells.append(RenderCell(title=info.get("title", ""), artist=info.get("artist", "")))
        rows.append(cells)
    return rows


def render_card_html(card: BingoCard, lookup: CellLookup, number: int | None = None) -> str:
    heading = f"{APP_NAME} #{number}" if number is not None else APP_NAME
    lines = [
        '<section class="card">',
        f"<h2>{escape(heading)}</h2>",
        f'<div class="meta">Card {escape(card.id[:8])} &middot; {escape(card.layout)} &middot; seed {escape(card.seed)}</div>',
        "<table>",
    ]
    for row in build_render_model(card, lookup):
        lines.append("<tr>")
        for cell in row:
            if cell.free:
                lines.append(f'<td class="free">{FREE_LABEL}</td>')
            else:
                lines.append(
                    f'<td><span class="title">{escape(cell.title)}</span>'
                    f'<span class="artist">{escape(cell.artist)}</span></td>'
                )
        lines.append("</tr>")
    lines.extend(["</table>", "</section>"])
    return "\n".join(lines)


def render_cards_html(cards: list[BingoCard], songs: Iterable[Song]) -> str:
    lookup = song_lookup(songs)
    body = "\n".join(render_card_html(card, lookup, number=i + 1) for i, card in enumerate(cards))
    generated = datetime.now().strftime("%Y-%m-%d %H:%M")
    return (
        "<!DOCTYPE html>\n"
        '<html lang="en">\n<head>\n<meta charset="utf-8">\n'
        f"<title>{escape(APP_NAME)} - {len(cards)} cards</title>\n"
        f"<style>{_STYLE}</style>\n</head>\n<body>\n"
        f"<!-- generated {generated} -->\n"
        f"{body}\n</body>\n</html>\n"
    )
