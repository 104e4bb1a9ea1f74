"""Resolve 30-second Spotify previews as a backup audio source."""

import asyncio
from typing import Optional

import spotipy

from src.config import SPOTIFY_PREVIEW_SECONDS
from src.domain.model import ResolvedAudio, Song
from src.domain.ports import AudioResolverPort


class SpotifyPreviewResolver(AudioResolverPort):

    name = "spotify"

    def __init__(self, sp: spotipy.Spotify, search_limit: int = 5):
        self.sp = sp
        self.search_limit = search_limit

    async def resolve(self, song: Song) -> Optional[ResolvedAudio]:
        if song.spotify_id:
            track = await asyncio.to_thread(self.sp.track, song.spotify_id)
            candidates = [track] if track else []
        else:
            query = f"{song.title} {song.artist}".strip()
            results = await asyncio.to_thread(self.sp.search, q=query, type="track", limit=self.search_limit)
            candidates = (results or {}).get("tracks", {}).get("items", [])

        for track in candidates:
            preview_url = track.get("preview_url")
            if preview_url:
                # Previews always start at 0; the cue window refers to the full track.
                return ResolvedAudio(url=preview_url, duration_hint=SPOTIFY_PREVIEW_SECONDS, source=self.name)
        return None
