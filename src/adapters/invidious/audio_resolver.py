"""Resolve playable audio streams through Invidious."""

import asyncio
import logging
from typing import Optional

from src.adapters.invidious.client import InvidiousClient
from src.domain.model import ResolvedAudio, Song
from src.domain.ports import AudioResolverPort

logger = logging.getLogger("bingo_musical.invidious")


class InvidiousAudioResolver(AudioResolverPort):

    name = "invidious"

    def __init__(self, client: InvidiousClient):
        self.client = client

    async def resolve(self, song: Song) -> Optional[ResolvedAudio]:
        video_id = song.youtube_id or await self._search_video_id(song)
        if not video_id:
            return None
        audio = await asyncio.to_thread(self.client.get_audio_url, video_id)
        return ResolvedAudio(
            url=audio["url"],
            duration_hint=audio.get("duration"),
            start_seconds=song.cue_in or 0.0,
            source=self.name,
        )

    async def _search_video_id(self, song: Song) -> Optional[str]:
        query = f"{song.title} {song.artist}".strip()
        results = await asyncio.to_thread(self.client.search_videos, query, 1)
        if not results:
            logger.info("No Invidious result for %r", query)
            return None
        return results[0].id
