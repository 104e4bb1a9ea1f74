"""Use case: import YouTube videos into the catalog through Invidious."""

import logging
import uuid
from datetime import datetime
from typing import Callable, Optional

from src.adapters.invidious.client import InvidiousClient, VideoInfo
from src.config import DEFAULT_CLIP_LENGTH, DEFAULT_CUE_IN
from src.domain.errors import PlaylistUrlError
from src.domain.model import Song
from src.domain.ports import SongCatalogPort

logger = logging.getLogger("bingo_musical.import.youtube")

ProgressCallback = Callable[[int, int, Song], None]


def default_cue_window(duration: float) -> tuple[float, float]:
    cue_in = min(DEFAULT_CUE_IN, max(0.0, duration - DEFAULT_CLIP_LENGTH))
    return cue_in, min(cue_in + DEFAULT_CLIP_LENGTH, duration)


def video_to_song(video: VideoInfo) -> Song:
    cue_in, cue_out = default_cue_window(float(video.duration))
    return Song(
        id=uuid.uuid4().hex,
        title=video.title,
        artist=video.artist,
        duration_seconds=float(video.duration),
        cue_in=cue_in,
        cue_out=cue_out,
        has_audio=True,
        youtube_id=video.id,
        cover_image=video.thumbnail,
        source_type="YOUTUBE",
        created_at=datetime.now().isoformat(),
    )


class ImportYouTubeUseCase:

    def __init__(self, client: InvidiousClient, catalog: SongCatalogPort):
        self.client = client
        self.catalog = catalog

    def search(self, query: str, max_results: int = 20) -> list[VideoInfo]:
        return self.client.search_videos(query, max_results)

    def add_video(self, video: VideoInfo) -> Optional[Song]:
        """Store a search result. Returns None when the video is already imported."""
        if video.id in self._known_video_ids():
            logger.info("Video %s already in catalog", video.id)
            return None
        return self.catalog.insert(video_to_song(video))

    def import_video(self, url: str) -> Optional[Song]:
        video_id = InvidiousClient.extract_video_id(url)
        if not video_id:
            raise PlaylistUrlError(f"Not a YouTube video URL: {url}")
        return self.add_video(self.client.get_video_info(video_id))

    def import_playlist(self, url: str, on_progress: ProgressCallback | None = None) -> list[Song]:
        playlist_id = InvidiousClient.extract_playlist_id(url)
        if not playlist_id:
            raise PlaylistUrlError(f"Not a YouTube playlist URL: {url}")

        videos = self.client.get_playlist_videos(playlist_id)
        known = self._known_video_ids()
        songs: list[Song] = []
        for index, video in enumerate(videos, start=1):
            if not video.id or video.id in known:
                continue
            known.add(video.id)
            song = video_to_song(video)
            songs.append(song)
            if on_progress:
                on_progress(index, len(videos), song)

        self.catalog.insert_many(songs)
        logger.info("Imported %s of %s videos from playlist %s", len(songs), len(videos), playlist_id)
        return songs

    def _known_video_ids(self) -> set[str]:
        return {s.youtube_id for s in self.catalog.find_all() if s.youtube_id}
