"""Spotify adapter for importing playlist tracks as songs."""

import logging
import re
import uuid
from datetime import datetime
from typing import Callable, Optional

import spotipy

from src.config import DEFAULT_CLIP_LENGTH, DEFAULT_CUE_IN
from src.domain.errors import PlaylistUrlError
from src.domain.model import Song

logger = logging.getLogger("bingo_musical.spotify")

_PLAYLIST_ID = re.compile(r"playlist[/:]([a-zA-Z0-9]+)")

VideoFinder = Callable[[str, str], Optional[str]]
ProgressCallback = Callable[[int, int, Song], None]


def extract_playlist_id(url: str) -> str:
    match = _PLAYLIST_ID.search(url)
    if not match:
        raise PlaylistUrlError(f"Not a Spotify playlist URL: {url}")
    return match.group(1)


def middle_clip(duration: float) -> tuple[float, float]:
    middle = duration / 2
    half = DEFAULT_CLIP_LENGTH / 2
    return max(0.0, middle - half), min(duration, middle + half)


class SpotifyPlaylistImporter:

    def __init__(self, sp: spotipy.Spotify, video_finder: VideoFinder | None = None):
        self.sp = sp
        self.video_finder = video_finder

    def fetch_playlist_tracks(self, playlist_id: str) -> list[dict]:
        tracks: list[dict] = []
        offset = 0
        limit = 100

        while True:
            results = self.sp.playlist_items(playlist_id, limit=limit, offset=offset)
            items = results.get("items", [])
            if not items:
                break
            for item in items:
                track = item.get("track")
                if track and track.get("id"):
                    tracks.append(track)
            offset += limit
            if offset >= results.get("total", 0):
                break

        return tracks

    def detect_best_clip(self, track_id: str, duration: float) -> tuple[float, float]:
        """Start the clip at the loudest section, else play the middle of the track."""
        try:
            analysis = self.sp.audio_analysis(track_id)
        except spotipy.SpotifyException as exc:
            logger.info("Audio analysis unavailable for %s: %s", track_id, exc)
            return middle_clip(duration)

        sections = (analysis or {}).get("sections") or []
        if not sections:
            return middle_clip(duration)
        loudest = max(sections, key=lambda s: s.get("loudness", float("-inf")))
        cue_in = float(int(loudest.get("start", 0)))
        cue_out = min(float(int(cue_in + DEFAULT_CLIP_LENGTH)), duration)
        if cue_out <= cue_in:
            return middle_clip(duration)
        return cue_in, cue_out

    def import_playlist(
        self,
        playlist_url: str,
        auto_detect_clip: bool = True,
        on_progress: ProgressCallback | None = None,
    ) -> tuple[str, list[Song]]:
        playlist_id = extract_playlist_id(playlist_url)
        playlist = self.sp.playlist(playlist_id, fields="name,description")
        tracks = self.fetch_playlist_tracks(playlist_id)
        logger.info("Importing Spotify playlist %s (%s tracks)", playlist_id, len(tracks))

        songs: list[Song] = []
        for index, track in enumerate(tracks, start=1):
            song = self._track_to_song(track, auto_detect_clip)
            songs.append(song)
            if on_progress:
                on_progress(index, len(tracks), song)

        return playlist.get("name", ""), songs

    def _track_to_song(self, track: dict, auto_detect_clip: bool) -> Song:
        duration = (track.get("duration_ms") or 0) / 1000
        artists = [a["name"] for a in track.get("artists", []) if a.get("name")]
        primary_artist = artists[0] if artists else "Unknown artist"
        album = track.get("album") or {}
        images = album.get("images") or []
        release_date = album.get("release_date") or ""

        youtube_id = self.video_finder(track["name"], primary_artist) if self.video_finder else None

        cue_in, cue_out = DEFAULT_CUE_IN, DEFAULT_CUE_IN + DEFAULT_CLIP_LENGTH
        if auto_detect_clip and duration:
            cue_in, cue_out = self.detect_best_clip(track["id"], duration)
        elif duration:
            cue_in = min(cue_in, max(0.0, duration - DEFAULT_CLIP_LENGTH))
            cue_out = min(cue_in + DEFAULT_CLIP_LENGTH, duration)

        return Song(
            id=uuid.uuid4().hex,
            title=track["name"],
            artist=", ".join(artists) or primary_artist,
            duration_seconds=duration,
            cue_in=cue_in,
            cue_out=cue_out,
            has_audio=bool(youtube_id or track.get("preview_url")),
            album=album.get("name", ""),
            year=int(release_date[:4]) if release_date[:4].isdigit() else None,
            youtube_id=youtube_id,
            spotify_id=track["id"],
            cover_image=images[0].get("url") if images and isinstance(images[0], dict) else None,
            source_type="YOUTUBE" if youtube_id else "SPOTIFY",
            created_at=datetime.now().isoformat(),
        )
