"""Use case: import a Spotify playlist into the catalog."""

import logging
from typing import Optional

from src.adapters.spotify.track_adapter import ProgressCallback, SpotifyPlaylistImporter
from src.domain.model import Song
from src.domain.ports import SongCatalogPort

logger = logging.getLogger("bingo_musical.import.spotify")


class ImportSpotifyPlaylistUseCase:

    def __init__(self, importer: SpotifyPlaylistImporter, catalog: SongCatalogPort):
        self.importer = importer
        self.catalog = catalog

    def execute(
        self,
        playlist_url: str,
        auto_detect_clip: bool = True,
        on_progress: Optional[ProgressCallback] = None,
    ) -> tuple[str, list[Song]]:
        name, songs = self.importer.import_playlist(playlist_url, auto_detect_clip, on_progress)
        known = {s.spotify_id for s in self.catalog.find_all() if s.spotify_id}
        fresh = [s for s in songs if s.spotify_id not in known]
        self.catalog.insert_many(fresh)
        logger.info("Playlist %r: %s new songs, %s already in catalog", name, len(fresh), len(songs) - len(fresh))
        return name, fresh
