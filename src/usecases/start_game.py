"""Use case: start a new game with every playable song in the catalog."""

from src.domain.ports import SongCatalogPort
from src.services.playback_session import PlaybackSession


class StartGameUseCase:

    def __init__(self, catalog: SongCatalogPort, session: PlaybackSession):
        self.catalog = catalog
        self.session = session

    def execute(self) -> int:
        self.session.load_songs(self.catalog.find_all())
        return self.session.get_state().total_songs
