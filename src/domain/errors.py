"""Domain error taxonomy."""


class BingoError(Exception):
    pass


class InsufficientSongsError(BingoError):

    def __init__(self, required: int, available: int, layout: str = ""):
        self.required = required
        self.available = available
        self.layout = layout
        suffix = f" for layout {layout}" if layout else ""
        super().__init__(f"Need at least {required} songs{suffix}, got {available}")


class NoCurrentSongError(BingoError):

    def __init__(self, message: str = "No song has been drawn yet"):
        super().__init__(message)


class SessionBusyError(BingoError):
    pass


class AudioResolutionError(BingoError):
    pass


class ProviderError(BingoError):
    pass


class PlaylistUrlError(BingoError, ValueError):
    pass
