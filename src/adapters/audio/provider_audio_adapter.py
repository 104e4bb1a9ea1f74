"""AudioPort combining URL providers with a playback device."""

import asyncio
import logging

from src.domain.errors import AudioResolutionError
from src.domain.model import ResolvedAudio, Song
from src.domain.ports import AudioDevicePort, AudioPort, AudioResolverPort

logger = logging.getLogger("bingo_musical.audio")


class ProviderAudioAdapter(AudioPort):
    """Tries the primary provider first, then each backup in order."""

    def __init__(self, resolvers: list[AudioResolverPort], device: AudioDevicePort):
        if not resolvers:
            raise ValueError("At least one audio resolver is required")
        self.resolvers = list(resolvers)
        self.device = device

    @property
    def primary_source(self) -> str:
        return self.resolvers[0].name

    def set_primary(self, source: str) -> None:
        for index, resolver in enumerate(self.resolvers):
            if resolver.name == source:
                self.resolvers.insert(0, self.resolvers.pop(index))
                logger.info("Primary audio source set to %s", source)
                return
        raise ValueError(f"Unknown audio source: {source}")

    async def resolve_playable_url(self, song: Song) -> ResolvedAudio:
        failures: list[str] = []
        for resolver in self.resolvers:
            try:
                resolved = await resolver.resolve(song)
                if resolved and resolved.url:
                    await asyncio.to_thread(self.device.prefetch, resolved.url)
                    return resolved
            except Exception as exc:
                logger.warning("Audio source %s failed for %s: %s", resolver.name, song.id, exc)
                failures.append(f"{resolver.name}: {exc}")
                continue
            failures.append(f"{resolver.name}: no audio found")

        raise AudioResolutionError(
            f"No playable audio for {song.artist} - {song.title} ({'; '.join(failures)})"
        )

    def play(self, url: str, start_seconds: float = 0.0) -> None:
        self.device.play(url, start_seconds)

    def pause(self) -> None:
        self.device.pause()

    def resume(self) -> None:
        self.device.resume()

    def stop(self) -> None:
        self.device.stop()

    def get_elapsed(self) -> float:
        return self.device.get_elapsed()
