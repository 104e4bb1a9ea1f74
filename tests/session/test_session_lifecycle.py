"""Bounded context: Game Session

Business rules for loading songs, drawing them without replacement and
resetting a game.
"""

import asyncio
import dataclasses
import random

import pytest

from src.domain import events
from src.domain.errors import NoCurrentSongError
from src.domain.model import PlaybackState
from src.services.playback_session import PlaybackSession
from src.usecases.start_game import StartGameUseCase


class EventRecorder:
    def __init__(self, session: PlaybackSession):
        self.received: list[tuple[str, tuple]] = []
        for name in events.SESSION_EVENTS:
            session.on(name, lambda *args, name=name: self.received.append((name, args)))

    def names(self) -> list[str]:
        return [name for name, _ in self.received]

    def count(self, name: str) -> int:
        return self.names().count(name)


@pytest.fixture
def session(audio):
    return PlaybackSession(audio, rng=random.Random(7), auto_play=False)


class TestLoadSongs:
    """As a host, I load the playable library before calling songs."""

    def test_loaded_songs_form_the_pool(self, session, songs15):
        session.load_songs(songs15)

        snapshot = session.get_state()
        assert snapshot.total_songs == 15
        assert snapshot.remaining_songs == 15
        assert snapshot.drawn_songs == 0
        assert snapshot.current_song is None
        assert snapshot.playback_state is PlaybackState.IDLE

    def test_songs_loaded_event_reports_count(self, session, songs15):
        recorder = EventRecorder(session)

        session.load_songs(songs15)

        assert recorder.received == [(events.SONGS_LOADED, (15,))]

    def test_loading_does_not_keep_a_reference_to_the_caller_list(self, session, songs15):
        session.load_songs(songs15)
        songs15.clear()

        assert session.get_state().remaining_songs == 15

    def test_reloading_restarts_the_game(self, session, songs15):
        async def scenario():
            session.load_songs(songs15)
            await session.draw_next_song()
            await session.draw_next_song()
            session.load_songs(songs15[:5])

        asyncio.run(scenario())

        snapshot = session.get_state()
        assert snapshot.total_songs == 5
        assert snapshot.drawn_songs == 0
        assert session.current_song is None

    def test_songs_without_audio_never_enter_the_draw(self, session, songs15, song_factory):
        recorder = EventRecorder(session)
        silent = [song_factory(i, has_audio=False) for i in (90, 91)]

        async def scenario():
            session.load_songs(songs15[:3] + silent)
            return [await session.draw_next_song() for _ in range(4)]

        drawn = asyncio.run(scenario())

        assert recorder.received[0] == (events.SONGS_LOADED, (3,))
        assert session.get_state().total_songs == 3
        assert {s.id for s in drawn[:3]} == {"s1", "s2", "s3"}
        assert drawn[3] is None


class TestDrawWithoutReplacement:
    """Every song is called exactly once per game."""

    def test_all_songs_are_drawn_once(self, session, songs24):
        async def scenario():
            session.load_songs(songs24)
            return [await session.draw_next_song() for _ in range(24)]

        drawn = asyncio.run(scenario())

        assert sorted(s.id for s in drawn) == sorted(s.id for s in songs24)
        assert len({s.id for s in drawn}) == 24

    def test_drawn_history_keeps_draw_order(self, session, songs15):
        recorder = EventRecorder(session)

        async def scenario():
            session.load_songs(songs15)
            for _ in range(6):
                await session.draw_next_song()

        asyncio.run(scenario())

        announced = [args[0].song.id for name, args in recorder.received if name == events.SONG_DRAWN]
        assert session.drawn_ids() == announced

    def test_song_drawn_event_carries_counts(self, session, songs15):
        recorder = EventRecorder(session)

        async def scenario():
            session.load_songs(songs15)
            return await session.draw_next_song()

        song = asyncio.run(scenario())

        drawn_events = [args[0] for name, args in recorder.received if name == events.SONG_DRAWN]
        assert len(drawn_events) == 1
        assert drawn_events[0].song == song
        assert drawn_events[0].remaining == 14
        assert drawn_events[0].drawn == 1
        assert session.current_song == song

    def test_two_song_game_finishes_on_third_draw(self, session, songs15):
        recorder = EventRecorder(session)

        async def scenario():
            session.load_songs(songs15[:2])
            first = await session.draw_next_song()
            second = await session.draw_next_song()
            third = await session.draw_next_song()
            return first, second, third

        first, second, third = asyncio.run(scenario())

        assert {first.id, second.id} == {"s1", "s2"}
        assert third is None
        assert recorder.count(events.BINGO_FINISHED) == 1
        assert session.get_state().remaining_songs == 0

    def test_empty_game_finishes_immediately(self, session):
        recorder = EventRecorder(session)

        result = asyncio.run(session.draw_next_song())

        assert result is None
        assert recorder.names() == [events.BINGO_FINISHED]

    def test_finished_game_keeps_its_history(self, session, songs15):
        async def scenario():
            session.load_songs(songs15[:2])
            for _ in range(3):
                await session.draw_next_song()

        asyncio.run(scenario())

        assert len(session.drawn) == 2
        assert session.current_song is not None


class TestSnapshot:
    """Observers read state through an immutable snapshot."""

    def test_snapshot_cannot_be_modified(self, session, songs15):
        session.load_songs(songs15)
        snapshot = session.get_state()

        with pytest.raises(dataclasses.FrozenInstanceError):
            snapshot.remaining_songs = 0

    def test_snapshot_is_not_affected_by_later_draws(self, session, songs15):
        session.load_songs(songs15)
        before = session.get_state()

        asyncio.run(session.draw_next_song())

        assert before.drawn_songs == 0
        assert session.get_state().drawn_songs == 1

    def test_history_views_are_copies(self, session, songs15):
        session.load_songs(songs15)
        asyncio.run(session.draw_next_song())

        assert isinstance(session.drawn, tuple)
        session.drawn_ids().clear()
        assert len(session.drawn_ids()) == 1


class TestAutoPlaySetting:
    def test_toggle_emits_new_value(self, session):
        recorder = EventRecorder(session)

        session.set_auto_play(True)
        session.set_auto_play(False)

        assert recorder.received == [(events.AUTO_PLAY_CHANGED, (True,)), (events.AUTO_PLAY_CHANGED, (False,))]
        assert not session.get_state().auto_play_enabled

    def test_draw_without_auto_play_does_not_touch_audio(self, session, audio, songs15):
        session.load_songs(songs15)
        asyncio.run(session.draw_next_song())

        assert audio.resolved == []
        assert session.state is PlaybackState.IDLE


class TestReset:
    """A reset clears the game so a new one can be loaded."""

    def test_reset_clears_pool_history_and_current(self, session, songs15):
        recorder = EventRecorder(session)

        async def scenario():
            session.load_songs(songs15)
            await session.draw_next_song()
            session.reset()

        asyncio.run(scenario())

        snapshot = session.get_state()
        assert snapshot.total_songs == 0
        assert snapshot.current_song is None
        assert recorder.names()[-1] == events.RESET

    def test_play_after_reset_requires_a_new_draw(self, session, songs15):
        session.load_songs(songs15)
        asyncio.run(session.draw_next_song())
        session.reset()

        with pytest.raises(NoCurrentSongError):
            asyncio.run(session.play_current_song())


class TestStartGameUseCase:
    """Only songs with a playable source enter the draw."""

    def test_only_playable_songs_are_loaded(self, catalog, audio, song_factory):
        catalog.insert(song_factory(99, has_audio=False))
        session = PlaybackSession(audio, auto_play=False)

        count = StartGameUseCase(catalog, session).execute()

        assert count == 24
        assert "s99" not in {s.id for s in session.pool}


class TestEventDelivery:
    """Observers are called in registration order and cannot break the game."""

    def test_failing_listener_does_not_stop_later_listeners(self, session, songs15):
        received = []

        def broken(_count):
            raise RuntimeError("listener bug")

        session.on(events.SONGS_LOADED, broken)
        session.on(events.SONGS_LOADED, received.append)

        session.load_songs(songs15)

        assert received == [15]

    def test_unsubscribe_stops_delivery(self, session, songs15):
        received = []
        unsubscribe = session.on(events.SONGS_LOADED, received.append)

        unsubscribe()
        session.load_songs(songs15)

        assert received == []
        assert session.events.listener_count(events.SONGS_LOADED) == 0
