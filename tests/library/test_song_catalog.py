"""Bounded context: Song Library

The song catalog is a local JSON file edited through the library screen.
"""

import json

import pytest

from src.adapters.catalog.json_song_catalog import JsonSongCatalogAdapter, song_from_dict


@pytest.fixture
def path(tmp_path):
    return str(tmp_path / "songs.json")


@pytest.fixture
def store(path, songs15):
    adapter = JsonSongCatalogAdapter(path=path)
    adapter.insert_many(songs15)
    return adapter


class TestCatalogPersistence:
    """Imported songs survive app restarts."""

    def test_songs_are_reloaded_from_disk(self, path, store, songs15):
        reloaded = JsonSongCatalogAdapter(path=path)

        assert reloaded.find_all() == songs15
        assert reloaded.count() == 15

    def test_missing_file_is_an_empty_library(self, tmp_path):
        assert JsonSongCatalogAdapter(path=str(tmp_path / "none.json")).count() == 0

    def test_corrupt_file_is_an_empty_library(self, path):
        with open(path, "w", encoding="utf-8") as f:
            f.write("{not json")

        assert JsonSongCatalogAdapter(path=path).find_all() == []

    def test_plain_list_payload_is_accepted(self, path, song_factory):
        with open(path, "w", encoding="utf-8") as f:
            json.dump([{"id": "a", "title": "One", "artist": "X", "unknown_field": 1}], f)

        songs = JsonSongCatalogAdapter(path=path).find_all()

        assert [s.id for s in songs] == ["a"]

    def test_unknown_keys_are_ignored(self):
        song = song_from_dict({"id": "a", "title": "One", "artist": "X", "legacy": True})

        assert song.title == "One"


class TestCatalogEditing:
    def test_search_matches_title_artist_and_album(self, store, song_factory):
        store.insert(song_factory(90, title="Waterloo", artist="ABBA", album="Waterloo"))

        assert [s.id for s in store.search("abba")] == ["s90"]
        assert [s.id for s in store.search("WATERLOO")] == ["s90"]

    def test_update_changes_fields_but_not_id(self, path, store):
        updated = store.update("s1", cue_in=10.0, cue_out=25.0, id="other")

        assert updated.id == "s1"
        assert updated.clip_seconds == 15.0
        assert JsonSongCatalogAdapter(path=path).find_by_id("s1").cue_in == 10.0

    def test_delete_and_delete_many(self, store):
        store.delete("s1")
        store.delete_many(["s2", "s3", "missing"])

        assert store.count() == 12
        assert store.find_by_id("s2") is None

    def test_deleting_unknown_song_is_an_error(self, store):
        with pytest.raises(KeyError):
            store.delete("missing")

    def test_clear_empties_the_file(self, path, store):
        store.clear()

        assert JsonSongCatalogAdapter(path=path).count() == 0
