"""Bounded context: Configuration

Business rules for detecting a usable setup and persisting preferences.
"""

import json
import os

import pytest

from src.adapters.config.json_config_adapter import JsonConfigAdapter
from src.config import DEFAULT_LAYOUT, FALLBACK_CLIP_SECONDS, INVIDIOUS_INSTANCES


class FakeSecretStore:
    def __init__(self):
        self.data: dict[str, str] = {}

    def get(self, key: str):
        return self.data.get(key)

    def set(self, key: str, value: str) -> bool:
        if value:
            self.data[key] = value
        else:
            self.data.pop(key, None)
        return True

    def forget_all(self) -> list[str]:
        removed = list(self.data)
        self.data.clear()
        return removed


@pytest.fixture
def config_path(tmp_path):
    return str(tmp_path / "config.json")


@pytest.fixture
def adapter(config_path):
    return JsonConfigAdapter(path=config_path, secret_store=FakeSecretStore())


class TestSetupDetection:
    """The app knows whether it can play audio with the current settings."""

    def test_defaults_are_usable_with_public_mirrors(self, adapter):
        assert adapter.is_configured()

    def test_invidious_without_mirrors_is_not_configured(self, adapter):
        adapter.save({"audio_source": "invidious", "invidious_instances": []})

        assert not adapter.is_configured()

    def test_spotify_source_needs_credentials(self, adapter):
        adapter.save({"audio_source": "spotify", "spotify_client_id": "", "spotify_client_secret": ""})

        assert not adapter.is_configured()

    def test_spotify_source_with_credentials_is_configured(self, adapter):
        adapter.save({"audio_source": "spotify", "spotify_client_id": "abc123", "spotify_client_secret": "secret"})

        assert adapter.is_configured()


class TestConfigPersistence:
    """Preferences are saved to disk and survive app restarts."""

    def test_load_returns_defaults_when_no_file(self, adapter):
        loaded = adapter.load()

        assert loaded["audio_source"] == "invidious"
        assert loaded["card_layout"] == DEFAULT_LAYOUT
        assert loaded["prevent_duplicate_artist"] is False
        assert loaded["auto_play"] is True
        assert loaded["fallback_clip_seconds"] == FALLBACK_CLIP_SECONDS
        assert loaded["invidious_instances"] == list(INVIDIOUS_INSTANCES)

    def test_save_and_load_round_trip(self, adapter):
        adapter.save({
            "audio_source": "spotify",
            "card_layout": "5x5",
            "prevent_duplicate_artist": True,
            "auto_play": False,
            "fallback_clip_seconds": 20,
            "invidious_instances": ["https://inv.test"],
        })

        loaded = adapter.load()

        assert loaded["audio_source"] == "spotify"
        assert loaded["card_layout"] == "5x5"
        assert loaded["prevent_duplicate_artist"] is True
        assert loaded["auto_play"] is False
        assert loaded["fallback_clip_seconds"] == 20
        assert loaded["invidious_instances"] == ["https://inv.test"]

    def test_unknown_audio_source_falls_back_to_invidious(self, config_path, adapter):
        with open(config_path, "w") as f:
            json.dump({"audio_source": "napster"}, f)

        assert adapter.load()["audio_source"] == "invidious"

    def test_loaded_defaults_are_not_shared_between_loads(self, adapter):
        adapter.load()["invidious_instances"].append("https://mutated.test")

        assert "https://mutated.test" not in adapter.load()["invidious_instances"]

    def test_config_file_is_written_to_disk(self, config_path, adapter):
        adapter.save({"spotify_client_id": "test"})

        assert os.path.exists(config_path)
        with open(config_path, "r") as f:
            data = json.load(f)
        assert data["spotify_client_id"] == "test"
