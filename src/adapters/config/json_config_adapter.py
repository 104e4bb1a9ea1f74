"""JSON file-based config adapter."""

import json
import os
from typing import Optional, Protocol

from src.adapters.config.secret_store import SECRET_FIELDS, KeychainCredentialStore
from src.config import DEFAULT_LAYOUT, FALLBACK_CLIP_SECONDS, INVIDIOUS_INSTANCES, data_path
from src.domain.ports import ConfigPort

AUDIO_SOURCES = ("invidious", "spotify")

_DEFAULTS = {
    "spotify_client_id": "",
    "spotify_client_secret": "",
    "audio_source": "invidious",
    "card_layout": DEFAULT_LAYOUT,
    "prevent_duplicate_artist": False,
    "auto_play": True,
    "fallback_clip_seconds": FALLBACK_CLIP_SECONDS,
    "invidious_instances": list(INVIDIOUS_INSTANCES),
}


class SecretStoreProtocol(Protocol):
    def get(self, key: str) -> Optional[str]:
        ...

    def set(self, key: str, value: str) -> bool:
        ...

    def forget_all(self) -> list[str]:
        ...


class JsonConfigAdapter(ConfigPort):

    def __init__(self, path: str | None = None, secret_store: SecretStoreProtocol | None = None):
        self.path = path or data_path("config.json")
        self.secret_store = secret_store or KeychainCredentialStore()

    def load(self) -> dict:
        cfg = dict(_DEFAULTS)
        cfg["invidious_instances"] = list(INVIDIOUS_INSTANCES)
        if os.path.exists(self.path):
            with open(self.path, "r", encoding="utf-8") as f:
                cfg.update(json.load(f))

        for field in SECRET_FIELDS:
            secret = self.secret_store.get(field)
            if secret:
                cfg[field] = secret

        if cfg.get("audio_source") not in AUDIO_SOURCES:
            cfg["audio_source"] = _DEFAULTS["audio_source"]
        return cfg

    def save(self, cfg: dict) -> None:
        persisted_cfg = dict(cfg)
        for field in SECRET_FIELDS:
            value = str(cfg.get(field, "") or "")
            stored = self.secret_store.set(field, value)
            # Keep plaintext only if the keychain backend is unavailable.
            persisted_cfg[field] = "" if stored else value

        with open(self.path, "w", encoding="utf-8") as f:
            json.dump(persisted_cfg, f, indent=2)

    def is_configured(self) -> bool:
        """Spotify credentials are only needed for the Spotify provider."""
        cfg = self.load()
        if cfg.get("audio_source") == "spotify":
            return bool(cfg.get("spotify_client_id") and cfg.get("spotify_client_secret"))
        return bool(cfg.get("invidious_instances"))

    def forget_secrets(self) -> list[str]:
        """Erase stored secrets from the keychain and from config.json."""
        removed = self.secret_store.forget_all()
        if os.path.exists(self.path):
            with open(self.path, "r", encoding="utf-8") as f:
                persisted_cfg = json.load(f)
            for field in SECRET_FIELDS:
                persisted_cfg[field] = ""
            with open(self.path, "w", encoding="utf-8") as f:
                json.dump(persisted_cfg, f, indent=2)
        return removed
