"""Spotify credentials kept in the OS keychain instead of config.json."""

import logging
from typing import Optional

import keyring
from keyring.backends import fail
from keyring.errors import KeyringError, PasswordDeleteError

KEYCHAIN_SERVICE = "bingo-musical"
SECRET_FIELDS = ("spotify_client_secret",)

logger = logging.getLogger("bingo_musical.config.secrets")


class KeychainCredentialStore:
    """Keychain entries for the config fields listed in ``SECRET_FIELDS``.

    Headless machines often have no keychain backend at all; the store then
    reports itself unavailable and the config adapter keeps the value in
    config.json.
    """

    def __init__(self, service: str = KEYCHAIN_SERVICE):
        self.service = service
        self._available: Optional[bool] = None

    def is_available(self) -> bool:
        if self._available is None:
            self._available = not isinstance(keyring.get_keyring(), fail.Keyring)
            if not self._available:
                logger.warning("No OS keychain backend, Spotify secret stays in config.json")
        return self._available

    def get(self, field: str) -> Optional[str]:
        _check_field(field)
        if not self.is_available():
            return None
        try:
            return keyring.get_password(self.service, field)
        except KeyringError as exc:
            logger.warning("Could not read %s from the keychain: %s", field, exc)
            return None

    def set(self, field: str, value: str) -> bool:
        """Store ``value``; an empty value removes the entry. False means not stored."""
        _check_field(field)
        if not value:
            return self.forget(field)
        if not self.is_available():
            return False
        try:
            keyring.set_password(self.service, field, value)
        except KeyringError as exc:
            logger.warning("Could not write %s to the keychain: %s", field, exc)
            return False
        logger.info("Saved %s to the keychain", field)
        return True

    def forget(self, field: str) -> bool:
        """Remove ``field``. True when the keychain no longer holds it."""
        _check_field(field)
        if not self.is_available():
            return False
        try:
            keyring.delete_password(self.service, field)
        except PasswordDeleteError:
            return True
        except KeyringError as exc:
            logger.warning("Could not remove %s from the keychain: %s", field, exc)
            return False
        logger.info("Removed %s from the keychain", field)
        return True

    def forget_all(self) -> list[str]:
        """Remove every app secret; returns the fields that are gone."""
        return [field for field in SECRET_FIELDS if self.forget(field)]


def _check_field(field: str) -> None:
    if field not in SECRET_FIELDS:
        raise ValueError(f"{field} is not stored in the keychain")
