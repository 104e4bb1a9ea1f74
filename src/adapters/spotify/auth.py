"""Spotify client-credentials authentication using spotipy."""

import spotipy
from spotipy.oauth2 import SpotifyClientCredentials


def get_spotify_client(client_id: str, client_secret: str) -> spotipy.Spotify:
    """Catalog-only access: search, playlists and previews need no user login."""
    auth_manager = SpotifyClientCredentials(client_id=client_id, client_secret=client_secret)
    return spotipy.Spotify(auth_manager=auth_manager)
