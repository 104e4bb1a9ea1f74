"""Flet settings form: audio providers, Spotify credentials and game defaults."""

import webbrowser
from typing import Callable, Optional

import flet as ft

from src.adapters.config.json_config_adapter import AUDIO_SOURCES
from src.config import LAYOUTS
from src.domain.ports import ConfigPort
from src.ui.theme import ACCENT, BG, BG_CARD, BG_INPUT, BORDER, DANGER, FG, FG_DIM, FG_LINK, SUCCESS

SOURCE_LABELS = {
    "invidious": "YouTube via Invidious (full songs, no account)",
    "spotify": "Spotify previews (30 s, needs a developer app)",
}


class SettingsView(ft.Column):
    """Edits config.json; secrets go to the OS keychain through the config adapter."""

    def __init__(
        self,
        page: ft.Page,
        config: ConfigPort,
        on_saved: Optional[Callable[[dict], None]] = None,
    ):
        super().__init__(expand=True, scroll=ft.ScrollMode.AUTO, spacing=12)
        self._page = page
        self.config = config
        self.on_saved = on_saved
        self.cfg = config.load()

        self.client_id = self._field("Client ID", self.cfg.get("spotify_client_id", ""))
        self.client_secret = self._field(
            "Client Secret",
            self.cfg.get("spotify_client_secret", ""),
            password=True,
            can_reveal_password=True,
        )
        self.source_group = ft.RadioGroup(
            value=self.cfg.get("audio_source", "invidious"),
            content=ft.Column(
                [ft.Radio(value=key, label=SOURCE_LABELS.get(key, key)) for key in AUDIO_SOURCES]
            ),
        )
        self.instances = self._field(
            "Invidious instances (one per line)",
            "\n".join(self.cfg.get("invidious_instances") or []),
            multiline=True,
            min_lines=3,
            max_lines=8,
        )
        self.layout_group = ft.RadioGroup(
            value=self.cfg.get("card_layout"),
            content=ft.Row([ft.Radio(value=key, label=key) for key in LAYOUTS]),
        )
        self.duplicate_switch = ft.Switch(
            label="Avoid repeated artists in a card row",
            value=bool(self.cfg.get("prevent_duplicate_artist")),
            active_color=ACCENT,
        )
        self.auto_play_switch = ft.Switch(
            label="Play each song as soon as it is drawn",
            value=bool(self.cfg.get("auto_play", True)),
            active_color=ACCENT,
        )
        self.clip_field = self._field("Clip length when a song has no cue window (seconds)",
                                      str(self.cfg.get("fallback_clip_seconds", "")), width=420)
        self.error_text = ft.Text("", color=DANGER, size=12)

        self._build_ui()

    @staticmethod
    def _field(label: str, value: str, **kwargs) -> ft.TextField:
        return ft.TextField(
            label=label,
            value=value,
            bgcolor=BG_INPUT,
            color=FG,
            border_color=BORDER,
            focused_border_color=ACCENT,
            label_style=ft.TextStyle(color=FG_DIM),
            cursor_color=FG,
            **kwargs,
        )

    @staticmethod
    def _card(title: str, controls: list[ft.Control]) -> ft.Container:
        return ft.Container(
            bgcolor=BG_CARD,
            border=ft.border.all(1, BORDER),
            border_radius=10,
            padding=14,
            content=ft.Column(
                [ft.Text(title, size=14, weight=ft.FontWeight.BOLD, color=FG), ft.Container(height=1, bgcolor=BORDER)]
                + controls,
                spacing=8,
            ),
        )

    def _build_ui(self):
        self.controls = [
            self._card("Audio source", [self.source_group, self.instances]),
            self._card(
                "Spotify",
                [
                    ft.Text("Used for playlist import and preview playback.", size=12, color=FG_DIM),
                    ft.TextButton(
                        "\U0001F517  Open Spotify Developer Dashboard",
                        on_click=lambda _: webbrowser.open("https://developer.spotify.com/dashboard"),
                        style=ft.ButtonStyle(color=FG_LINK),
                    ),
                    self.client_id,
                    self.client_secret,
                    ft.TextButton(
                        "Forget saved secret",
                        on_click=self._on_forget_secret,
                        style=ft.ButtonStyle(color=DANGER),
                    ),
                ],
            ),
            self._card(
                "Game",
                [
                    ft.Text("Default card layout", size=12, color=FG_DIM),
                    self.layout_group,
                    self.duplicate_switch,
                    self.auto_play_switch,
                    self.clip_field,
                ],
            ),
            self.error_text,
            ft.Row(
                [
                    ft.Container(expand=True),
                    ft.ElevatedButton(
                        "Save settings",
                        on_click=self._on_save,
                        bgcolor=ACCENT,
                        color=BG,
                        style=ft.ButtonStyle(shape=ft.RoundedRectangleBorder(radius=8)),
                    ),
                ]
            ),
        ]

    def _validate(self) -> Optional[str]:
        if self.source_group.value == "spotify" and not (
            (self.client_id.value or "").strip() and (self.client_secret.value or "").strip()
        ):
            return "Spotify playback needs both the Client ID and the Client Secret."
        if self.source_group.value == "invidious" and not self._instance_list():
            return "Add at least one Invidious instance."
        try:
            if float(self.clip_field.value or "0") <= 0:
                return "Clip length must be a positive number of seconds."
        except ValueError:
            return "Clip length must be a number."
        return None

    def _instance_list(self) -> list[str]:
        lines = (self.instances.value or "").splitlines()
        return [line.strip().rstrip("/") for line in lines if line.strip()]

    def _on_save(self, _):
        error = self._validate()
        if error:
            self.error_text.value = error
            self.error_text.color = DANGER
            self._page.update()
            return

        self.cfg.update(
            {
                "spotify_client_id": (self.client_id.value or "").strip(),
                "spotify_client_secret": (self.client_secret.value or "").strip(),
                "audio_source": self.source_group.value,
                "invidious_instances": self._instance_list(),
                "card_layout": self.layout_group.value,
                "prevent_duplicate_artist": bool(self.duplicate_switch.value),
                "auto_play": bool(self.auto_play_switch.value),
                "fallback_clip_seconds": float(self.clip_field.value),
            }
        )
        self.config.save(self.cfg)
        self.error_text.value = "Settings saved."
        self.error_text.color = SUCCESS
        self._page.update()
        if self.on_saved:
            self.on_saved(dict(self.cfg))

    def _on_forget_secret(self, _):
        self.config.forget_secrets()
        self.client_secret.value = ""
        self.cfg["spotify_client_secret"] = ""
        self.error_text.value = "Spotify secret removed from this computer."
        self.error_text.color = SUCCESS
        self._page.update()
        if self.on_saved:
            self.on_saved(dict(self.cfg))
