"""JSON file-based persistence for generated cards."""

import json
import os
from datetime import datetime
from typing import Iterable

from src.config import CARDS_FILE, data_path
from src.domain.model import BingoCard
from src.domain.ports import CardStorePort


class JsonCardStoreAdapter(CardStorePort):

    def __init__(self, path: str | None = None):
        self.path = path or data_path(CARDS_FILE)

    def save_all(self, cards: list[BingoCard]) -> None:
        data = {"cards": [card.to_dict() for card in cards]}
        temp_path = f"{self.path}.tmp"
        with open(temp_path, "w", encoding="utf-8") as f:
            json.dump(data, f, ensure_ascii=False, indent=2)
        os.replace(temp_path, self.path)

    def load_all(self) -> list[BingoCard]:
        if not os.path.exists(self.path):
            return []
        with open(self.path, "r", encoding="utf-8") as f:
            data = json.load(f)
        return [BingoCard.from_dict(item) for item in data.get("cards", [])]

    def clear(self) -> None:
        if os.path.exists(self.path):
            os.remove(self.path)

    def exists(self) -> bool:
        return os.path.exists(self.path)

    @staticmethod
    def export_game(cards: list[BingoCard], drawn_ids: Iterable[str], path: str) -> str:
        """Write cards and the called-song history to a standalone JSON file."""
        data = {
            "cards": [card.to_dict() for card in cards],
            "history": [
                {"order": order, "song_id": song_id}
                for order, song_id in enumerate(drawn_ids, start=1)
            ],
            "exported_at": datetime.now().isoformat(),
        }
        with open(path, "w", encoding="utf-8") as f:
            json.dump(data, f, ensure_ascii=False, indent=2)
        return path
