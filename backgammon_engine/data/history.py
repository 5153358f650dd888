"""
Bounded position history.

Keeps the most recent analysed positions, newest first, de-duplicated by
position id: re-adding a known position moves it to the front and replaces
the stored entry. Entries serialize to plain JSON so any key-value store
can hold them; save()/load() use a JSON file.
"""

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Union

from backgammon_engine.board.position import BoardPosition
from backgammon_engine.evaluation.base import PositionAnalysis

logger = logging.getLogger(__name__)

DEFAULT_MAX_ITEMS = 100


@dataclass(frozen=True)
class HistoryItem:
    """A position with its optional analysis and source image reference."""

    position: BoardPosition
    analysis: Optional[PositionAnalysis] = None
    image_ref: Optional[str] = None

    @property
    def id(self) -> str:
        return self.position.id

    def to_dict(self) -> Dict[str, Any]:
        data = self.position.to_dict()
        data["analysis"] = self.analysis.to_dict() if self.analysis is not None else None
        data["imageUri"] = self.image_ref
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "HistoryItem":
        analysis = data.get("analysis")
        return cls(
            position=BoardPosition.from_dict(data),
            analysis=PositionAnalysis.from_dict(analysis) if analysis else None,
            image_ref=data.get("imageUri"),
        )


class PositionHistory:
    """Most-recent-first list of HistoryItem, bounded and de-duplicated."""

    def __init__(self, max_items: int = DEFAULT_MAX_ITEMS):
        """
        Initialize position history.

        Args:
            max_items: Maximum number of entries kept

        Raises:
            ValueError: If max_items is not positive
        """
        if max_items <= 0:
            raise ValueError(f"max_items must be positive, got {max_items}")

        self.max_items = max_items
        self._items: List[HistoryItem] = []

    def add(self, item: HistoryItem) -> None:
        """Insert at the front, dropping any older entry with the same id and the oldest overflow."""
        self._items = [item] + [h for h in self._items if h.id != item.id]
        del self._items[self.max_items:]

    def remove(self, position_id: str) -> bool:
        """Remove an entry; returns True if something was removed."""
        before = len(self._items)
        self._items = [h for h in self._items if h.id != position_id]
        return len(self._items) != before

    def clear(self) -> None:
        self._items = []

    def get(self, position_id: str) -> Optional[HistoryItem]:
        for item in self._items:
            if item.id == position_id:
                return item
        return None

    def items(self) -> List[HistoryItem]:
        return list(self._items)

    def __iter__(self) -> Iterator[HistoryItem]:
        return iter(list(self._items))

    def __len__(self) -> int:
        return len(self._items)

    def to_list(self) -> List[Dict[str, Any]]:
        return [item.to_dict() for item in self._items]

    def save(self, path: Union[str, Path]) -> None:
        """Write the history to a JSON file (parent directories are created)."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(self.to_list(), indent=2))
        logger.info(f"Saved {len(self._items)} history items to {path}")

    @classmethod
    def load(cls, path: Union[str, Path], max_items: int = DEFAULT_MAX_ITEMS) -> "PositionHistory":
        """
        Read a history written by save().

        A missing file gives an empty history.

        Raises:
            ValueError: If the file is not a valid history
        """
        path = Path(path)
        history = cls(max_items=max_items)
        if not path.exists():
            return history

        try:
            raw = json.loads(path.read_text())
            items = [HistoryItem.from_dict(entry) for entry in raw]
        except (json.JSONDecodeError, KeyError, TypeError) as e:
            raise ValueError(f"Invalid history file {path}: {e}") from e

        # oldest first so add() keeps the newest entry for a repeated id
        for item in reversed(items):
            history.add(item)
        logger.info(f"Loaded {len(history)} history items from {path}")
        return history
