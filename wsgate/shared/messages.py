"""User-facing history items."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
import uuid


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _gen_id() -> str:
    return str(uuid.uuid4())[:8]


class MessageType(Enum):
    INFO = "info"
    ERROR = "error"


@dataclass
class HistoryItem:
    type: MessageType
    text: str
    # Stamped when the item is emitted, not when it is rendered.
    timestamp: datetime = field(default_factory=_utcnow)
    id: str = field(default_factory=_gen_id)


HistoryListener = Callable[[HistoryItem], None]


class MessageHistory:
    """Ordered record of messages shown to the user."""

    def __init__(self) -> None:
        self._items: list[HistoryItem] = []
        self._listeners: list[HistoryListener] = []

    def add_item(self, type: MessageType, text: str) -> HistoryItem:
        item = HistoryItem(type=type, text=text)
        self._items.append(item)
        for listener in list(self._listeners):
            listener(item)
        return item

    def info(self, text: str) -> HistoryItem:
        return self.add_item(MessageType.INFO, text)

    def error(self, text: str) -> HistoryItem:
        return self.add_item(MessageType.ERROR, text)

    @property
    def items(self) -> list[HistoryItem]:
        return list(self._items)

    def texts(self, type: MessageType | None = None) -> list[str]:
        return [i.text for i in self._items if type is None or i.type is type]

    def subscribe(self, listener: HistoryListener) -> None:
        self._listeners.append(listener)
