from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass
class MemorySink:
    """Keeps emissions in a list; for tests and local inspection."""

    records: list[tuple[frozenset[str], dict[str, Any]]] = field(default_factory=list)

    def emit(self, tags: frozenset[str], payload: dict[str, Any]) -> None:
        self.records.append((tags, payload))

    @property
    def payloads(self) -> list[dict[str, Any]]:
        return [payload for _, payload in self.records]

    def clear(self) -> None:
        self.records.clear()
