from __future__ import annotations

import json
from typing import Any


def serialize_record(tags: frozenset[str], payload: dict[str, Any]) -> str:
    envelope = {"tags": sorted(tags), "data": payload}
    return json.dumps(envelope)


def deserialize_record(raw: str | bytes) -> tuple[frozenset[str], dict[str, Any]]:
    data = json.loads(raw)
    return frozenset(data["tags"]), data["data"]
