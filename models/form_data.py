"""Stored field sets used as the source of a fill."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Mapping, Union

FieldValue = Union[str, Dict[str, Any]]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class FormData:
    """Immutable snapshot of one named set of field values."""

    fields: Dict[str, FieldValue]
    form_name: str = ""
    source: str = ""
    id: str = field(default_factory=lambda: uuid.uuid4().hex)
    timestamp: datetime = field(default_factory=_utcnow)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "formName": self.form_name,
            "fields": dict(self.fields),
            "source": self.source,
            "timestamp": self.timestamp.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "FormData":
        timestamp = data.get("timestamp")
        parsed = datetime.fromisoformat(timestamp) if isinstance(timestamp, str) else _utcnow()
        return cls(
            fields=dict(data.get("fields") or {}),
            form_name=str(data.get("formName", "")),
            source=str(data.get("source", "")),
            id=str(data.get("id") or uuid.uuid4().hex),
            timestamp=parsed,
        )

    def non_empty_count(self) -> int:
        """Return the number of fields carrying a non-empty value."""

        count = 0
        for value in self.fields.values():
            raw = value.get("value") if isinstance(value, dict) else value
            if raw not in (None, ""):
                count += 1
        return count
