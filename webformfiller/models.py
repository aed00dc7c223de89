"""Data models for webformfiller."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Union

from bs4 import Tag


class ControlKind(str, Enum):
    """Enumeration of the form control kinds the filler knows how to coerce."""

    TEXT = "text"
    SELECT = "select"
    MULTISELECT = "multiselect"
    CHECKBOX = "checkbox"
    RADIO = "radio"
    RANGE = "range"
    DATE = "date"
    DATETIME = "datetime"
    RATING = "rating"
    TEXTAREA = "textarea"


@dataclass(frozen=True)
class ControlDescriptor:
    """Normalized, serializable summary of a live form control."""

    kind: ControlKind
    name: str
    id: str
    placeholder: str
    label: str
    options: Optional[List[str]] = None
    index: int = 0
    key: str = ""
    element: Optional[Tag] = field(default=None, compare=False, repr=False)

    def __post_init__(self) -> None:
        # Identity used by field mappings; synthetic when the control has no id.
        if not self.key:
            object.__setattr__(self, "key", self.id or f"control-{self.index}")

    def to_payload(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "kind": self.kind.value,
            "name": self.name,
            "id": self.key,
            "placeholder": self.placeholder,
            "label": self.label,
        }
        if self.options is not None:
            payload["options"] = list(self.options)
        return payload


@dataclass(frozen=True)
class FieldEntry:
    """A named value supplied by the caller.

    ``type``, ``options`` and ``metadata`` are hints from upstream producers;
    coercion is driven by the control kind and ``value`` alone.
    """

    value: str
    type: Optional[str] = None
    options: Optional[List[str]] = None
    metadata: Optional[Dict[str, Any]] = None
    structured: bool = field(default=False, compare=False, repr=False)

    @classmethod
    def from_raw(cls, raw: Union[str, Mapping[str, Any], "FieldEntry", None]) -> "FieldEntry":
        if isinstance(raw, FieldEntry):
            return raw
        if isinstance(raw, Mapping):
            value = raw.get("value")
            options = raw.get("options")
            metadata = raw.get("metadata")
            return cls(
                value="" if value is None else str(value),
                type=raw.get("type"),
                options=[str(option) for option in options] if options else None,
                metadata=dict(metadata) if metadata else None,
                structured=True,
            )
        return cls(value="" if raw is None else str(raw))

    def to_payload(self) -> Union[str, Dict[str, Any]]:
        if not self.structured:
            return self.value
        payload: Dict[str, Any] = {"value": self.value}
        if self.type:
            payload["type"] = self.type
        if self.options:
            payload["options"] = list(self.options)
        if self.metadata:
            payload["metadata"] = dict(self.metadata)
        return payload


RawFields = Mapping[str, Union[str, Mapping[str, Any], FieldEntry]]
FieldMapping = Dict[str, str]


def normalize_fields(fields: RawFields) -> Dict[str, FieldEntry]:
    """Coerce caller-supplied field data into ``FieldEntry`` objects, keeping order."""

    return {str(name): FieldEntry.from_raw(raw) for name, raw in fields.items()}


@dataclass(frozen=True)
class FillOutcome:
    """Result of one fill invocation."""

    filled_count: int = 0
    strategy: str = "rule"


__all__ = [
    "ControlKind",
    "ControlDescriptor",
    "FieldEntry",
    "FieldMapping",
    "FillOutcome",
    "RawFields",
    "normalize_fields",
]
