"""Field-to-control matching strategies."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Mapping, Optional, Sequence

from .models import ControlDescriptor, FieldEntry, FieldMapping

logger = logging.getLogger(__name__)


class FieldMatcher(ABC):
    """A strategy that decides which control receives which field.

    ``match`` returns ``None`` when the strategy is unavailable; callers treat
    that as a signal to fall back, never as an error.
    """

    name = "matcher"

    @property
    def is_configured(self) -> bool:
        return True

    @abstractmethod
    def match(
        self,
        controls: Sequence[ControlDescriptor],
        fields: Mapping[str, FieldEntry],
    ) -> Optional[FieldMapping]:
        raise NotImplementedError


class RuleMatcher(FieldMatcher):
    """Deterministic first-fit substring matching.

    Controls are visited in document order and fields in insertion order; the
    first field whose lowercase name occurs in the control's name, id, label or
    placeholder wins.
    """

    name = "rule"

    def match(
        self,
        controls: Sequence[ControlDescriptor],
        fields: Mapping[str, FieldEntry],
    ) -> FieldMapping:
        mapping: FieldMapping = {}
        for control in controls:
            haystacks = (
                control.name.lower(),
                control.id.lower(),
                control.label.lower(),
                control.placeholder.lower(),
            )
            for field_name in fields:
                needle = field_name.lower()
                if any(needle in haystack for haystack in haystacks):
                    mapping[control.key] = field_name
                    break
        logger.debug("Rule matcher mapped %d of %d controls", len(mapping), len(controls))
        return mapping


__all__ = ["FieldMatcher", "RuleMatcher"]
