"""Choose a matching strategy and write matched values into the page."""

from __future__ import annotations

import logging
import os
from typing import Dict, Mapping, Optional, Sequence

from services.field_detector import FieldDetector
from services.form_document import FormDocument
from services.html_filler import HTMLFiller
from webformfiller.matching import FieldMatcher, RuleMatcher
from webformfiller.models import (
    ControlDescriptor,
    FieldEntry,
    FieldMapping,
    FillOutcome,
    RawFields,
    normalize_fields,
)

logger = logging.getLogger(__name__)
if not logger.handlers:
    level_name = os.getenv("WEBFORMFILLER_LOG", "INFO").upper()
    level = getattr(logging, level_name, logging.INFO)
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter("[%(levelname)s] %(name)s: %(message)s"))
    logger.setLevel(level)
    logger.addHandler(handler)


class FillOrchestrator:
    """Run one fill pass: semantic matching when configured, rule matching otherwise.

    Exactly one strategy's mapping is applied per call. A semantic mapping
    that fills nothing counts as a failure and falls through to the rules.
    """

    def __init__(
        self,
        semantic_matcher: Optional[FieldMatcher] = None,
        rule_matcher: Optional[FieldMatcher] = None,
        detector: Optional[FieldDetector] = None,
    ) -> None:
        self.semantic_matcher = semantic_matcher
        self.rule_matcher = rule_matcher or RuleMatcher()
        self.detector = detector or FieldDetector()

    def fill(self, document: FormDocument, fields: RawFields) -> FillOutcome:
        # Overlapping fills on one document are serialized rather than interleaved.
        with document.lock:
            controls = self.detector.extract_controls(document)
            entries = normalize_fields(fields)
            logger.info("Filling %d control(s) from %d field(s)", len(controls), len(entries))

            if self.semantic_matcher is not None and self.semantic_matcher.is_configured:
                try:
                    mapping = self.semantic_matcher.match(controls, entries)
                except Exception as exc:
                    logger.error("Semantic matching failed, falling back to rule-based matching: %s", exc)
                    mapping = None

                if mapping is not None:
                    filled = self.apply(document, mapping, controls, entries)
                    if filled > 0:
                        logger.info("Semantic matching filled %d field(s)", filled)
                        return FillOutcome(filled_count=filled, strategy=self.semantic_matcher.name)
                    logger.info("Semantic mapping matched no controls; using rule-based matching")

            logger.info("Using rule-based field matching")
            mapping = self.rule_matcher.match(controls, entries) or {}
            filled = self.apply(document, mapping, controls, entries)
            logger.info("Rule-based matching filled %d field(s)", filled)
            return FillOutcome(filled_count=filled, strategy=self.rule_matcher.name)

    def apply(
        self,
        document: FormDocument,
        mapping: FieldMapping,
        controls: Sequence[ControlDescriptor],
        entries: Mapping[str, FieldEntry],
    ) -> int:
        """Write every resolvable mapping entry; return how many were applied."""

        by_key: Dict[str, ControlDescriptor] = {}
        for control in controls:
            by_key.setdefault(control.key, control)

        filler = HTMLFiller(document)
        filled = 0
        for control_key, field_name in mapping.items():
            control = by_key.get(control_key)
            if control is None or control.element is None:
                logger.debug("Dropping mapping for unknown control '%s'", control_key)
                continue
            entry = entries.get(field_name)
            if entry is None:
                logger.debug("Dropping mapping to unknown field '%s'", field_name)
                continue
            filler.fill(control.element, entry.value, control.kind)
            filled += 1
        return filled


__all__ = ["FillOrchestrator"]
