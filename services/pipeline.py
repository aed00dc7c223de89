"""High-level entry points used by triggers (hotkey, command line)."""

from __future__ import annotations

import logging
from typing import Optional, Tuple

from models.form_data import FormData
from services.fill_orchestrator import FillOrchestrator
from services.form_document import FormDocument, ImmediateScheduler
from services.notifications import show_notification
from webformfiller.llm import GeminiFieldMatcher
from webformfiller.models import FillOutcome, RawFields
from webformfiller.storage import SecureStorage

logger = logging.getLogger(__name__)

NO_DATA_MESSAGE = "No form data available"


def outcome_message(outcome: FillOutcome) -> str:
    if outcome.strategy == "semantic":
        return f"AI assistant filled {outcome.filled_count} form fields"
    return f"Filled {outcome.filled_count} form fields"


class FormFillPipeline:
    """Coordinate field data → matching → coercion → user notification."""

    def __init__(
        self,
        orchestrator: Optional[FillOrchestrator] = None,
        storage: Optional[SecureStorage] = None,
    ) -> None:
        self._orchestrator = orchestrator or FillOrchestrator(semantic_matcher=GeminiFieldMatcher())
        self._storage = storage

    def fill_document(self, document: FormDocument, fields: RawFields) -> FillOutcome:
        """Fill ``document`` from ``fields`` and show a toast with the result."""

        outcome = self._orchestrator.fill(document, fields)
        show_notification(document, outcome_message(outcome))
        return outcome

    def fill_form_data(self, document: FormDocument, form_data: FormData) -> FillOutcome:
        logger.info("Filling from saved field set '%s'", form_data.form_name or form_data.id)
        return self.fill_document(document, form_data.fields)

    def fill_with_latest(self, document: FormDocument, password: str) -> Optional[FillOutcome]:
        """Fill from the most recently saved field set, as the hotkey does."""

        if self._storage is None:
            self._storage = SecureStorage()
        latest = self._storage.latest_form_data(password)
        if latest is None:
            show_notification(document, NO_DATA_MESSAGE)
            return None
        return self.fill_form_data(document, latest)

    def fill_html(self, html: str, fields: RawFields) -> Tuple[str, FillOutcome]:
        """Fill an HTML string and return the rendered result.

        Transient highlight and toast effects are settled immediately so the
        returned markup only carries the filled values.
        """

        document = FormDocument(html, scheduler=ImmediateScheduler())
        outcome = self.fill_document(document, fields)
        return document.render(), outcome


__all__ = ["FormFillPipeline", "NO_DATA_MESSAGE", "outcome_message"]
