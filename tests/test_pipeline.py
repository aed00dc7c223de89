from __future__ import annotations

import threading
import time
from pathlib import Path

import pytest

from models.form_data import FormData
from services.fill_orchestrator import FillOrchestrator
from services.form_document import FormDocument, control_value
from services.notifications import show_notification
from services.pipeline import NO_DATA_MESSAGE, FormFillPipeline, outcome_message
from webformfiller import storage as storage_module
from webformfiller.models import FillOutcome
from webformfiller.storage import SecureStorage

PAGE = '<html><body><form><input id="city" name="city" style="color: black"></form></body></html>'


def _toasts(document: FormDocument) -> list:
    return [div.get_text() for div in document.soup.find_all("div", class_="webformfiller-notification")]


def test_outcome_message_wording() -> None:
    assert outcome_message(FillOutcome(3, "semantic")) == "AI assistant filled 3 form fields"
    assert outcome_message(FillOutcome(0, "rule")) == "Filled 0 form fields"


def test_fill_document_shows_toast_that_fades_away(scheduler) -> None:
    document = FormDocument(PAGE, scheduler=scheduler)
    pipeline = FormFillPipeline(orchestrator=FillOrchestrator())

    outcome = pipeline.fill_document(document, {"city": "Paris"})

    assert outcome.filled_count == 1
    assert _toasts(document) == ["Filled 1 form fields"]

    scheduler.run_all()
    assert _toasts(document) == []


def test_fill_with_latest_uses_last_saved_set(tmp_path: Path, monkeypatch: pytest.MonkeyPatch, scheduler) -> None:
    monkeypatch.setattr(storage_module, "KDF_ITERATIONS", 1000)
    store = SecureStorage(tmp_path)
    store.add_form_data(FormData(fields={"city": "Lyon"}), "pw")
    store.add_form_data(FormData(fields={"city": "Paris"}), "pw")
    document = FormDocument(PAGE, scheduler=scheduler)

    outcome = FormFillPipeline(orchestrator=FillOrchestrator(), storage=store).fill_with_latest(document, "pw")

    assert outcome == FillOutcome(1, "rule")
    assert control_value(document.get_element_by_id("city")) == "Paris"


def test_fill_with_latest_without_data(tmp_path: Path, scheduler) -> None:
    document = FormDocument(PAGE, scheduler=scheduler)
    pipeline = FormFillPipeline(orchestrator=FillOrchestrator(), storage=SecureStorage(tmp_path))

    assert pipeline.fill_with_latest(document, "pw") is None
    assert _toasts(document) == [NO_DATA_MESSAGE]


def test_fill_html_renders_settled_markup() -> None:
    html, outcome = FormFillPipeline(orchestrator=FillOrchestrator()).fill_html(PAGE, {"city": "Paris"})

    assert outcome.filled_count == 1
    assert 'value="Paris"' in html
    assert "#e6f7ff" not in html
    assert "webformfiller-notification" not in html
    assert 'style="color: black"' in html


def test_toast_waits_for_a_fill_in_progress(scheduler) -> None:
    document = FormDocument(PAGE, scheduler=scheduler)
    toaster = threading.Thread(target=show_notification, args=(document, "Filled 1 form fields"))

    with document.lock:
        toaster.start()
        time.sleep(0.1)
        assert _toasts(document) == []

    toaster.join(timeout=5)
    assert _toasts(document) == ["Filled 1 form fields"]
