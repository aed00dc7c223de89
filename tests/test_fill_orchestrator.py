from __future__ import annotations

import threading
import time
from typing import Optional

from services.fill_orchestrator import FillOrchestrator
from services.form_document import FormDocument, control_value
from webformfiller.matching import FieldMatcher, RuleMatcher
from webformfiller.models import FillOutcome

FORM = """
<form>
  <input id="first_name" name="first_name">
  <input id="last_name" name="last_name">
  <label for="mail">Contact</label><input id="mail" name="m">
</form>
"""
FIELDS = {"first_name": "Ada", "last_name": "Lovelace", "email": {"value": "ada@example.com", "type": "text"}}


class StubMatcher(FieldMatcher):
    name = "semantic"

    def __init__(self, mapping: Optional[dict], configured: bool = True, error: Optional[Exception] = None) -> None:
        self.mapping = mapping
        self.configured = configured
        self.error = error
        self.calls = 0

    @property
    def is_configured(self) -> bool:
        return self.configured

    def match(self, controls, fields):
        self.calls += 1
        if self.error is not None:
            raise self.error
        return self.mapping


def _values(document: FormDocument) -> dict:
    return {key: control_value(document.get_element_by_id(key)) for key in ("first_name", "last_name", "mail")}


def test_semantic_mapping_is_applied_when_it_fills_something(scheduler) -> None:
    document = FormDocument(FORM, scheduler=scheduler)
    semantic = StubMatcher({"mail": "email", "first_name": "first_name"})

    outcome = FillOrchestrator(semantic_matcher=semantic).fill(document, FIELDS)

    assert outcome == FillOutcome(filled_count=2, strategy="semantic")
    assert _values(document) == {"first_name": "Ada", "last_name": "", "mail": "ada@example.com"}


def test_unconfigured_semantic_matcher_is_skipped(scheduler) -> None:
    document = FormDocument(FORM, scheduler=scheduler)
    semantic = StubMatcher({"mail": "email"}, configured=False)

    outcome = FillOrchestrator(semantic_matcher=semantic).fill(document, FIELDS)

    assert semantic.calls == 0
    assert outcome == FillOutcome(filled_count=2, strategy="rule")
    assert _values(document) == {"first_name": "Ada", "last_name": "Lovelace", "mail": ""}


def test_zero_match_semantic_result_equals_unavailable(scheduler) -> None:
    outcomes = []
    values = []
    for semantic in (
        StubMatcher({"missing": "first_name", "mail": "no_such_field"}),
        StubMatcher(None),
        StubMatcher({}),
        StubMatcher(None, error=RuntimeError("boom")),
        None,
    ):
        document = FormDocument(FORM, scheduler=scheduler)
        outcomes.append(FillOrchestrator(semantic_matcher=semantic).fill(document, FIELDS))
        values.append(_values(document))

    assert all(outcome == FillOutcome(filled_count=2, strategy="rule") for outcome in outcomes)
    assert all(value == values[0] for value in values)


def test_unresolvable_entries_are_dropped_individually(scheduler) -> None:
    document = FormDocument(FORM, scheduler=scheduler)
    semantic = StubMatcher({"ghost": "first_name", "last_name": "last_name", "mail": "ghost_field"})

    outcome = FillOrchestrator(semantic_matcher=semantic).fill(document, FIELDS)

    assert outcome == FillOutcome(filled_count=1, strategy="semantic")
    assert _values(document)["last_name"] == "Lovelace"


def test_rule_result_of_zero_is_a_valid_outcome(scheduler) -> None:
    document = FormDocument(FORM, scheduler=scheduler)

    outcome = FillOrchestrator().fill(document, {"nothing": "here"})

    assert outcome == FillOutcome(filled_count=0, strategy="rule")


def test_uncoercible_value_does_not_stop_other_controls(scheduler) -> None:
    document = FormDocument(
        '<input type="range" id="level" name="level"><input id="city" name="city">',
        scheduler=scheduler,
    )

    outcome = FillOrchestrator(rule_matcher=RuleMatcher()).fill(document, {"level": "high", "city": "Paris"})

    assert outcome.filled_count == 2
    assert control_value(document.get_element_by_id("level")) == ""
    assert control_value(document.get_element_by_id("city")) == "Paris"


def test_id_less_control_is_not_shadowed_by_lookalike_id(scheduler) -> None:
    document = FormDocument('<input id="control-1" name="city"><input name="zip">', scheduler=scheduler)

    outcome = FillOrchestrator().fill(document, {"city": "Paris", "zip": "75001"})

    city, zip_code = document.controls()
    assert outcome == FillOutcome(filled_count=2, strategy="rule")
    assert control_value(city) == "Paris"
    assert control_value(zip_code) == "75001"


class BlockingMatcher(StubMatcher):
    def __init__(self, mapping: dict) -> None:
        super().__init__(mapping)
        self.entered = threading.Event()
        self.release = threading.Event()

    def match(self, controls, fields):
        self.entered.set()
        self.release.wait(timeout=5)
        return super().match(controls, fields)


def test_overlapping_fills_on_one_document_are_serialized(scheduler) -> None:
    document = FormDocument(FORM, scheduler=scheduler)
    semantic = BlockingMatcher({"first_name": "first_name"})
    outcomes = {}

    first = threading.Thread(
        target=lambda: outcomes.update(first=FillOrchestrator(semantic_matcher=semantic).fill(document, FIELDS))
    )
    second = threading.Thread(
        target=lambda: outcomes.update(second=FillOrchestrator().fill(document, {"first_name": "Grace"}))
    )
    first.start()
    assert semantic.entered.wait(timeout=5)
    second.start()
    time.sleep(0.1)

    assert _values(document) == {"first_name": "", "last_name": "", "mail": ""}
    assert "second" not in outcomes

    semantic.release.set()
    first.join(timeout=5)
    second.join(timeout=5)

    assert outcomes["first"] == FillOutcome(filled_count=1, strategy="semantic")
    assert outcomes["second"] == FillOutcome(filled_count=1, strategy="rule")
    assert _values(document)["first_name"] == "Grace"
