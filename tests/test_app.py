from __future__ import annotations

import json
from pathlib import Path

import pytest

import app
from webformfiller.models import FieldEntry, normalize_fields


def test_normalize_fields_keeps_order_and_shapes() -> None:
    entries = normalize_fields({"b": "2", "a": {"value": 1, "type": "range", "metadata": {"unit": "%"}}, "c": None})

    assert list(entries) == ["b", "a", "c"]
    assert entries["b"] == FieldEntry(value="2")
    assert entries["a"].value == "1"
    assert entries["a"].to_payload() == {"value": "1", "type": "range", "metadata": {"unit": "%"}}
    assert entries["b"].to_payload() == "2"
    assert entries["c"].value == ""


def test_cli_fill_writes_filled_page(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("GOOGLE_API_KEY", raising=False)
    page = tmp_path / "page.html"
    page.write_text('<form><input name="city"><input type="checkbox" name="agree"></form>', encoding="utf-8")
    data = tmp_path / "fields.json"
    data.write_text(json.dumps({"formName": "demo", "fields": {"city": "Oslo", "agree": "yes"}}), encoding="utf-8")
    out = tmp_path / "out.html"

    code = app.main(["fill", str(page), "--data", str(data), "--out", str(out)])

    rendered = out.read_text(encoding="utf-8")
    assert code == 0
    assert 'value="Oslo"' in rendered
    assert "checked" in rendered


def test_cli_save_then_fill_latest(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("GOOGLE_API_KEY", raising=False)
    monkeypatch.setattr("webformfiller.storage.KDF_ITERATIONS", 1000)
    store_dir = tmp_path / "store"
    data = tmp_path / "fields.json"
    data.write_text(json.dumps({"city": "Rome"}), encoding="utf-8")
    page = tmp_path / "page.html"
    page.write_text('<input id="city">', encoding="utf-8")
    out = tmp_path / "out.html"

    common = ["--storage-dir", str(store_dir), "--password", "pw"]
    assert app.main(common + ["save", str(data), "--name", "trip"]) == 0
    assert app.main(common + ["fill", str(page), "--latest", "--out", str(out)]) == 0
    assert 'value="Rome"' in out.read_text(encoding="utf-8")
    assert app.main(["--storage-dir", str(store_dir), "--password", "wrong", "list"]) == 2
