from __future__ import annotations

import logging

import pytest

from sheet_differ import llm_analyser
from sheet_differ.differ import ChangeRecord, ChangeType
from sheet_differ.summariser import summarise

RECORDS = [
    ChangeRecord(sheet="S", address="B2", row=1, col=1, old_val=10, new_val=12, type=ChangeType.MODIFIED),
]


def test_unknown_provider() -> None:
    with pytest.raises(ValueError, match="Unknown LLM provider 'bard'"):
        llm_analyser.analyse_with_llm(RECORDS, provider="bard")


def test_no_records_skips_the_llm() -> None:
    assert llm_analyser.analyse_with_llm([], provider="openai") == summarise([])


def test_successful_call_gets_header(monkeypatch: pytest.MonkeyPatch) -> None:
    seen = {}

    def fake(records, model):
        seen["model"] = model
        seen["message"] = llm_analyser._build_user_message(records)
        return "narrated"

    monkeypatch.setitem(llm_analyser._PROVIDERS["openai"], "fn", fake)
    result = llm_analyser.analyse_with_llm(RECORDS, provider="openai", model="m-1")

    assert result.startswith("[LLM-enhanced analysis via openai / m-1]")
    assert result.endswith("narrated")
    assert seen["model"] == "m-1"
    assert '"address": "B2"' in seen["message"]


def test_failure_falls_back_to_mechanical_summary(
    monkeypatch: pytest.MonkeyPatch, caplog: pytest.LogCaptureFixture
) -> None:
    monkeypatch.delenv("ANTHROPIC_API_KEY", raising=False)
    with caplog.at_level(logging.WARNING, logger="sheet_differ.llm_analyser"):
        result = llm_analyser.analyse_with_llm(RECORDS, provider="anthropic")

    assert result == summarise(RECORDS)
    assert "falling back" in caplog.text


def test_missing_api_key_is_reported(monkeypatch: pytest.MonkeyPatch) -> None:
    pytest.importorskip("openai")
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    with pytest.raises(RuntimeError, match="OPENAI_API_KEY is not set"):
        llm_analyser._client("openai", "OPENAI_API_KEY")
