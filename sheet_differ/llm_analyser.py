"""
Optional LLM narration of a workbook diff.

Only the structured change records are sent, never the workbooks.  Keys come
from ``OPENAI_API_KEY`` or ``ANTHROPIC_API_KEY``.  Any failure falls back to
the mechanical summary.
"""

from __future__ import annotations

import importlib
import json
import logging
import os
from typing import List, Optional

from .differ import ChangeRecord
from .summariser import count_by_type, summarise as mechanical_summarise

logger = logging.getLogger(__name__)


_SYSTEM_PROMPT = """\
You are a spreadsheet-comparison assistant.  You will receive a JSON list of
cell-level changes between two versions of the same workbook.  Each change has
a sheet, an A1 address, the old value, the new value and a type (added,
deleted or modified).  Formulas appear as their formula text, starting with "=".

STRICT RULES:

1. ONLY reference facts explicitly present in the change list.  Do NOT use
   outside knowledge or guess what a sheet is for.
2. Group changes by sheet, then by contiguous rows.  When every non-empty cell
   of a row was added or deleted, describe it as a row insertion or deletion
   rather than listing each cell.
3. For numeric modifications, show old → new, the absolute difference and the
   percentage change relative to the old value.
4. Call out formula edits separately from value edits.
5. Finish with a short statistics block: total changes and counts per type.
6. Use neutral, factual language.  Do not speculate about why a change was made.
"""


def _build_user_message(records: List[ChangeRecord]) -> str:
    payload = {
        "counts": count_by_type(records),
        "changes": [rec.to_dict() for rec in records],
    }
    return (
        "Below is the structured change list (JSON).  Describe it following "
        "your instructions exactly.\n\n"
        "```json\n"
        + json.dumps(payload, indent=2, default=str)
        + "\n```"
    )


def _client(module_name: str, env_var: str):
    """Import the provider SDK lazily and build a client from its env key."""
    try:
        module = importlib.import_module(module_name)
    except ImportError as exc:
        raise RuntimeError(
            f"'{module_name}' is not installed; pip install 'sheet-differ[llm]'"
        ) from exc
    api_key = os.environ.get(env_var)
    if not api_key:
        raise RuntimeError(f"{env_var} is not set")
    factory = module.OpenAI if module_name == "openai" else module.Anthropic
    return factory(api_key=api_key)


def _call_openai(records: List[ChangeRecord], model: str) -> str:
    reply = _client("openai", "OPENAI_API_KEY").chat.completions.create(
        model=model,
        temperature=0.1,
        messages=[
            {"role": "system", "content": _SYSTEM_PROMPT},
            {"role": "user", "content": _build_user_message(records)},
        ],
    )
    return reply.choices[0].message.content


def _call_anthropic(records: List[ChangeRecord], model: str) -> str:
    reply = _client("anthropic", "ANTHROPIC_API_KEY").messages.create(
        model=model,
        max_tokens=4096,
        temperature=0.1,
        system=_SYSTEM_PROMPT,
        messages=[{"role": "user", "content": _build_user_message(records)}],
    )
    return reply.content[0].text


_PROVIDERS = {
    "openai": {"fn": _call_openai, "default_model": "gpt-4o"},
    "anthropic": {"fn": _call_anthropic, "default_model": "claude-sonnet-4-20250514"},
}


def analyse_with_llm(
    records: List[ChangeRecord],
    provider: str,
    model: Optional[str] = None,
) -> str:
    """Narrate *records* with an LLM, or return the plain summary if the call fails."""
    if not records:
        return mechanical_summarise(records)
    if provider not in _PROVIDERS:
        raise ValueError(
            f"Unknown LLM provider '{provider}'; expected one of {', '.join(_PROVIDERS)}"
        )

    model = model or _PROVIDERS[provider]["default_model"]
    try:
        narrative = _PROVIDERS[provider]["fn"](records, model)
    except Exception as exc:
        logger.warning("LLM analysis failed (%s); falling back to mechanical summary.", exc)
        return mechanical_summarise(records)

    return (
        f"[LLM-enhanced analysis via {provider} / {model}]\n"
        f"[{len(records)} change record(s); --format plain shows them verbatim]\n\n"
        + narrative
    )
