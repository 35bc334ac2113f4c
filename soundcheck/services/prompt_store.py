"""Prompt catalog access.

Prompts live in `soundcheck/prompts/prompts.json`, grouped by the agent that
uses them (`planner.*`, `responder.*`). An entry is either a string or a list
of lines; lists keep long instructions readable in JSON and are joined with
newlines before rendering. Placeholders use `string.Template` syntax
(`$context`, `$top_n`), so literal braces in prompts need no escaping.
"""
from __future__ import annotations

import json
from pathlib import Path
from string import Template
from typing import Any


PROMPTS_PATH = Path(__file__).resolve().parents[1] / "prompts" / "prompts.json"
_catalog: dict[str, Any] | None = None
_catalog_mtime_ns: int | None = None


def _load_catalog() -> dict[str, Any]:
    """Read the catalog, re-reading only when the file changed on disk."""
    global _catalog, _catalog_mtime_ns
    mtime_ns = PROMPTS_PATH.stat().st_mtime_ns
    if _catalog is not None and _catalog_mtime_ns == mtime_ns:
        return _catalog

    payload = json.loads(PROMPTS_PATH.read_text(encoding="utf-8"))
    if not isinstance(payload, dict):
        raise ValueError(f"Prompt catalog {PROMPTS_PATH.name} must be a JSON object")
    _catalog = payload
    _catalog_mtime_ns = mtime_ns
    return payload


def _prompt_text(key: str) -> str:
    node: Any = _load_catalog()
    for part in key.split("."):
        if not isinstance(node, dict) or part not in node:
            raise KeyError(f"Unknown prompt '{key}'")
        node = node[part]

    if isinstance(node, str):
        return node
    if isinstance(node, list) and all(isinstance(line, str) for line in node):
        return "\n".join(node)
    raise TypeError(f"Prompt '{key}' must be a string or a list of lines")


def render_prompt(key: str, **values: Any) -> str:
    """Render a catalog entry, substituting `$name` placeholders from `values`.

    Values are inserted verbatim: a `$` inside a user question is never
    re-read as a placeholder.
    """
    template = Template(_prompt_text(key))
    try:
        return template.substitute(**values)
    except KeyError as exc:
        raise KeyError(f"Prompt '{key}' is missing a value for '{exc.args[0]}'") from exc
