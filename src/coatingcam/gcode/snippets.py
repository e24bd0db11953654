"""User G-code snippets wrapped around the generated coating body.

Templates use ``{{name}}`` placeholders; dotted names reach into nested
dicts (``{{work_area.width}}``).  Unknown names render as empty strings.
"""

from __future__ import annotations

import re
from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any

_PLACEHOLDER = re.compile(r"\{\{\s*([a-zA-Z0-9_.]+)\s*\}\}")


class SnippetHook(Enum):
    BEFORE_ALL = "before_all"
    BEFORE_PATH = "before_path"
    AFTER_PATH = "after_path"
    AFTER_ALL = "after_all"


@dataclass
class GCodeSnippet:
    name: str
    hook: SnippetHook
    template: str
    enabled: bool = True
    order: int = 0
    description: str = ""

    def to_dict(self) -> dict:
        d = asdict(self)
        d["hook"] = self.hook.value
        return d

    @classmethod
    def from_dict(cls, d: dict) -> GCodeSnippet:
        d = dict(d)
        d["hook"] = SnippetHook(d["hook"])
        known = set(cls.__dataclass_fields__)
        return cls(**{k: v for k, v in d.items() if k in known})


def render_template(template: str, variables: dict[str, Any]) -> str:
    def _lookup(match: re.Match) -> str:
        value: Any = variables
        for key in match.group(1).split("."):
            value = value.get(key) if isinstance(value, dict) else None
        return "" if value is None else str(value)

    return _PLACEHOLDER.sub(_lookup, template or "")


def render_hook(
    snippets: list[GCodeSnippet],
    hook: SnippetHook,
    variables: dict[str, Any],
) -> list[str]:
    """Rendered, non-empty snippet blocks for *hook* in ``order``."""
    selected = sorted(
        (s for s in snippets if s.enabled and s.hook is hook),
        key=lambda s: s.order,
    )
    blocks = (render_template(s.template, variables).strip() for s in selected)
    return [b for b in blocks if b]


def wrap_body(
    body: str,
    snippets: list[GCodeSnippet],
    variables: dict[str, Any],
) -> str:
    """Surround *body* with the rendered snippets of every hook."""
    path_vars = {
        **variables,
        "path_index": 1,
        "path_count": 1,
        "shape_name": "Coating",
        "shape_type": "coating",
    }
    parts = [
        *render_hook(snippets, SnippetHook.BEFORE_ALL, variables),
        *render_hook(snippets, SnippetHook.BEFORE_PATH, path_vars),
        body.strip(),
        *render_hook(snippets, SnippetHook.AFTER_PATH, path_vars),
        *render_hook(snippets, SnippetHook.AFTER_ALL, variables),
    ]
    return "\n".join(p for p in parts if p).rstrip() + "\n"
