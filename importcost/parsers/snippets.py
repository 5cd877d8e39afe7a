"""Canonical snippet synthesis.

A canonical snippet is a standalone statement that reproduces the cost of
one import when measured in isolation. Two statements that differ only in
the order of their named bindings produce the same snippet, which makes the
snippet usable as a cache key.
"""

import re
from dataclasses import dataclass
from itertools import groupby
from typing import List, Sequence, Tuple

_IDENTIFIER = re.compile(r"^[A-Za-z_$][\w$]*$")

# Names that cannot appear as a bare import binding.
_RESERVED = frozenset(
    """
    await break case catch class const continue debugger default delete do
    else enum export extends false finally for function if implements import
    in instanceof interface let new null package private protected public
    return static super switch this throw true try typeof var void while with
    yield
    """.split()
)

SIDE_EFFECT_BINDING = "tmp"


@dataclass(frozen=True)
class ImportBinding:
    """One specifier of a static import statement.

    Attributes:
        kind: ``default``, ``namespace`` or ``named``.
        imported: Exported name being imported (``*`` for namespaces).
        local: Local binding name.
    """

    kind: str
    imported: str
    local: str


def _named_part(binding: ImportBinding) -> Tuple[str, str]:
    if _IDENTIFIER.match(binding.imported) and binding.imported not in _RESERVED:
        return binding.imported, binding.imported
    return f"{binding.imported} as {binding.local}", binding.local


def _fold(bindings: Sequence[ImportBinding]) -> List[Tuple[str, str]]:
    parts: List[Tuple[str, str]] = []
    for is_named, group in groupby(bindings, key=lambda b: b.kind == "named"):
        if is_named:
            named = [_named_part(b) for b in sorted(group, key=lambda b: b.imported)]
            parts.append(
                (
                    "{" + ", ".join(clause for clause, _ in named) + "}",
                    "{" + ", ".join(ref for _, ref in named) + "}",
                )
            )
        else:
            for binding in group:
                if binding.kind == "namespace":
                    parts.append((f"* as {binding.local}", binding.local))
                else:
                    parts.append((binding.local, binding.local))
    return parts


def import_snippet(module: str, bindings: Sequence[ImportBinding]) -> str:
    """Build the canonical snippet for a static import statement.

    Default and namespace bindings keep their statement position; the named
    block is sorted by imported name. A statement without bindings gets a
    temporary namespace binding so it can still be referenced.
    """
    parts = _fold(bindings) or [(f"* as {SIDE_EFFECT_BINDING}", SIDE_EFFECT_BINDING)]
    clause = ", ".join(clause for clause, _ in parts)
    refs = ", ".join(ref for _, ref in parts)
    return f"import {clause} from '{module}';\nconsole.log({refs});"


def require_snippet(module: str) -> str:
    return f"require('{module}')"


def dynamic_import_snippet(module: str) -> str:
    return f"import('{module}').then(res => console.log(res));"


__all__ = [
    "ImportBinding",
    "SIDE_EFFECT_BINDING",
    "dynamic_import_snippet",
    "import_snippet",
    "require_snippet",
]
