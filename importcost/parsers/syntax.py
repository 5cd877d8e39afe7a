"""Dialect-aware syntax parsing backed by tree-sitter.

Each supported dialect maps to one declared grammar profile. The profiles
share a permissive base feature set so that modern or framework-specific
syntax never causes a false parse failure; each dialect adds exactly one
annotation extension on top of it: flow-style annotations for the untyped
dialect, static types for the typed one.
"""

import logging
import threading
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, FrozenSet, Optional, Tuple

import tree_sitter_javascript as ts_javascript
import tree_sitter_typescript as ts_typescript
from tree_sitter import Language, Node, Parser, Tree

from importcost.parsers.base import ParseError

logger = logging.getLogger("importcost.parsers.syntax")

BASE_FEATURES: FrozenSet[str] = frozenset(
    {
        "jsx",
        "decorators",
        "class_fields",
        "optional_chaining",
        "async_generators",
        "dynamic_import",
        "object_spread",
    }
)


@dataclass(frozen=True)
class GrammarProfile:
    """Grammar features enabled for one dialect.

    Attributes:
        name: Human readable grammar name.
        features: Syntax features the grammar accepts.
        loaders: Callables returning tree-sitter language handles. The first
            is the primary grammar; the others are tried in order when it
            reports errors.
    """

    name: str
    features: FrozenSet[str]
    loaders: Tuple[Callable[[], Any], ...]


class Dialect(Enum):
    """The two source dialects the extractor understands."""

    JAVASCRIPT = "javascript"
    TYPESCRIPT = "typescript"

    @property
    def profile(self) -> GrammarProfile:
        return _PROFILES[self]

    def __str__(self) -> str:
        return self.value


# Annotated untyped sources (``// @flow``) are read with the TSX grammar,
# which accepts the annotation syntax the JavaScript grammar rejects.
_PROFILES: Dict[Dialect, GrammarProfile] = {
    Dialect.JAVASCRIPT: GrammarProfile(
        name="javascript",
        features=BASE_FEATURES | {"flow_types"},
        loaders=(ts_javascript.language, ts_typescript.language_tsx),
    ),
    Dialect.TYPESCRIPT: GrammarProfile(
        name="tsx",
        features=BASE_FEATURES | {"static_types"},
        loaders=(ts_typescript.language_tsx,),
    ),
}

# Parsers are not thread-safe; each thread builds its own.
_local = threading.local()


def get_parser(dialect: Dialect, grammar: int = 0) -> Parser:
    """Return this thread's memoized parser for one grammar of ``dialect``."""
    parsers: Optional[Dict[Tuple[Dialect, int], Parser]] = getattr(_local, "parsers", None)
    if parsers is None:
        parsers = _local.parsers = {}
    key = (dialect, grammar)
    parser = parsers.get(key)
    if parser is None:
        parser = Parser(Language(dialect.profile.loaders[grammar]()))
        parsers[key] = parser
        logger.debug("Initialized %s parser (grammar %d)", dialect.profile.name, grammar)
    return parser


def parse_source(source: str, dialect: Dialect) -> Tree:
    """Parse ``source`` into a syntax tree.

    Args:
        source: Source text.
        dialect: Dialect selecting the grammar profile.

    Returns:
        Tree: The first error-free tree produced by the profile's grammars.

    Raises:
        ParseError: If every grammar reports error or missing nodes. The
            position is taken from the primary grammar.
    """
    data = source.encode("utf-8")
    primary: Optional[Tree] = None
    for grammar in range(len(dialect.profile.loaders)):
        tree = get_parser(dialect, grammar).parse(data)
        if not tree.root_node.has_error:
            if grammar:
                logger.debug("Parsed %s source with annotation grammar %d", dialect, grammar)
            return tree
        if primary is None:
            primary = tree

    bad = _first_error(primary.root_node)
    if bad is None:
        line, column = 0, 0
    else:
        line = bad.start_point[0] + 1
        column = char_column(data, bad.start_byte, bad.start_point[1])
    raise ParseError(
        f"Unexpected token ({line}:{column}) for {dialect} source",
        line=line,
        column=column,
    )


def char_column(data: bytes, offset: int, byte_column: int) -> int:
    """Convert a byte column on the line containing ``offset`` to characters."""
    return len(data[offset - byte_column : offset].decode("utf-8", errors="replace"))


def _first_error(root: Node) -> Optional[Node]:
    stack = [root]
    while stack:
        node = stack.pop()
        if node.type == "ERROR" or node.is_missing:
            return node
        stack.extend(child for child in reversed(node.children) if child.has_error)
    return None


__all__ = [
    "BASE_FEATURES",
    "Dialect",
    "GrammarProfile",
    "char_column",
    "get_parser",
    "parse_source",
]
