"""Import extraction for JavaScript/TypeScript source.

Walks a tree-sitter syntax tree once, in source order, and turns every
construct that pulls in an external package into a ``PackageReference``:

- ES6 imports: ``import x from 'module'`` and ``import 'module'``
- TypeScript import-require: ``import x = require('module')``
- CommonJS requires: ``require('module')``
- Dynamic imports: ``import('module')``

Specifiers matching a configured ignore pattern or resolving to a local file
are rejected and recorded on the result.
"""

import logging
import re
from typing import List, Optional

from tree_sitter import Node

from importcost.config import ImportCostConfig
from importcost.models import (
    ExtractionResult,
    PackageReference,
    ReferenceKind,
    RejectedSpecifier,
    SourceLocation,
)
from importcost.parsers.base import MalformedNodeError
from importcost.parsers.resolution import LocalResolutionChecker, candidate_path
from importcost.parsers.snippets import (
    ImportBinding,
    dynamic_import_snippet,
    import_snippet,
    require_snippet,
)
from importcost.parsers.syntax import Dialect, char_column, parse_source

logger = logging.getLogger("importcost.parsers.extractor")


def _text(node: Node) -> str:
    return node.text.decode("utf-8") if node.text is not None else ""


def _location(node: Node, data: bytes) -> SourceLocation:
    return SourceLocation(
        start_line=node.start_point[0] + 1,
        start_column=char_column(data, node.start_byte, node.start_point[1]),
        end_line=node.end_point[0] + 1,
        end_column=char_column(data, node.end_byte, node.end_point[1]),
    )


_SIMPLE_ESCAPES = {"b": "\b", "f": "\f", "n": "\n", "r": "\r", "t": "\t", "v": "\v", "0": "\0"}
_LINE_CONTINUATION = re.compile(r"^\\(?:\r\n|[\r\n\u2028\u2029])$")


def _unescape(sequence: str) -> str:
    """Decode one JavaScript escape sequence (backslash included)."""
    if _LINE_CONTINUATION.match(sequence):
        return ""
    body = sequence[1:]
    if body.startswith("u{"):
        return chr(int(body[2:-1], 16))
    if body[0] in "ux" and len(body) > 1:
        return chr(int(body[1:], 16))
    return _SIMPLE_ESCAPES.get(body, body)


def _string_value(node: Node) -> str:
    parts = []
    for child in node.children[1:-1]:
        if child.type == "escape_sequence":
            parts.append(_unescape(_text(child)))
        else:
            parts.append(_text(child))
    # Surrogate pairs written as two \u escapes.
    return "".join(parts).encode("utf-16", "surrogatepass").decode("utf-16", "surrogatepass")


def _literal_value(node: Optional[Node]) -> str:
    """Statically evaluate a string or substitution-free template literal.

    Raises:
        MalformedNodeError: If the node is not a static literal.
    """
    if node is None:
        raise MalformedNodeError("missing module specifier")
    if node.type == "string":
        return _string_value(node)
    if node.type == "template_string":
        if any(child.type == "template_substitution" for child in node.children):
            raise MalformedNodeError(f"template specifier {_text(node)} is not static")
        return _text(node)[1:-1]
    raise MalformedNodeError(f"{node.type} specifier {_text(node)!r} cannot be evaluated")


def _bindings(statement: Node) -> List[ImportBinding]:
    bindings: List[ImportBinding] = []
    for clause in (c for c in statement.children if c.type == "import_clause"):
        for child in clause.named_children:
            if child.type == "identifier":
                bindings.append(ImportBinding("default", "default", _text(child)))
            elif child.type == "namespace_import":
                local = next((c for c in child.named_children if c.type == "identifier"), None)
                if local is None:
                    raise MalformedNodeError("namespace import without a binding")
                bindings.append(ImportBinding("namespace", "*", _text(local)))
            elif child.type == "named_imports":
                for spec in child.named_children:
                    if spec.type != "import_specifier":
                        continue
                    name = spec.child_by_field_name("name")
                    if name is None:
                        raise MalformedNodeError("import specifier without a name")
                    alias = spec.child_by_field_name("alias")
                    bindings.append(
                        ImportBinding("named", _text(name), _text(alias or name))
                    )
    return bindings


class ImportExtractor:
    """Extracts external package references from a single source file."""

    def __init__(
        self,
        config: Optional[ImportCostConfig] = None,
        checker: Optional[LocalResolutionChecker] = None,
    ) -> None:
        self.config = config or ImportCostConfig.default()
        self.checker = checker or LocalResolutionChecker(self.config)
        self._ignore = list(zip(self.config.ignore_paths, self.config.ignore_regexes()))

    def extract(self, file_name: str, source: str, dialect: Dialect) -> List[PackageReference]:
        """Return the package references of ``source`` in source order.

        Raises:
            ParseError: If ``source`` is not valid under ``dialect``.
        """
        return self.extract_result(file_name, source, dialect).packages

    def extract_result(self, file_name: str, source: str, dialect: Dialect) -> ExtractionResult:
        """Like :meth:`extract`, also reporting the rejected specifiers."""
        tree = parse_source(source, dialect)
        data = source.encode("utf-8")
        result = ExtractionResult()
        stack = [tree.root_node]
        while stack:
            node = stack.pop()
            try:
                reference = self._visit(node, file_name, data)
            except MalformedNodeError as exc:
                logger.debug(
                    "Skipping malformed %s at %s:%d: %s",
                    node.type,
                    file_name,
                    node.start_point[0] + 1,
                    exc,
                )
                reference = None
            if reference is not None and self._accept(reference, result):
                logger.debug("Found %s: %s", reference.kind.value, reference.name)
                result.packages.append(reference)
            stack.extend(reversed(node.named_children))
        return result

    def _visit(self, node: Node, file_name: str, data: bytes) -> Optional[PackageReference]:
        if node.type == "import_statement":
            return self._import_statement(node, file_name, data)
        if node.type == "call_expression":
            return self._call_expression(node, file_name, data)
        return None

    def _import_statement(self, node: Node, file_name: str, data: bytes) -> PackageReference:
        require_clause = next(
            (c for c in node.named_children if c.type == "import_require_clause"), None
        )
        if require_clause is not None:
            source = require_clause.child_by_field_name("source") or next(
                (c for c in require_clause.named_children if c.type == "string"), None
            )
            name = _literal_value(source)
            return self._reference(
                file_name,
                node,
                _location(source, data),
                name,
                require_snippet(name),
                ReferenceKind.IMPORT_REQUIRE,
            )

        source = node.child_by_field_name("source")
        name = _literal_value(source)
        snippet = import_snippet(name, _bindings(node))
        return self._reference(
            file_name, node, _location(source, data), name, snippet, ReferenceKind.IMPORT
        )

    def _call_expression(
        self, node: Node, file_name: str, data: bytes
    ) -> Optional[PackageReference]:
        function = node.child_by_field_name("function")
        if function is None:
            return None
        if function.type == "import":
            kind = ReferenceKind.DYNAMIC_IMPORT
        elif function.type == "identifier" and _text(function) == "require":
            kind = ReferenceKind.REQUIRE
        else:
            return None

        arguments = node.child_by_field_name("arguments")
        if arguments is None or arguments.type != "arguments" or not arguments.named_children:
            raise MalformedNodeError(f"{_text(function)}() without arguments")
        first = arguments.named_children[0]
        name = _literal_value(first)
        if kind is ReferenceKind.DYNAMIC_IMPORT:
            snippet = dynamic_import_snippet(name)
        else:
            snippet = require_snippet(name)
        return self._reference(file_name, node, _location(first, data), name, snippet, kind)

    @staticmethod
    def _reference(
        file_name: str,
        node: Node,
        loc: SourceLocation,
        name: str,
        snippet: str,
        kind: ReferenceKind,
    ) -> PackageReference:
        return PackageReference(
            file_name=file_name,
            name=name,
            line=node.end_point[0] + 1,
            loc=loc,
            snippet=snippet,
            kind=kind,
        )

    def _accept(self, reference: PackageReference, result: ExtractionResult) -> bool:
        for pattern, regex in self._ignore:
            if regex.search(reference.name):
                logger.debug("Import %s matched ignored path: %s", reference.name, pattern)
                result.rejected.append(
                    RejectedSpecifier(reference.name, reference.line, "ignored", pattern)
                )
                return False
        if self.checker.is_local(candidate_path(reference.file_name, reference.name)):
            result.rejected.append(RejectedSpecifier(reference.name, reference.line, "local"))
            return False
        return True


__all__ = ["ImportExtractor"]
