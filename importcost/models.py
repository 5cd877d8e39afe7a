"""Core data models shared across importcost components."""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, List, Optional

if TYPE_CHECKING:
    from importcost.parsers.syntax import Dialect


class ReferenceKind(str, Enum):
    """Syntactic form a package reference was discovered in."""

    IMPORT = "import"
    REQUIRE = "require"
    DYNAMIC_IMPORT = "dynamic_import"
    IMPORT_REQUIRE = "import_require"


@dataclass(frozen=True)
class SourceLocation:
    """Span of a specifier literal. Lines are 1-based, columns 0-based."""

    start_line: int
    start_column: int
    end_line: int
    end_column: int


@dataclass(frozen=True)
class PackageReference:
    """One external package dependency discovered in a source file.

    Attributes:
        file_name: Absolute path of the importing file.
        name: Bare module specifier.
        line: 1-based line on which the statement or call ends.
        loc: Location of the specifier literal.
        snippet: Canonical standalone statement reproducing the import.
        kind: Syntactic form of the reference.
    """

    file_name: str
    name: str
    line: int
    loc: SourceLocation
    snippet: str
    kind: ReferenceKind = ReferenceKind.IMPORT


@dataclass(frozen=True)
class RejectedSpecifier:
    """Specifier that was filtered out during extraction."""

    name: str
    line: int
    reason: str
    pattern: Optional[str] = None


@dataclass
class ExtractionResult:
    """Package references plus the specifiers rejected along the way."""

    packages: List[PackageReference] = field(default_factory=list)
    rejected: List[RejectedSpecifier] = field(default_factory=list)


@dataclass(frozen=True)
class SourceDocument:
    """Snapshot of an editor document.

    Attributes:
        path: Absolute file path identifying the document.
        text: Document content at snapshot time.
        language_id: Editor language identifier, if known.
        dialect: Declared dialect; detected from the path when omitted.
    """

    path: Path
    text: str
    language_id: Optional[str] = None
    dialect: Optional["Dialect"] = None

    @property
    def file_name(self) -> str:
        return str(self.path)


@dataclass(frozen=True)
class PackageCost:
    """Cost reported by the cost collaborator for a single package."""

    reference: PackageReference
    size: Optional[int] = None
    gzip: Optional[int] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None
