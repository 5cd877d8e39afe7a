"""importcost: external package discovery for JavaScript/TypeScript sources.

Parses source files, finds every static import, ``require`` call and
dynamic ``import()`` that pulls in an external package, and produces
canonical snippets suitable for caching and isolated cost measurement.
"""

from importcost.config import ImportCostConfig
from importcost.models import (
    PackageCost,
    PackageReference,
    ReferenceKind,
    SourceDocument,
    SourceLocation,
)
from importcost.parsers import Dialect, ImportExtractor, ParseError
from importcost.runtime import EventType, FileSessionManager, ImportCostService

__version__ = "0.1.0"

__all__ = [
    "Dialect",
    "EventType",
    "FileSessionManager",
    "ImportCostConfig",
    "ImportCostService",
    "ImportExtractor",
    "PackageCost",
    "PackageReference",
    "ParseError",
    "ReferenceKind",
    "SourceDocument",
    "SourceLocation",
]
