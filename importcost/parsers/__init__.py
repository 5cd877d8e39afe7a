"""Import extraction package.

Provides dialect-aware parsing of JavaScript/TypeScript sources, local
resolution checks and the extractor producing canonical package references.
"""

from importcost.parsers.base import (
    ConfigurationError,
    MalformedNodeError,
    ParseError,
    RecoverableError,
    ResolutionIOError,
)
from importcost.parsers.extractor import ImportExtractor
from importcost.parsers.manifest import locate_manifest, package_root
from importcost.parsers.resolution import LocalResolutionChecker, ResolutionCache
from importcost.parsers.syntax import Dialect, parse_source

__all__ = [
    "ConfigurationError",
    "Dialect",
    "ImportExtractor",
    "LocalResolutionChecker",
    "MalformedNodeError",
    "ParseError",
    "RecoverableError",
    "ResolutionCache",
    "ResolutionIOError",
    "locate_manifest",
    "package_root",
    "parse_source",
]
