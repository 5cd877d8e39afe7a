"""Local-resolution checks for import specifiers.

A specifier is local when, joined onto the importing file's directory, it
names an existing source file (``candidate.*``) or a directory index
(``candidate/index.*``) with a recognized extension. Every other specifier
is treated as an external package.
"""

import logging
import os
from typing import Dict, Iterator, Optional

from importcost.config import ImportCostConfig
from importcost.parsers.base import ResolutionIOError

logger = logging.getLogger("importcost.parsers.resolution")


class ResolutionCache:
    """Process-wide memo of candidate path -> "is local".

    Invalidated wholesale whenever a watched manifest changes.
    """

    def __init__(self) -> None:
        self._entries: Dict[str, bool] = {}

    def get(self, candidate: str) -> Optional[bool]:
        return self._entries.get(candidate)

    def set(self, candidate: str, is_local: bool) -> None:
        self._entries[candidate] = is_local

    def clear(self) -> None:
        size = len(self._entries)
        self._entries = {}
        logger.debug("Resolution cache cleared (%d entries)", size)

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, candidate: object) -> bool:
        return candidate in self._entries


def candidate_path(file_name: str, specifier: str) -> str:
    """Join ``specifier`` onto the directory of ``file_name``."""
    return os.path.normpath(os.path.join(os.path.dirname(file_name), specifier))


class LocalResolutionChecker:
    """Decides whether a candidate path refers to a local source file."""

    def __init__(
        self,
        config: Optional[ImportCostConfig] = None,
        cache: Optional[ResolutionCache] = None,
    ) -> None:
        self.config = config or ImportCostConfig.default()
        self.cache = cache if cache is not None else ResolutionCache()
        self._source_regex = self.config.source_file_regex()

    def is_local(self, candidate: str) -> bool:
        """Return True when ``candidate`` resolves to a local file or index.

        Filesystem failures are logged and answered with False, so the
        specifier is reported as an external package.
        """
        cached = self.cache.get(candidate)
        if cached is not None:
            return cached
        try:
            result = any(self._source_regex.search(path) for path in self._matches(candidate))
        except ResolutionIOError as exc:
            logger.warning("%s; treating as external", exc)
            return False
        self.cache.set(candidate, result)
        return result

    def _matches(self, candidate: str) -> Iterator[str]:
        parent, stem = os.path.split(candidate)
        yield from _entries_with_prefix(parent, stem + ".")
        yield from _entries_with_prefix(candidate, "index.")


def _entries_with_prefix(directory: str, prefix: str) -> Iterator[str]:
    try:
        with os.scandir(directory or os.curdir) as entries:
            matches = [entry.path for entry in entries if entry.name.startswith(prefix)]
    except (FileNotFoundError, NotADirectoryError):
        return
    except OSError as exc:
        raise ResolutionIOError(f"Cannot inspect {directory}: {exc}") from exc
    yield from matches


__all__ = ["LocalResolutionChecker", "ResolutionCache", "candidate_path"]
