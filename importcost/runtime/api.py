"""Library-facing service wiring extraction, sessions and manifest watches.

Editors (or the CLI) feed document snapshots in through :meth:`process`
and subscribe to session events through ``service.sessions.subscribe``.
The service owns the shared resolution cache and the manifest watch
registry, and reprocesses the active document when a manifest changes.
"""

from __future__ import annotations

import logging
from typing import Callable, Optional

from importcost.config import ImportCostConfig
from importcost.costs import InstalledSizeCalculator
from importcost.models import SourceDocument
from importcost.parsers.extractor import ImportExtractor
from importcost.parsers.resolution import LocalResolutionChecker, ResolutionCache
from importcost.parsers.syntax import Dialect
from importcost.runtime.eventbus import Event, EventType
from importcost.runtime.manifest_watch import ManifestWatchRegistry
from importcost.runtime.protocols import CostCalculator, FileWatcher
from importcost.runtime.session import FileSession, FileSessionManager
from importcost.runtime.watchers import PollingFileWatcher

logger = logging.getLogger("importcost.runtime.api")

TYPESCRIPT_LANGUAGE_IDS = frozenset({"typescript", "typescriptreact"})
JAVASCRIPT_LANGUAGE_IDS = frozenset({"javascript", "javascriptreact"})

DocumentProvider = Callable[[], Optional[SourceDocument]]


class ImportCostService:
    """Processes documents and keeps their results fresh.

    Args:
        config: Configuration; defaults to ``ImportCostConfig.default()``.
        calculator: Cost collaborator; defaults to installed-size costs.
        watcher: File watcher for manifests; defaults to polling.
        document_provider: Returns the editor's current active document.
            When omitted, the last processed document is the active one.
    """

    def __init__(
        self,
        config: Optional[ImportCostConfig] = None,
        calculator: Optional[CostCalculator] = None,
        watcher: Optional[FileWatcher] = None,
        document_provider: Optional[DocumentProvider] = None,
    ) -> None:
        self.config = config or ImportCostConfig.default()
        self.cache = ResolutionCache()
        self.extractor = ImportExtractor(
            self.config, LocalResolutionChecker(self.config, self.cache)
        )
        self.sessions = FileSessionManager(self.extractor, calculator or InstalledSizeCalculator())
        self.watcher = watcher or PollingFileWatcher(self.config.poll_interval)
        self.manifests = ManifestWatchRegistry(
            self.cache,
            self.watcher,
            on_invalidate=self._on_manifest_change,
            max_watches=self.config.max_manifest_watches,
        )
        self.sessions.subscribe(
            EventType.PACKAGE, self.manifests.handle_package_event, "manifest_watch"
        )
        self.sessions.subscribe(EventType.ERROR, self._log_error, "error_log")
        self.enabled = True
        self._document_provider = document_provider
        self._last_document: Optional[SourceDocument] = None
        self._typescript_regex = self.config.typescript_regex()
        self._javascript_regex = self.config.javascript_regex()

    @property
    def active_document(self) -> Optional[SourceDocument]:
        if self._document_provider is not None:
            return self._document_provider()
        return self._last_document

    def detect_dialect(self, document: SourceDocument) -> Optional[Dialect]:
        """Pick a dialect from the editor language ID or the file name."""
        if document.dialect is not None:
            return document.dialect
        if (
            document.language_id in TYPESCRIPT_LANGUAGE_IDS
            or self._typescript_regex.search(document.file_name)
        ):
            return Dialect.TYPESCRIPT
        if (
            document.language_id in JAVASCRIPT_LANGUAGE_IDS
            or self._javascript_regex.search(document.file_name)
        ):
            return Dialect.JAVASCRIPT
        return None

    def process(self, document: SourceDocument) -> Optional[FileSession]:
        """Start a session for ``document`` if processing is enabled.

        Returns:
            The new session, or None when disabled or the dialect is unknown.
        """
        self._last_document = document
        if not self.enabled:
            return None
        dialect = self.detect_dialect(document)
        if dialect is None:
            logger.debug("Skipping %s: not a recognized source file", document.file_name)
            return None
        return self.sessions.process(document, dialect)

    def check(self) -> Optional[FileSession]:
        """Reprocess the active document."""
        document = self.active_document
        if document is None:
            return None
        return self.process(document)

    def toggle(self) -> bool:
        """Suspend or resume processing; returns the new state."""
        self.enabled = not self.enabled
        logger.info("Processing %s", "resumed" if self.enabled else "suspended")
        if self.enabled:
            self.check()
        else:
            self.sessions.cancel_all()
        return self.enabled

    def _on_manifest_change(self) -> None:
        document = self.active_document
        if self.enabled and document is not None and document.path.exists():
            self.process(document)

    @staticmethod
    def _log_error(event: Event) -> None:
        logger.warning("importcost error: %s", event.data.get("message"))


__all__ = ["ImportCostService"]
