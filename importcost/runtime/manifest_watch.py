"""Registry of filesystem watches on dependency manifests.

One watch exists per manifest path, shared by every session that
references it. A change to any watched manifest invalidates the shared
resolution cache and asks the owner to reprocess the active document.

Watches are never released. The table grows with the number of distinct
manifests seen during the process lifetime and is capped by
``max_watches``; manifests beyond the cap are simply not watched.
"""

import logging
from pathlib import Path
from typing import Callable, Dict, List, Optional

from importcost.parsers.resolution import ResolutionCache
from importcost.runtime.eventbus import Event
from importcost.runtime.protocols import FileWatcher

logger = logging.getLogger("importcost.runtime.manifest_watch")


class ManifestWatchRegistry:
    """Deduplicated manifest watches driving cache invalidation."""

    def __init__(
        self,
        cache: ResolutionCache,
        watcher: FileWatcher,
        on_invalidate: Optional[Callable[[], None]] = None,
        max_watches: int = 256,
    ) -> None:
        """Initialize the registry.

        Args:
            cache: Shared resolution cache cleared on every manifest change.
            watcher: Collaborator delivering change notifications.
            on_invalidate: Called after the cache was cleared.
            max_watches: Upper bound on the number of watches.
        """
        self.cache = cache
        self.watcher = watcher
        self.on_invalidate = on_invalidate
        self.max_watches = max_watches
        self._watches: Dict[Path, object] = {}

    def register(self, manifest: Path) -> bool:
        """Watch ``manifest`` unless it already is; True if a watch was created."""
        manifest = Path(manifest)
        if manifest in self._watches:
            return False
        if len(self._watches) >= self.max_watches:
            logger.warning(
                "Manifest watch limit (%d) reached, not watching %s", self.max_watches, manifest
            )
            return False
        self._watches[manifest] = self.watcher.watch(manifest, self._on_change)
        logger.debug("Registered manifest watch: %s", manifest)
        return True

    def handle_package_event(self, event: Event) -> None:
        """``PACKAGE`` event handler registering the announced manifest."""
        self.register(Path(event.data["manifest"]))

    def _on_change(self, manifest: Path) -> None:
        logger.info("Manifest changed: %s", manifest)
        self.cache.clear()
        if self.on_invalidate is not None:
            self.on_invalidate()

    @property
    def watched(self) -> List[Path]:
        return list(self._watches)

    def __contains__(self, manifest: object) -> bool:
        return Path(manifest) in self._watches if isinstance(manifest, (str, Path)) else False

    def __len__(self) -> int:
        return len(self._watches)


__all__ = ["ManifestWatchRegistry"]
