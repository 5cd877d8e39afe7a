"""Polling file watcher.

Detects changes by comparing modification time and size on a fixed
interval. Good enough for the handful of manifest files a session
references; editors are expected to supply their own native watcher.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Dict, List, Optional, Tuple

logger = logging.getLogger("importcost.runtime.watchers")

Stamp = Optional[Tuple[int, int]]


@dataclass
class _Watch:
    stamp: Stamp
    callbacks: List[Callable[[Path], None]] = field(default_factory=list)


def _stamp(path: Path) -> Stamp:
    try:
        stat = path.stat()
    except OSError:
        return None
    return (stat.st_mtime_ns, stat.st_size)


class PollingFileWatcher:
    """``FileWatcher`` implementation polling from an asyncio task."""

    def __init__(self, interval: float = 1.0) -> None:
        self.interval = interval
        self._watches: Dict[Path, _Watch] = {}
        self._task: Optional["asyncio.Task[None]"] = None

    def watch(self, path: Path, callback: Callable[[Path], None]) -> Path:
        """Call ``callback`` whenever ``path`` changes, appears or disappears."""
        path = Path(path)
        entry = self._watches.get(path)
        if entry is None:
            entry = self._watches[path] = _Watch(stamp=_stamp(path))
        entry.callbacks.append(callback)
        logger.debug("Watching %s", path)
        return path

    @property
    def paths(self) -> List[Path]:
        return list(self._watches)

    def poll_once(self) -> List[Path]:
        """Check every watched file once; returns the paths that changed."""
        changed: List[Path] = []
        for path, entry in list(self._watches.items()):
            stamp = _stamp(path)
            if stamp == entry.stamp:
                continue
            entry.stamp = stamp
            changed.append(path)
            logger.debug("Change detected: %s", path)
            for callback in list(entry.callbacks):
                try:
                    callback(path)
                except Exception as exc:
                    logger.error("Watch callback for %s failed: %s", path, exc, exc_info=True)
        return changed

    def start(self) -> None:
        """Start polling on the running event loop."""
        if self._task is None or self._task.done():
            self._task = asyncio.get_running_loop().create_task(self._poll_forever())

    def stop(self) -> None:
        if self._task is not None:
            self._task.cancel()
            self._task = None

    async def _poll_forever(self) -> None:
        while True:
            await asyncio.sleep(self.interval)
            self.poll_once()


__all__ = ["PollingFileWatcher"]
