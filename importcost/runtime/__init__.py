"""Runtime components: event bus, sessions, manifest watches and service."""

from importcost.runtime.api import ImportCostService
from importcost.runtime.eventbus import Event, EventBus, EventType
from importcost.runtime.manifest_watch import ManifestWatchRegistry
from importcost.runtime.session import FileSession, FileSessionManager, SessionState
from importcost.runtime.watchers import PollingFileWatcher

__all__ = [
    "Event",
    "EventBus",
    "EventType",
    "FileSession",
    "FileSessionManager",
    "ImportCostService",
    "ManifestWatchRegistry",
    "PollingFileWatcher",
    "SessionState",
]
