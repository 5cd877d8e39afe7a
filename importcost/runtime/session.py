"""Per-file processing sessions.

A session runs the pipeline for one version of one file:

    IDLE -> EXTRACTING -> AWAITING_COST -> SETTLED

publishing ``START`` (all references, before any cost is known),
``PACKAGE`` (one per manifest to watch), ``CALCULATED`` (one per package
as its cost arrives) and finally ``DONE``. A parse failure or a failing
cost collaborator publishes ``ERROR`` instead and ends the session.

Extraction and manifest lookup touch the filesystem and run in worker
threads, so the event loop stays responsive while a file is processed.

At most one session is live per file path. Starting a new one detaches
every listener of the previous session; work already in flight for the old
session runs to completion but nothing it produces is observable.
"""

# The cost collaborator is foreign code: any failure it raises is confined to its session.


import asyncio
import logging
from enum import Enum, auto
from pathlib import Path
from typing import (
    AsyncIterator,
    Callable,
    Dict,
    List,
    Optional,
    Sequence,
    Set,
    Tuple,
)

from importcost.models import PackageCost, PackageReference, SourceDocument
from importcost.parsers.base import ParseError
from importcost.parsers.extractor import ImportExtractor
from importcost.parsers.manifest import locate_manifest
from importcost.parsers.syntax import Dialect
from importcost.runtime.eventbus import Event, EventBus, EventHandler, EventType
from importcost.runtime.protocols import CostCalculator

logger = logging.getLogger("importcost.runtime.session")

ManifestLocator = Callable[[PackageReference], Optional[Path]]

UNCALCULATED = "cost was not calculated"


class SessionState(Enum):
    """Lifecycle states of a processing session."""

    IDLE = auto()
    EXTRACTING = auto()
    AWAITING_COST = auto()
    SETTLED = auto()
    FAILED = auto()
    CANCELLED = auto()

    @property
    def finished(self) -> bool:
        return self in (SessionState.SETTLED, SessionState.FAILED, SessionState.CANCELLED)


class FileSession:
    """One cancellable run of the extraction and cost pipeline for a file.

    Attributes:
        document: Snapshot being processed.
        dialect: Dialect used to parse the snapshot.
        generation: Monotonic marker, higher for newer sessions.
        state: Current lifecycle state.
        packages: References found by extraction.
        results: Annotated references once settled.
        error: Failure description once failed.
    """

    def __init__(
        self,
        document: SourceDocument,
        dialect: Dialect,
        generation: int,
        extractor: ImportExtractor,
        calculator: CostCalculator,
        manifest_locator: ManifestLocator = locate_manifest,
    ) -> None:
        self.document = document
        self.dialect = dialect
        self.generation = generation
        self.state = SessionState.IDLE
        self.packages: List[PackageReference] = []
        self.results: List[PackageCost] = []
        self.error: Optional[str] = None
        self._extractor = extractor
        self._calculator = calculator
        self._locate_manifest = manifest_locator
        self._bus = EventBus()
        self._channels: List["asyncio.Queue[Optional[Event]]"] = []
        self._cancelled = False

    @property
    def path(self) -> str:
        return self.document.file_name

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def on(self, event_type: EventType, handler: EventHandler, name: Optional[str] = None) -> str:
        """Attach a listener; returns its subscription ID."""
        return self._bus.subscribe(event_type, handler, name)

    def off(self, subscription_id: str) -> bool:
        return self._bus.unsubscribe(subscription_id)

    @property
    def listener_count(self) -> int:
        return self._bus.subscriber_count()

    def cancel(self) -> None:
        """Retire the session: detach all listeners and close its channels.

        Idempotent. A session that already finished keeps its final state.
        """
        if self._cancelled:
            return
        self._cancelled = True
        self._bus.clear_subscribers()
        for channel in self._channels:
            channel.put_nowait(None)
        self._channels.clear()
        if not self.state.finished:
            self.state = SessionState.CANCELLED
        logger.debug("Session %s (gen %d) cancelled", self.path, self.generation)

    def events(self) -> AsyncIterator[Event]:
        """Open a channel streaming this session's events.

        The channel is registered immediately, so no event published after
        this call is missed. Iteration stops after ``DONE``/``ERROR`` or
        when the session is cancelled.
        """
        channel: "asyncio.Queue[Optional[Event]]" = asyncio.Queue()
        if self._cancelled or self.state.finished:
            channel.put_nowait(None)
        else:
            self._channels.append(channel)
        return self._drain(channel)

    async def _drain(self, channel: "asyncio.Queue[Optional[Event]]") -> AsyncIterator[Event]:
        try:
            while True:
                event = await channel.get()
                if event is None:
                    return
                yield event
                if event.event_type.terminal:
                    return
        finally:
            if channel in self._channels:
                self._channels.remove(channel)

    def _emit(self, event_type: EventType, **data) -> None:
        if self._cancelled:
            return
        event = Event(event_type, self.path, self.generation, data)
        for channel in self._channels:
            channel.put_nowait(event)
        self._bus.publish(event)

    def _fail(self, message: str, error: Optional[BaseException] = None) -> None:
        self.error = message
        if not self._cancelled:
            self.state = SessionState.FAILED
        self._emit(EventType.ERROR, message=message, error=error)

    async def run(self) -> None:
        """Drive the session through its lifecycle."""
        if self._cancelled:
            return
        self.state = SessionState.EXTRACTING
        try:
            packages = await asyncio.to_thread(
                self._extractor.extract, self.path, self.document.text, self.dialect
            )
        except ParseError as exc:
            logger.info("Cannot parse %s: %s", self.path, exc)
            self._fail(str(exc), exc)
            return

        if self._cancelled:
            return
        self.packages = packages
        self._emit(EventType.START, packages=list(packages))
        for manifest in await asyncio.to_thread(self._manifests, packages):
            self._emit(EventType.PACKAGE, manifest=str(manifest))

        if not self._cancelled:
            self.state = SessionState.AWAITING_COST
        costs: Dict[PackageReference, PackageCost] = {}
        try:
            async for cost in self._calculator.calculate(self.path, packages):
                costs[cost.reference] = cost
                self._emit(EventType.CALCULATED, package=cost)
        except Exception as exc:
            logger.warning("Cost calculation failed for %s: %s", self.path, exc)
            self._fail(f"cost calculation failed: {exc}", exc)
            return

        self.results = [
            costs.get(reference) or PackageCost(reference=reference, error=UNCALCULATED)
            for reference in packages
        ]
        if self._cancelled:
            return
        self.state = SessionState.SETTLED
        self._emit(EventType.DONE, packages=list(self.results))

    def _manifests(self, packages: Sequence[PackageReference]) -> List[Path]:
        seen: Dict[Path, None] = {}
        for reference in packages:
            manifest = self._locate_manifest(reference)
            if manifest is not None:
                seen.setdefault(manifest)
        return list(seen)


class FileSessionManager:
    """Owns the live session of every file being processed.

    The table only holds sessions with work in flight: a session leaves it
    when it finishes or is replaced, so its size is bounded by the number of
    files edited concurrently.
    """

    def __init__(
        self,
        extractor: ImportExtractor,
        calculator: CostCalculator,
        manifest_locator: ManifestLocator = locate_manifest,
    ) -> None:
        self.extractor = extractor
        self.calculator = calculator
        self._locate_manifest = manifest_locator
        self._sessions: Dict[str, FileSession] = {}
        self._handlers: List[Tuple[EventType, EventHandler, Optional[str]]] = []
        self._tasks: Set["asyncio.Task[None]"] = set()
        self._generation = 0

    def subscribe(
        self, event_type: EventType, handler: EventHandler, name: Optional[str] = None
    ) -> None:
        """Attach ``handler`` to every session created from now on."""
        self._handlers.append((event_type, handler, name))

    def process(self, document: SourceDocument, dialect: Optional[Dialect] = None) -> FileSession:
        """Start a new session for ``document``, retiring the live one.

        Must be called from a running event loop; the session starts on the
        loop's next iteration, so callers can attach listeners first.

        Raises:
            ValueError: If no dialect is given or declared on the document.
        """
        dialect = dialect or document.dialect
        if dialect is None:
            raise ValueError(f"No dialect for {document.file_name}")
        loop = asyncio.get_running_loop()

        self.cancel(document.file_name)
        self._generation += 1
        session = FileSession(
            document,
            dialect,
            self._generation,
            self.extractor,
            self.calculator,
            self._locate_manifest,
        )
        for event_type, handler, name in self._handlers:
            session.on(event_type, handler, name)
        self._sessions[session.path] = session

        task = loop.create_task(self._run(session))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        logger.debug("Session %s (gen %d) scheduled", session.path, session.generation)
        return session

    async def _run(self, session: FileSession) -> None:
        try:
            await session.run()
        finally:
            if self._sessions.get(session.path) is session:
                del self._sessions[session.path]

    def session(self, path: str) -> Optional[FileSession]:
        return self._sessions.get(path)

    @property
    def live_paths(self) -> List[str]:
        return list(self._sessions)

    def cancel(self, path: str) -> bool:
        """Cancel the live session for ``path``; True if there was one."""
        session = self._sessions.pop(path, None)
        if session is None:
            return False
        session.cancel()
        return True

    def cancel_all(self) -> None:
        for path in list(self._sessions):
            self.cancel(path)

    async def drain(self) -> None:
        """Wait until every scheduled session task has finished."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)


__all__ = ["FileSession", "FileSessionManager", "SessionState", "UNCALCULATED"]
