"""Watch command implementation.

Processes one file, prints its session events as they arrive and keeps
the results fresh when the file or any referenced manifest changes.
"""

import asyncio
import logging
from pathlib import Path

from rich.console import Console

from importcost.models import PackageCost, SourceDocument
from importcost.runtime.api import ImportCostService
from importcost.runtime.config_loader import load_config
from importcost.runtime.eventbus import Event, EventType
from importcost.runtime.watchers import PollingFileWatcher

logger = logging.getLogger("importcost.cli.watch")


def _format_cost(cost: PackageCost) -> str:
    if cost.ok:
        return f"{cost.reference.name}: {cost.size:,} bytes"
    return f"{cost.reference.name}: {cost.error}"


class _EventPrinter:
    """Renders session events on the console."""

    def __init__(self, console: Console) -> None:
        self.console = console

    def attach(self, service: ImportCostService) -> None:
        service.sessions.subscribe(EventType.START, self.start, "print_start")
        service.sessions.subscribe(EventType.CALCULATED, self.calculated, "print_calculated")
        service.sessions.subscribe(EventType.DONE, self.done, "print_done")
        service.sessions.subscribe(EventType.ERROR, self.error, "print_error")

    def start(self, event: Event) -> None:
        packages = event.data["packages"]
        self.console.rule(f"{event.source} ({len(packages)} package(s))")
        for ref in packages:
            self.console.print(f"  line {ref.line}: {ref.name} ...")

    def calculated(self, event: Event) -> None:
        self.console.print(f"  {_format_cost(event.data['package'])}")

    def done(self, event: Event) -> None:
        total = sum(cost.size or 0 for cost in event.data["packages"])
        self.console.print(f"[green]done[/green]: {total:,} bytes in total")

    def error(self, event: Event) -> None:
        self.console.print(f"[red]error[/red]: {event.data['message']}")


def _read(path: Path) -> SourceDocument:
    return SourceDocument(path=path, text=path.read_text(encoding="utf-8"))


async def _watch(path: Path, service: ImportCostService, watcher: PollingFileWatcher, once: bool) -> int:
    if service.process(_read(path)) is None:
        logger.error("%s is not a recognized source file", path)
        return 1
    if once:
        await service.sessions.drain()
        return 0

    def reprocess(changed: Path) -> None:
        if changed.exists():
            service.process(_read(changed))

    watcher.watch(path, reprocess)
    watcher.start()
    try:
        await asyncio.Event().wait()
    finally:
        watcher.stop()
    return 0


def watch_command(args) -> int:
    """Execute watch command.

    Args:
        args: Parsed command-line arguments.

    Returns:
        int: Exit code.
    """
    path = Path(args.file).resolve()
    if not path.is_file():
        logger.error("No such file: %s", path)
        return 1
    config = load_config(args.config)
    watcher = PollingFileWatcher(config.poll_interval)
    service = ImportCostService(config, watcher=watcher)
    _EventPrinter(Console()).attach(service)
    try:
        return asyncio.run(_watch(path, service, watcher, args.once))
    except KeyboardInterrupt:
        return 0
