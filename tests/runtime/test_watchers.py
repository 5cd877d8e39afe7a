"""Tests for the polling file watcher."""

from __future__ import annotations

import asyncio
from pathlib import Path

from importcost.runtime.watchers import PollingFileWatcher


def test_poll_once_reports_changes(tmp_path: Path) -> None:
    manifest = tmp_path / "package.json"
    manifest.write_text("{}", encoding="utf-8")
    seen = []
    watcher = PollingFileWatcher()
    watcher.watch(manifest, seen.append)

    assert watcher.poll_once() == []

    manifest.write_text('{"version": "2.0.0"}', encoding="utf-8")
    assert watcher.poll_once() == [manifest]
    assert seen == [manifest]
    assert watcher.poll_once() == []


def test_creation_and_deletion_are_changes(tmp_path: Path) -> None:
    manifest = tmp_path / "package.json"
    watcher = PollingFileWatcher()
    watcher.watch(manifest, lambda path: None)

    manifest.write_text("{}", encoding="utf-8")
    assert watcher.poll_once() == [manifest]

    manifest.unlink()
    assert watcher.poll_once() == [manifest]


def test_failing_callback_is_isolated(tmp_path: Path) -> None:
    manifest = tmp_path / "package.json"
    seen = []
    watcher = PollingFileWatcher()

    def broken(path):
        raise RuntimeError("boom")

    watcher.watch(manifest, broken)
    watcher.watch(manifest, seen.append)
    manifest.write_text("{}", encoding="utf-8")

    assert watcher.poll_once() == [manifest]
    assert seen == [manifest]
    assert watcher.paths == [manifest]


def test_start_polls_on_the_event_loop(tmp_path: Path) -> None:
    manifest = tmp_path / "package.json"
    seen = []

    async def scenario():
        watcher = PollingFileWatcher(interval=0.01)
        watcher.watch(manifest, seen.append)
        watcher.start()
        manifest.write_text("{}", encoding="utf-8")
        for _ in range(100):
            if seen:
                break
            await asyncio.sleep(0.01)
        watcher.stop()

    asyncio.run(scenario())

    assert seen == [manifest]
