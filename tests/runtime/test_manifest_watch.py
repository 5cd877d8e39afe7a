"""Tests for the manifest watch registry."""

from __future__ import annotations

from pathlib import Path

from importcost.parsers import ResolutionCache
from importcost.runtime.eventbus import Event, EventType
from importcost.runtime.manifest_watch import ManifestWatchRegistry


class FakeWatcher:
    def __init__(self) -> None:
        self.callbacks = {}

    def watch(self, path, callback):
        self.callbacks.setdefault(Path(path), []).append(callback)
        return path

    def fire(self, path) -> None:
        for callback in self.callbacks[Path(path)]:
            callback(Path(path))


def test_registration_is_idempotent(tmp_path: Path) -> None:
    watcher = FakeWatcher()
    registry = ManifestWatchRegistry(ResolutionCache(), watcher)
    manifest = tmp_path / "package.json"

    assert registry.register(manifest) is True
    assert registry.register(manifest) is False
    assert registry.register(str(manifest)) is False

    assert len(registry) == 1
    assert manifest in registry
    assert len(watcher.callbacks[manifest]) == 1


def test_change_clears_cache_and_notifies(tmp_path: Path) -> None:
    cache = ResolutionCache()
    cache.set("/src/util", True)
    invalidated = []
    watcher = FakeWatcher()
    registry = ManifestWatchRegistry(cache, watcher, on_invalidate=lambda: invalidated.append(1))
    manifest = tmp_path / "node_modules" / "a" / "package.json"
    registry.register(manifest)

    watcher.fire(manifest)

    assert len(cache) == 0
    assert invalidated == [1]


def test_watch_table_is_capped(tmp_path: Path) -> None:
    registry = ManifestWatchRegistry(ResolutionCache(), FakeWatcher(), max_watches=2)

    results = [registry.register(tmp_path / name / "package.json") for name in "abc"]

    assert results == [True, True, False]
    assert registry.watched == [tmp_path / "a" / "package.json", tmp_path / "b" / "package.json"]


def test_package_event_registers_manifest(tmp_path: Path) -> None:
    registry = ManifestWatchRegistry(ResolutionCache(), FakeWatcher())
    manifest = tmp_path / "package.json"

    registry.handle_package_event(
        Event(EventType.PACKAGE, str(tmp_path / "index.js"), data={"manifest": str(manifest)})
    )

    assert registry.watched == [manifest]
