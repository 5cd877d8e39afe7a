"""Bundled cost calculator based on installed package size.

Used by the CLI when no external cost service is plugged in. The cost of
a package is the number of bytes its installed directory occupies on disk.
"""

import asyncio
import logging
import os
from pathlib import Path
from typing import AsyncIterator, Sequence

from importcost.models import PackageCost, PackageReference
from importcost.parsers.manifest import find_installed

logger = logging.getLogger("importcost.costs")


def directory_size(path: Path) -> int:
    """Sum the sizes of every regular file below ``path``."""
    total = 0
    for dirpath, _, filenames in os.walk(path):
        for filename in filenames:
            try:
                total += os.lstat(os.path.join(dirpath, filename)).st_size
            except OSError as exc:
                logger.debug("Skipping %s: %s", filename, exc)
    return total


class InstalledSizeCalculator:
    """Reports the on-disk size of each package's installed directory."""

    async def calculate(
        self, file_name: str, packages: Sequence[PackageReference]
    ) -> AsyncIterator[PackageCost]:
        for reference in packages:
            yield await asyncio.to_thread(self._measure, reference)

    @staticmethod
    def _measure(reference: PackageReference) -> PackageCost:
        installed = find_installed(reference)
        if installed is None:
            return PackageCost(reference=reference, error="package is not installed")
        size = directory_size(installed)
        logger.debug("%s: %d bytes in %s", reference.name, size, installed)
        return PackageCost(reference=reference, size=size)


__all__ = ["InstalledSizeCalculator", "directory_size"]
