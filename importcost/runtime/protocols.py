"""
Protocol definitions for external collaborators.

The core never computes package costs or receives filesystem change
notifications itself; it talks to these collaborators through the
protocols below so that editors, tests and the CLI can plug in their own.
"""

from pathlib import Path
from typing import Any, AsyncIterator, Callable, Protocol, Sequence

from importcost.models import PackageCost, PackageReference


class CostCalculator(Protocol):
    """
    Computes the cost of each package referenced by one file.

    Implementations yield one ``PackageCost`` per package as soon as it is
    known, in any order. Exhausting the iterator signals completion; a
    package that never gets a result is reported as uncalculated.

    Example:
        async for cost in calculator.calculate(file_name, packages):
            render(cost)
    """

    def calculate(
        self, file_name: str, packages: Sequence[PackageReference]
    ) -> AsyncIterator[PackageCost]:
        ...


class FileWatcher(Protocol):
    """
    Delivers change notifications for individual files.

    ``watch`` must invoke ``callback`` with the path every time the file
    changes, for as long as the process runs.
    """

    def watch(self, path: Path, callback: Callable[[Path], None]) -> Any:
        ...


__all__ = ["CostCalculator", "FileWatcher"]
