"""Tests for the bundled installed-size cost calculator."""

from __future__ import annotations

import asyncio
from pathlib import Path

from importcost.costs import InstalledSizeCalculator, directory_size
from importcost.models import PackageReference, SourceLocation


def _reference(file_name: Path, name: str) -> PackageReference:
    return PackageReference(
        file_name=str(file_name),
        name=name,
        line=1,
        loc=SourceLocation(1, 0, 1, 0),
        snippet=f"require('{name}')",
    )


def test_directory_size_sums_nested_files(tmp_path: Path) -> None:
    (tmp_path / "a.js").write_bytes(b"x" * 10)
    (tmp_path / "lib").mkdir()
    (tmp_path / "lib" / "b.js").write_bytes(b"y" * 5)

    assert directory_size(tmp_path) == 15


def test_calculator_reports_size_and_missing_packages(tmp_path: Path) -> None:
    """Verify installed packages are measured and others carry an error."""

    installed = tmp_path / "node_modules" / "left-pad"
    installed.mkdir(parents=True)
    (installed / "package.json").write_bytes(b"{}")
    (installed / "index.js").write_bytes(b"z" * 98)
    source = tmp_path / "index.js"

    async def collect():
        calculator = InstalledSizeCalculator()
        packages = [_reference(source, "left-pad"), _reference(source, "not-installed")]
        return [cost async for cost in calculator.calculate(str(source), packages)]

    costs = asyncio.run(collect())

    assert [(c.reference.name, c.size) for c in costs] == [("left-pad", 100), ("not-installed", None)]
    assert costs[0].ok
    assert costs[1].error == "package is not installed"
