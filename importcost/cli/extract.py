"""Extract command implementation."""

import json
import logging
from dataclasses import asdict
from pathlib import Path
from typing import Any, Dict, List

from rich.console import Console
from rich.table import Table

from importcost.models import ExtractionResult, SourceDocument
from importcost.parsers.base import ParseError
from importcost.runtime.api import ImportCostService
from importcost.runtime.config_loader import load_config

logger = logging.getLogger("importcost.cli.extract")


def _result_to_dict(file_name: str, result: ExtractionResult) -> Dict[str, Any]:
    return {
        "file": file_name,
        "packages": [
            {
                "name": ref.name,
                "line": ref.line,
                "kind": ref.kind.value,
                "loc": asdict(ref.loc),
                "snippet": ref.snippet,
            }
            for ref in result.packages
        ],
        "rejected": [asdict(rejected) for rejected in result.rejected],
    }


def _render_table(console: Console, file_name: str, result: ExtractionResult) -> None:
    table = Table(title=file_name, show_lines=False)
    table.add_column("Line", justify="right")
    table.add_column("Package")
    table.add_column("Kind")
    table.add_column("Snippet", overflow="fold")
    for ref in result.packages:
        table.add_row(str(ref.line), ref.name, ref.kind.value, ref.snippet)
    console.print(table)
    for rejected in result.rejected:
        detail = f" ({rejected.pattern})" if rejected.pattern else ""
        console.print(f"  skipped {rejected.name} on line {rejected.line}: {rejected.reason}{detail}")


def extract_command(args) -> int:
    """Execute extract command.

    Args:
        args: Parsed command-line arguments.

    Returns:
        int: Exit code, 1 when any file could not be processed.
    """
    console = Console()
    errors = Console(stderr=True)
    service = ImportCostService(load_config(args.config))
    exit_code = 0
    reports: List[Dict[str, Any]] = []

    for raw in args.files:
        path = Path(raw).resolve()
        try:
            text = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            errors.print(f"[red]Cannot read {path}: {exc}[/red]")
            exit_code = 1
            continue

        document = SourceDocument(path=path, text=text)
        dialect = service.detect_dialect(document)
        if dialect is None:
            errors.print(f"[yellow]Skipping {path}: not a recognized source file[/yellow]")
            exit_code = 1
            continue

        try:
            result = service.extractor.extract_result(str(path), text, dialect)
        except ParseError as exc:
            errors.print(f"[red]{path}: {exc}[/red]")
            exit_code = 1
            continue

        logger.debug("%s: %d package(s)", path, len(result.packages))
        if args.json:
            reports.append(_result_to_dict(str(path), result))
        else:
            _render_table(console, str(path), result)

    if args.json:
        print(json.dumps(reports, indent=2))
    return exit_code
