"""Report output: console rendering and CSV export."""

from __future__ import annotations

import csv
import logging
import re
from datetime import datetime
from pathlib import Path
from typing import Callable

from rich.console import Console
from rich.markup import escape

from entragroup.errors import ExportError
from entragroup.models import REPORT_COLUMNS, ReportRow
from entragroup.output import OutputFormat, ReportPrinter

logger = logging.getLogger(__name__)

# UTF-8 with a byte order mark so spreadsheet tools detect the encoding
CSV_ENCODING = "utf-8-sig"

INVALID_FILENAME_CHARS = re.compile(r'[\\/:*?"<>|]')


def sanitize_filename(name: str) -> str:
    r"""Replace each of \ / : * ? " < > | with an underscore."""
    return INVALID_FILENAME_CHARS.sub("_", name)


def default_csv_path(group_name: str, now: datetime, directory: Path | None = None) -> Path:
    """Derive EntraGroup_<name>_<yyyyMMdd_HHmmss>.csv in directory (default: cwd)."""
    filename = f"EntraGroup_{sanitize_filename(group_name)}_{now:%Y%m%d_%H%M%S}.csv"
    return (directory or Path.cwd()) / filename


def write_csv(rows: list[ReportRow], path: Path) -> Path:
    """Write rows to a CSV file with a header row.

    Missing parent directories are created.

    Raises:
        ExportError: If the directory or file cannot be written
    """
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", newline="", encoding=CSV_ENCODING) as f:
            writer = csv.DictWriter(f, fieldnames=list(REPORT_COLUMNS))
            writer.writeheader()
            writer.writerows(row.to_record() for row in rows)
    except OSError as e:
        raise ExportError(f"Cannot write CSV to {path}: {e}", path=str(path)) from e
    return path


def read_csv(path: Path) -> list[ReportRow]:
    """Read a CSV written by write_csv back into report rows."""
    with open(path, newline="", encoding=CSV_ENCODING) as f:
        return [ReportRow.from_record(record) for record in csv.DictReader(f)]


class ReportEmitter:
    """Renders report rows to the console or writes them to CSV.

    Informational notices go to the notice console (stderr by default) so
    that machine-readable output on stdout stays clean.
    """

    def __init__(
        self,
        printer: ReportPrinter | None = None,
        console: Console | None = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.printer = printer or ReportPrinter()
        self.console = console or Console(stderr=True)
        self.clock = clock
        self.written_path: Path | None = None

    def emit(
        self,
        rows: list[ReportRow],
        group_name: str,
        export_csv: bool = False,
        csv_path: Path | None = None,
    ) -> list[ReportRow]:
        """Render or export rows and return them unchanged.

        Raises:
            ExportError: If the CSV destination cannot be written
        """
        self.written_path = None

        if not rows:
            logger.info(f"No user members found in group '{group_name}'")
            self.console.print(f"[yellow]No user members found in group '{escape(group_name)}'.[/yellow]")
            return rows

        if not export_csv:
            self._render(rows, group_name)
            return rows

        path = Path(csv_path) if csv_path else default_csv_path(group_name, self.clock())
        self.written_path = write_csv(rows, path)
        logger.info(f"Wrote {len(rows)} row(s) to {path}")
        self.console.print(
            f"[green]Exported[/green] {len(rows)} member(s) of group '{escape(group_name)}' to {escape(str(path))}"
        )
        return rows

    def _render(self, rows: list[ReportRow], group_name: str) -> None:
        if self.printer.format == OutputFormat.TABLE:
            self.console.print(
                f"\n[bold]Members of group: {escape(group_name)}[/bold] ({len(rows)} total)\n"
            )
        self.printer.print([row.to_record() for row in rows])
