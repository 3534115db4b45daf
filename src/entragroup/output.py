"""Console rendering of report rows.

Rows arrive as records keyed by the report column names (see
ReportRow.to_record). They render as a rich table for people, or as JSON
or CSV for other programs. JSON and CSV use the column names as keys and
header, the same as the exported file.
"""

from __future__ import annotations

import csv
import io
import json
from enum import Enum

from rich import box
from rich.console import Console
from rich.table import Table

from entragroup.models import REPORT_COLUMNS


class OutputFormat(str, Enum):
    """Console output formats."""

    TABLE = "table"
    JSON = "json"
    CSV = "csv"


# Table headings for the report columns
HEADINGS = {
    "DisplayName": "Display Name",
    "UserPrincipalName": "User Principal Name",
    "Email": "Email",
    "JobTitle": "Job Title",
    "Department": "Department",
    "UserId": "User ID",
}


def report_table(records: list[dict[str, str]], plain: bool = False) -> Table:
    table = Table(
        box=box.ASCII if plain else box.SIMPLE_HEAD,
        header_style="" if plain else "bold cyan",
        show_edge=False,
    )
    for column in REPORT_COLUMNS:
        # User IDs are GUIDs; never wrap them
        table.add_column(HEADINGS[column], no_wrap=column == "UserId", overflow="fold")
    for record in records:
        table.add_row(*(record.get(column, "") for column in REPORT_COLUMNS))
    return table


def report_json(records: list[dict[str, str]]) -> str:
    # Names are printed as-is rather than as \u escapes
    return json.dumps(records, indent=2, ensure_ascii=False)


def report_csv(records: list[dict[str, str]]) -> str:
    buffer = io.StringIO()
    writer = csv.DictWriter(buffer, fieldnames=list(REPORT_COLUMNS), lineterminator="\n")
    writer.writeheader()
    writer.writerows(records)
    return buffer.getvalue()


class ReportPrinter:
    """Prints report records to stdout in one output format."""

    def __init__(
        self,
        format: OutputFormat = OutputFormat.TABLE,
        plain: bool = False,
        console: Console | None = None,
    ):
        self.format = format
        self.plain = plain
        self.console = console or Console(no_color=plain, highlight=False)

    def render(self, records: list[dict[str, str]]) -> str | Table:
        if self.format == OutputFormat.JSON:
            return report_json(records)
        if self.format == OutputFormat.CSV:
            return report_csv(records)
        return report_table(records, plain=self.plain)

    def print(self, records: list[dict[str, str]]) -> None:
        rendered = self.render(records)
        if isinstance(rendered, Table):
            self.console.print(rendered)
        else:
            # Bypass markup and wrapping so the text can be parsed back
            self.console.out(rendered, end="" if rendered.endswith("\n") else "\n", highlight=False)
