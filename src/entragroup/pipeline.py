"""Group member report pipeline.

Session -> group resolution -> member enumeration -> output, with the
directory session closed exactly once on every exit path.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

from entragroup.directory import Directory
from entragroup.errors import EntraGroupError, ExportError, ReportWarning
from entragroup.export import ReportEmitter
from entragroup.members import MemberEnumerator
from entragroup.models import Group, ReportRow
from entragroup.session import DirectorySession
from entragroup.utils.resolver import GroupResolver

logger = logging.getLogger(__name__)


@dataclass
class Report:
    """Outcome of a report run."""

    group: Group
    rows: list[ReportRow] = field(default_factory=list)
    warnings: list[ReportWarning] = field(default_factory=list)
    csv_path: Path | None = None
    export_error: ExportError | None = None

    def warnings_of(self, kind: type[ReportWarning]) -> list[ReportWarning]:
        return [w for w in self.warnings if isinstance(w, kind)]


def run_report(
    directory: Directory,
    group_name: str | None = None,
    group_id: str | None = None,
    export_csv: bool = False,
    csv_path: Path | None = None,
    emitter: ReportEmitter | None = None,
) -> Report:
    """Produce the user member report of one group.

    Args:
        directory: Directory to query
        group_name: Group display name (exclusive with group_id)
        group_id: Group object ID (exclusive with group_name)
        export_csv: Write a CSV file instead of rendering to the console
        csv_path: CSV destination (derived from the group name if omitted)
        emitter: Output stage (a console emitter if omitted)

    Returns:
        The report. A failed CSV write is recorded on export_error; the
        rows are still returned.

    Raises:
        AuthenticationError: If the session cannot be opened
        GroupNotFoundError: If no group matches
        DirectoryError: If the group or its membership cannot be read
    """
    emitter = emitter or ReportEmitter()
    stage = "session"

    try:
        with DirectorySession(directory) as session:
            stage = "group resolution"
            resolver = GroupResolver(session)
            group = resolver.resolve(group_name=group_name, group_id=group_id)

            stage = "member enumeration"
            enumerator = MemberEnumerator(session)
            rows = enumerator.enumerate(group)

            report = Report(
                group=group,
                rows=rows,
                warnings=resolver.warnings + enumerator.warnings,
            )

            stage = "export"
            try:
                emitter.emit(rows, group.display_name, export_csv=export_csv, csv_path=csv_path)
                report.csv_path = emitter.written_path
            except ExportError as e:
                logger.debug(str(e))
                report.export_error = e
    except EntraGroupError as e:
        if e.stage is None:
            e.stage = stage
        raise

    logger.info(
        f"Report for '{group.display_name}': {len(report.rows)} row(s), "
        f"{len(report.warnings)} warning(s)"
    )
    return report
