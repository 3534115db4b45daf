"""CLI commands and the global options they share."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from entragroup.output import OutputFormat


@dataclass
class Settings:
    """Global options, available to commands as ctx.obj."""

    context: Optional[str] = None
    output: OutputFormat = OutputFormat.TABLE
    verbose: bool = False
    plain: bool = False
