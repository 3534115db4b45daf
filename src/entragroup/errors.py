"""Error and warning types for entragroup.

Fatal errors derive from EntraGroupError and abort the run (after the
directory session has been closed). Non-fatal conditions derive from
ReportWarning; they are collected on the report and never interrupt
control flow.
"""

from __future__ import annotations


class EntraGroupError(Exception):
    """Base class for fatal errors.

    Attributes:
        stage: Pipeline stage that failed (e.g. 'session', 'group resolution')
    """

    default_stage: str | None = None

    def __init__(self, message: str, stage: str | None = None):
        super().__init__(message)
        self.stage = stage or self.default_stage


class PreconditionError(EntraGroupError):
    """Required configuration or credentials are missing.

    Raised before any network activity takes place.
    """

    default_stage = "precondition"


class AuthenticationError(EntraGroupError):
    """The directory session could not be established."""

    default_stage = "session"


class GroupNotFoundError(EntraGroupError):
    """No group matched the supplied name or identifier."""

    default_stage = "group resolution"


class ExportError(EntraGroupError):
    """The CSV destination could not be written."""

    default_stage = "export"

    def __init__(self, message: str, path: str | None = None):
        super().__init__(message)
        self.path = path


class DirectoryError(EntraGroupError):
    """A directory API call failed."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        stage: str | None = None,
    ):
        super().__init__(message, stage=stage)
        self.status_code = status_code


class ObjectNotFoundError(DirectoryError):
    """The directory returned no object for the requested identifier."""


class AccessDeniedError(DirectoryError):
    """The session lacks permission to read the requested object."""


class ReportWarning(UserWarning):
    """Base class for non-fatal conditions recorded during a run."""


class MultipleMatchesWarning(ReportWarning):
    """More than one group matched a display name; the first was used."""

    def __init__(self, name: str, count: int, candidates: list[str] | None = None):
        self.name = name
        self.count = count
        self.candidates = list(candidates or [])
        message = f"{count} groups match display name '{name}'; using the first match"
        if self.candidates:
            message += f" ({self.candidates[0]}). Candidates: {', '.join(self.candidates)}"
        super().__init__(message)


class MemberResolutionWarning(ReportWarning):
    """A user member's profile could not be fetched; the member was skipped."""

    def __init__(self, member_id: str, reason: str = ""):
        self.member_id = member_id
        self.reason = reason
        message = f"Could not resolve member {member_id}"
        if reason:
            message += f": {reason}"
        super().__init__(message)
