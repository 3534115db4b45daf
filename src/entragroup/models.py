"""Directory data models.

Graph returns camelCase JSON; the models accept it through aliases and
expose snake_case attributes.
"""

from __future__ import annotations

import re
from typing import Any

from pydantic import BaseModel, Field


# Column order of the report (table and CSV)
REPORT_COLUMNS = (
    "DisplayName",
    "UserPrincipalName",
    "Email",
    "JobTitle",
    "Department",
    "UserId",
)

# Fields requested from the user endpoint
USER_FIELDS = ("id", "displayName", "userPrincipalName", "mail", "jobTitle", "department")

USER_TYPE = "user"


def object_type_from_odata(odata_type: str | None) -> str | None:
    """Convert a Graph @odata.type to a member type discriminator.

    Examples:
        '#microsoft.graph.user' -> 'user'
        '#microsoft.graph.servicePrincipal' -> 'service-principal'
        None -> None
    """
    if not odata_type:
        return None
    name = odata_type.rsplit(".", 1)[-1]
    return re.sub(r"(?<!^)(?=[A-Z])", "-", name).lower()


class Group(BaseModel):
    """A directory group."""

    id: str
    display_name: str = Field(default="", alias="displayName")

    model_config = {"populate_by_name": True, "frozen": True}


class MemberRef(BaseModel):
    """A group member reference as returned by the membership listing."""

    id: str
    object_type: str | None = None

    model_config = {"frozen": True}

    @classmethod
    def from_graph(cls, data: dict[str, Any]) -> "MemberRef":
        return cls(id=data["id"], object_type=object_type_from_odata(data.get("@odata.type")))

    @property
    def is_user(self) -> bool:
        """True for user members and for members without a type."""
        return self.object_type is None or self.object_type == USER_TYPE


class UserProfile(BaseModel):
    """The subset of a user's profile included in the report."""

    id: str
    display_name: str | None = Field(default=None, alias="displayName")
    user_principal_name: str | None = Field(default=None, alias="userPrincipalName")
    mail: str | None = None
    job_title: str | None = Field(default=None, alias="jobTitle")
    department: str | None = None

    model_config = {"populate_by_name": True, "frozen": True}


class ReportRow(BaseModel):
    """One report line per resolved user member."""

    display_name: str | None = Field(default=None, alias="DisplayName")
    user_principal_name: str | None = Field(default=None, alias="UserPrincipalName")
    email: str | None = Field(default=None, alias="Email")
    job_title: str | None = Field(default=None, alias="JobTitle")
    department: str | None = Field(default=None, alias="Department")
    user_id: str = Field(alias="UserId")

    model_config = {"populate_by_name": True, "frozen": True}

    @classmethod
    def from_profile(cls, profile: UserProfile) -> "ReportRow":
        return cls(
            display_name=profile.display_name,
            user_principal_name=profile.user_principal_name,
            email=profile.mail,
            job_title=profile.job_title,
            department=profile.department,
            user_id=profile.id,
        )

    @classmethod
    def from_record(cls, record: dict[str, str]) -> "ReportRow":
        """Build a row from a CSV record. Empty cells become None."""
        return cls.model_validate({key: record.get(key) or None for key in REPORT_COLUMNS})

    def to_record(self) -> dict[str, str]:
        """Row as an ordered dict of presentation column -> text."""
        data = self.model_dump(by_alias=True)
        return {key: data[key] if data[key] is not None else "" for key in REPORT_COLUMNS}
