"""Group resource handler for Microsoft Graph.

Handles group lookups by ID or display name and membership listing.
"""

from __future__ import annotations

from entragroup.client import APIError
from entragroup.models import Group, MemberRef
from entragroup.resources.base import ResourceHandler


def odata_quote(value: str) -> str:
    """Quote a string literal for an OData $filter (single quotes doubled)."""
    return "'" + value.replace("'", "''") + "'"


class GroupHandler(ResourceHandler[Group]):
    """Handler for directory group resources."""

    @property
    def resource_name(self) -> str:
        return "group"

    @property
    def api_path(self) -> str:
        return "/groups"

    @property
    def model(self) -> type[Group]:
        return Group

    @property
    def default_select(self) -> tuple[str, ...]:
        return ("id", "displayName")

    def find_by_name(self, display_name: str) -> list[Group]:
        """Find groups whose display name equals the given name.

        Display names are not unique; all matches are returned in the
        order the API returned them.

        Args:
            display_name: Exact display name

        Returns:
            Matching groups (possibly empty)
        """
        items = self.list(**{
            "$filter": f"displayName eq {odata_quote(display_name)}",
            "$select": ",".join(self.default_select),
        })
        return [Group.model_validate(item) for item in items]

    def get_members(self, group_id: str, transitive: bool = False) -> list[MemberRef]:
        """Get all member references of a group.

        Args:
            group_id: Group object ID
            transitive: Include members of nested groups

        Returns:
            Member references with their object type
        """
        relation = "transitiveMembers" if transitive else "members"
        try:
            items = self.client.get_all(
                f"{self.api_path}/{group_id}/{relation}",
                params={"$select": "id", "$top": 999},
            )
        except APIError as e:
            self._handle_error("list members of", group_id, e)
            raise
        return [MemberRef.from_graph(item) for item in items]
