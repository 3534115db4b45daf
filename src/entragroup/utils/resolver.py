"""Group resolution.

Resolves a group display name or object ID to exactly one group.
"""

from __future__ import annotations

import logging

from entragroup.errors import GroupNotFoundError, MultipleMatchesWarning, ReportWarning
from entragroup.models import Group
from entragroup.session import DirectorySession

logger = logging.getLogger(__name__)


class GroupResolver:
    """Resolves a group name or ID to a single Group.

    Name lookups that match several groups use the first group in the
    order the directory returned them and record a MultipleMatchesWarning.
    That order is not guaranteed to be stable between runs.
    """

    def __init__(self, session: DirectorySession):
        self.session = session
        self.warnings: list[ReportWarning] = []

    def resolve(self, group_name: str | None = None, group_id: str | None = None) -> Group:
        """Resolve exactly one of group_name or group_id to a group.

        Raises:
            ValueError: If neither or both identifiers are given
            GroupNotFoundError: If no group matches
        """
        if (group_name is None) == (group_id is None):
            raise ValueError("Exactly one of group_name or group_id is required")

        if group_id is not None:
            return self.resolve_id(group_id)
        return self.resolve_name(group_name)  # type: ignore[arg-type]

    def resolve_id(self, group_id: str) -> Group:
        group = self.session.directory.get_group(group_id)
        if group is None:
            raise GroupNotFoundError(f"Group not found: ID '{group_id}'")

        logger.info(f"Resolved group ID {group_id} to '{group.display_name}'")
        return group

    def resolve_name(self, group_name: str) -> Group:
        matches = self.session.directory.find_groups(group_name)
        if not matches:
            raise GroupNotFoundError(f"Group not found: name '{group_name}'")

        if len(matches) > 1:
            warning = MultipleMatchesWarning(
                group_name, len(matches), [g.id for g in matches]
            )
            self.warnings.append(warning)
            logger.info(str(warning))

        group = matches[0]
        logger.info(f"Resolved group '{group_name}' to {group.id}")
        return group
