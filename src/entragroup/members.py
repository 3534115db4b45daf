"""Group member enumeration.

Lists a group's membership, keeps the user members and fetches the
profile of each one, in membership order.
"""

from __future__ import annotations

import logging

from entragroup.errors import DirectoryError, MemberResolutionWarning, ReportWarning
from entragroup.models import USER_FIELDS, Group, MemberRef, ReportRow
from entragroup.session import DirectorySession

logger = logging.getLogger(__name__)


def user_members(members: list[MemberRef]) -> list[MemberRef]:
    """Filter member references down to users, first occurrence per ID.

    References without a type are kept as user candidates.
    """
    seen: set[str] = set()
    users = []
    for member in members:
        if not member.is_user:
            logger.debug(f"Skipping {member.object_type} member {member.id}")
            continue
        if member.id in seen:
            continue
        seen.add(member.id)
        users.append(member)
    return users


class MemberEnumerator:
    """Builds report rows for the user members of a group.

    Profiles are fetched one at a time. A member whose profile cannot be
    fetched is left out of the report and recorded as a
    MemberResolutionWarning; enumeration carries on with the next member.
    """

    def __init__(self, session: DirectorySession):
        self.session = session
        self.warnings: list[ReportWarning] = []

    def enumerate(self, group: Group) -> list[ReportRow]:
        """Report rows for every resolvable user member of group."""
        directory = self.session.directory

        members = directory.list_group_members(group.id)
        users = user_members(members)
        logger.info(
            f"Group '{group.display_name}' has {len(members)} member(s), {len(users)} user(s)"
        )

        rows = []
        for member in users:
            try:
                profile = directory.get_user(member.id, USER_FIELDS)
            except DirectoryError as e:
                warning = MemberResolutionWarning(member.id, str(e))
                self.warnings.append(warning)
                logger.info(str(warning))
                continue
            rows.append(ReportRow.from_profile(profile))

        return rows
