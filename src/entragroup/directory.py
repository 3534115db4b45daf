"""Directory access interface.

The report pipeline talks to the directory only through the six
operations of Directory. GraphDirectory implements them over Microsoft
Graph; tests substitute an in-memory implementation.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Iterable

from entragroup.client import Client, create_client_from_config
from entragroup.config import Config
from entragroup.errors import AuthenticationError, DirectoryError, ObjectNotFoundError
from entragroup.models import USER_FIELDS, Group, MemberRef, UserProfile
from entragroup.resources.groups import GroupHandler
from entragroup.resources.users import UserHandler
from entragroup.utils.auth import OAuthError, missing_scopes, token_permissions

logger = logging.getLogger(__name__)


class Directory(ABC):
    """Operations the report needs from a directory service."""

    @abstractmethod
    def open_session(self, scopes: Iterable[str]) -> None:
        """Authenticate with the given permissions.

        Raises:
            AuthenticationError: If credentials or consent are rejected
        """

    @abstractmethod
    def close_session(self) -> None:
        """Release the session."""

    @abstractmethod
    def get_group(self, group_id: str) -> Group | None:
        """Look up a group by ID. Returns None if there is no such group."""

    @abstractmethod
    def find_groups(self, display_name: str) -> list[Group]:
        """Groups whose display name equals display_name, in provider order."""

    @abstractmethod
    def list_group_members(self, group_id: str) -> list[MemberRef]:
        """The complete membership of a group (all pages)."""

    @abstractmethod
    def get_user(self, user_id: str, fields: Iterable[str] = USER_FIELDS) -> UserProfile:
        """Fetch a user profile.

        Raises:
            DirectoryError: If the user cannot be read (not found, access
                denied or any other API failure)
        """


class GraphDirectory(Directory):
    """Directory backed by the Microsoft Graph v1.0 API."""

    def __init__(self, client: Client, transitive: bool = False):
        self.client = client
        self.transitive = transitive
        self.groups = GroupHandler(client)
        self.users = UserHandler(client)

    def open_session(self, scopes: Iterable[str]) -> None:
        scopes = list(scopes)
        logger.debug(f"Opening Graph session for {', '.join(scopes)}")
        try:
            token = self.client.credential.token()
        except OAuthError as e:
            detail = f" ({e.error_description.splitlines()[0]})" if e.error_description else ""
            raise AuthenticationError(f"Authentication failed: {e}{detail}") from e

        granted = token_permissions(token)
        if granted is None:
            logger.debug("Access token is not a readable JWT; skipping permission check")
            return
        missing = missing_scopes(granted, scopes)
        if missing:
            raise AuthenticationError(
                f"Access token lacks required permission(s): {', '.join(missing)}. "
                "Grant them to the app registration and give admin consent."
            )

    def close_session(self) -> None:
        logger.debug("Closing Graph session")
        self.client.close()

    def get_group(self, group_id: str) -> Group | None:
        try:
            return self.groups.get(group_id)
        except ObjectNotFoundError:
            return None

    def find_groups(self, display_name: str) -> list[Group]:
        return self.groups.find_by_name(display_name)

    def list_group_members(self, group_id: str) -> list[MemberRef]:
        return self.groups.get_members(group_id, transitive=self.transitive)

    def get_user(self, user_id: str, fields: Iterable[str] = USER_FIELDS) -> UserProfile:
        try:
            return self.users.get(user_id, select=fields)
        except DirectoryError:
            raise
        except ValueError as e:
            # Malformed payload (pydantic ValidationError)
            raise DirectoryError(f"Unexpected user payload for {user_id}: {e}") from e


def create_directory_from_config(
    config: Config | None = None,
    context_name: str | None = None,
    verbose: bool = False,
    transitive: bool = False,
) -> GraphDirectory:
    """Create a Graph directory from configuration.

    Raises:
        PreconditionError: If no credentials are configured
    """
    client = create_client_from_config(config, context_name, verbose)
    return GraphDirectory(client, transitive=transitive)
