"""User resource handler for Microsoft Graph."""

from __future__ import annotations

from entragroup.models import USER_FIELDS, UserProfile
from entragroup.resources.base import ResourceHandler


class UserHandler(ResourceHandler[UserProfile]):
    """Handler for directory user resources."""

    @property
    def resource_name(self) -> str:
        return "user"

    @property
    def api_path(self) -> str:
        return "/users"

    @property
    def model(self) -> type[UserProfile]:
        return UserProfile

    @property
    def default_select(self) -> tuple[str, ...]:
        return USER_FIELDS
