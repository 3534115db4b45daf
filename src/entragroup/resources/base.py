"""Base class for resource handlers.

Provides common functionality for Graph directory object handlers,
including point lookups, $select handling and error translation.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Generic, Iterable, TypeVar

from pydantic import BaseModel

from entragroup.client import Client, APIError
from entragroup.errors import AccessDeniedError, DirectoryError, ObjectNotFoundError


T = TypeVar("T", bound=BaseModel)

# Graph answers a malformed object id with 400 rather than 404
INVALID_ID_CODES = {"Request_BadRequest", "Request_ResourceNotFound", "ResourceNotFound"}


class ResourceHandler(ABC, Generic[T]):
    """Base class for resource handlers."""

    def __init__(self, client: Client):
        self.client = client

    @property
    @abstractmethod
    def resource_name(self) -> str:
        """Human-readable resource name (e.g., 'group')."""
        pass

    @property
    @abstractmethod
    def api_path(self) -> str:
        """Base API path for this resource."""
        pass

    @property
    @abstractmethod
    def model(self) -> type[T]:
        """Model the raw JSON is parsed into."""
        pass

    @property
    def default_select(self) -> tuple[str, ...]:
        """Fields requested when the caller does not specify any."""
        return ("id",)

    def _handle_error(self, operation: str, resource_id: str | None, error: APIError) -> None:
        """Translate API errors into directory errors."""
        target = f"{self.resource_name} {resource_id}" if resource_id else self.resource_name
        if resource_id and (
            error.status_code == 404
            or (error.status_code == 400 and error.error_code in INVALID_ID_CODES)
        ):
            raise ObjectNotFoundError(
                f"{self.resource_name.title()} not found: {resource_id}",
                status_code=error.status_code,
            ) from error
        elif error.status_code == 403:
            raise AccessDeniedError(
                f"Permission denied for {operation} on {target}",
                status_code=error.status_code,
            ) from error
        else:
            raise DirectoryError(
                f"Failed to {operation} {target}: {error}",
                status_code=error.status_code,
            ) from error

    def get(self, resource_id: str, select: Iterable[str] | None = None) -> T:
        """Get a single object by ID.

        Args:
            resource_id: Directory object ID
            select: Fields to request ($select)

        Returns:
            Parsed model

        Raises:
            ObjectNotFoundError: If no object has this ID
            AccessDeniedError: If the session may not read the object
            DirectoryError: For any other API failure
        """
        fields = ",".join(select or self.default_select)
        try:
            response = self.client.get(
                f"{self.api_path}/{resource_id}", params={"$select": fields}
            )
        except APIError as e:
            self._handle_error("get", resource_id, e)
            raise
        return self.model.model_validate(response.json())

    def list(self, **params: Any) -> list[dict[str, Any]]:
        """List all objects, following pagination.

        Args:
            **params: OData query parameters ($filter, $select, ...)

        Returns:
            List of raw object dictionaries
        """
        try:
            return self.client.get_all(self.api_path, params=params or None)
        except APIError as e:
            self._handle_error("list", None, e)
            raise
