"""HTTP client for Microsoft Graph API interactions.

Provides an HTTP client with:
- app-only (client secret) or pre-issued bearer token authentication
- @odata.nextLink pagination
- Graph error body parsing
- Debug/verbose logging

Requests are issued exactly once; throttling and transient failures are
reported to the caller as APIError.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from entragroup import __version__
from entragroup.config import AppRegistration, Config, env, load_config
from entragroup.errors import DirectoryError
from entragroup.utils.auth import (
    BearerToken,
    ClientSecretCredential,
    OAuthError,
    TokenSource,
)

logger = logging.getLogger(__name__)

# Microsoft Graph v1.0 base URL
GRAPH_API_BASE = "https://graph.microsoft.com/v1.0"


class APIError(DirectoryError):
    """Exception raised for Graph API errors."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        response_body: str | None = None,
        error_code: str | None = None,
    ):
        super().__init__(message, status_code=status_code)
        self.response_body = response_body
        self.error_code = error_code


def parse_graph_error(response: httpx.Response) -> tuple[str | None, str | None]:
    """Extract (code, message) from a Graph error response body."""
    try:
        data = response.json()
    except ValueError:
        return None, None
    error = data.get("error") if isinstance(data, dict) else None
    if not isinstance(error, dict):
        return None, None
    return error.get("code"), error.get("message")


class Client:
    """HTTP client for Microsoft Graph."""

    def __init__(
        self,
        credential: TokenSource,
        base_url: str = GRAPH_API_BASE,
        timeout: float = 30.0,
        verbose: bool = False,
    ):
        self.credential = credential
        self.base_url = base_url.rstrip("/")
        self.verbose = verbose

        self._client = httpx.Client(
            timeout=timeout,
            headers={
                "Accept": "application/json",
                "User-Agent": f"entragroup/{__version__}",
            },
        )

    def close(self) -> None:
        self._client.close()
        self.credential.close()

    def __enter__(self) -> "Client":
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    def _build_url(self, path: str) -> str:
        if path.startswith("http"):
            return path
        return f"{self.base_url}/{path.lstrip('/')}"

    def request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        """Make a single HTTP request.

        Args:
            method: HTTP method
            path: API path (joined with base_url if relative) or absolute URL
                such as an @odata.nextLink
            **kwargs: Additional arguments passed to httpx

        Raises:
            APIError: If no token can be obtained, the request cannot be
                sent, or Graph answers with a non-success status
        """
        url = self._build_url(path)
        try:
            headers = {**self.credential.authorization(), **kwargs.pop("headers", {})}
        except OAuthError as e:
            raise APIError(f"Could not obtain an access token: {e}") from e

        if self.verbose:
            logger.debug(f"{method} {url} params={kwargs.get('params')}")

        try:
            response = self._client.request(method, url, headers=headers, **kwargs)
        except httpx.RequestError as e:
            raise APIError(f"Request failed: {e}") from e

        if self.verbose:
            logger.debug(f"{response.status_code} {response.text[:500]}")

        if response.is_success:
            return response

        error_code, error_message = parse_graph_error(response)
        message = f"Request failed: {response.status_code} {response.reason_phrase}"
        if error_message:
            message += f" - {error_message}"
        raise APIError(
            message,
            status_code=response.status_code,
            response_body=response.text,
            error_code=error_code,
        )

    def get(self, path: str, **kwargs: Any) -> httpx.Response:
        """Make a GET request."""
        return self.request("GET", path, **kwargs)

    def get_all(self, path: str, params: dict[str, Any] | None = None) -> list[dict[str, Any]]:
        """GET a collection and follow @odata.nextLink until exhausted.

        Query parameters apply to the first request only; next links
        already carry them.
        """
        items: list[dict[str, Any]] = []
        url: str | None = path
        page_params = params

        while url:
            response = self.get(url, params=page_params)
            data = response.json()
            items.extend(data.get("value", []))
            url = data.get("@odata.nextLink")
            page_params = None

        return items


def create_client_from_config(
    config: Config | None = None,
    context_name: str | None = None,
    verbose: bool = False,
) -> Client:
    """Create a Graph client for the configured app registration.

    The first of these that is available is used:
    1. ENTRAGROUP_BEARER_TOKEN
    2. ENTRAGROUP_TENANT_ID + ENTRAGROUP_CLIENT_ID + ENTRAGROUP_CLIENT_SECRET
    3. The named (or current) context of the config file

    Raises:
        PreconditionError: If none of them is configured
    """
    bearer = env("bearer_token")
    if bearer:
        return Client(BearerToken(bearer), verbose=verbose)

    tenant_id, client_id, client_secret = env("tenant_id"), env("client_id"), env("client_secret")
    if tenant_id and client_id and client_secret:
        logger.info(f"Using app registration {client_id} from the environment")
        registration = AppRegistration(
            tenant_id=tenant_id, client_id=client_id, client_secret=client_secret
        )
    else:
        name, registration = (config or load_config()).resolve(context_name)
        logger.info(f"Using app registration {registration.client_id} from context '{name}'")

    credential = ClientSecretCredential(
        tenant_id=registration.tenant_id,
        client_id=registration.client_id,
        client_secret=registration.client_secret,
    )
    return Client(credential, verbose=verbose)
