"""Access tokens for Microsoft Graph.

Two token sources are supported: an app registration's client secret,
exchanged at the Microsoft identity platform for an app-only token, and a
bearer token issued elsewhere. Both hand the client an Authorization
header; the client never sees where the token came from.
"""

from __future__ import annotations

import base64
import binascii
import json
import logging
import time
from dataclasses import dataclass

import httpx

logger = logging.getLogger(__name__)


# Permissions a session needs: read groups and read users
REQUIRED_SCOPES = ("Group.Read.All", "User.Read.All")

# App-only tokens carry every application permission consented on the
# registration; ".default" is the only scope the token endpoint accepts
GRAPH_DEFAULT_SCOPE = "https://graph.microsoft.com/.default"

TOKEN_URL_TEMPLATE = "https://login.microsoftonline.com/{tenant}/oauth2/v2.0/token"

# Broader permissions that also satisfy a required one
IMPLIED_BY = {
    "group.read.all": {"group.readwrite.all", "directory.read.all", "directory.readwrite.all"},
    "user.read.all": {"user.readwrite.all", "directory.read.all", "directory.readwrite.all"},
}

# Renew this many seconds before the identity platform's expiry
EXPIRY_MARGIN = 60


class OAuthError(Exception):
    """The identity platform refused to issue a token.

    Attributes:
        error_code: OAuth error ('invalid_client', 'unauthorized_client', ...)
        error_description: Entra's explanation, starting with an AADSTS code
    """

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        error_description: str | None = None,
    ):
        super().__init__(message)
        self.error_code = error_code
        self.error_description = error_description

    @property
    def aadsts_code(self) -> str | None:
        """The AADSTS number from the description, e.g. 'AADSTS7000215'."""
        if self.error_description and self.error_description.startswith("AADSTS"):
            return self.error_description.split(":", 1)[0]
        return None


@dataclass
class AccessToken:
    """An issued token and the wall-clock time it stops being accepted."""

    value: str
    expires_at: float

    def usable(self, now: float | None = None) -> bool:
        return (now or time.time()) < self.expires_at - EXPIRY_MARGIN


def token_permissions(access_token: str) -> set[str] | None:
    """Read the permissions granted to a JWT access token.

    Collects application roles ('roles' claim) and delegated scopes
    ('scp' claim). The signature is not verified; Graph does that.

    Returns:
        Lower-cased permission names, or None if the token is not a
        readable JWT
    """
    parts = access_token.split(".")
    if len(parts) != 3:
        return None

    payload = parts[1] + "=" * (-len(parts[1]) % 4)
    try:
        claims = json.loads(base64.urlsafe_b64decode(payload))
    except (binascii.Error, ValueError):
        return None
    if not isinstance(claims, dict):
        return None

    permissions = {role.lower() for role in claims.get("roles", [])}
    permissions.update(scope.lower() for scope in claims.get("scp", "").split())
    return permissions


def missing_scopes(granted: set[str], required: tuple[str, ...] | list[str]) -> list[str]:
    """Return the required permissions not covered by the granted ones."""
    missing = []
    for scope in required:
        key = scope.lower()
        if key in granted or IMPLIED_BY.get(key, set()) & granted:
            continue
        missing.append(scope)
    return missing


class TokenSource:
    """Supplies the bearer token for Graph requests."""

    def token(self) -> str:
        raise NotImplementedError

    def authorization(self) -> dict[str, str]:
        """Authorization header for the current token.

        Raises:
            OAuthError: If a token cannot be obtained
        """
        return {"Authorization": f"Bearer {self.token()}"}

    def close(self) -> None:
        pass


class BearerToken(TokenSource):
    """A token obtained elsewhere, e.g. with
    `az account get-access-token --resource-type ms-graph`.

    It is used as-is and never renewed; requests fail with 401 once it
    expires.
    """

    def __init__(self, value: str):
        self.value = value.removeprefix("Bearer ").strip()
        logger.info("Using a pre-issued bearer token; it will not be renewed")

    def token(self) -> str:
        return self.value


class ClientSecretCredential(TokenSource):
    """App-only tokens for an app registration, via the client credentials grant.

    The registration needs the Group.Read.All and User.Read.All
    application permissions with admin consent in its tenant. Tokens are
    cached until shortly before they expire.
    """

    def __init__(
        self,
        tenant_id: str,
        client_id: str,
        client_secret: str,
        timeout: float = 30.0,
    ):
        self.tenant_id = tenant_id
        self.client_id = client_id
        self.client_secret = client_secret
        self.timeout = timeout
        self._cached: AccessToken | None = None
        self._http: httpx.Client | None = None

    @property
    def token_url(self) -> str:
        return TOKEN_URL_TEMPLATE.format(tenant=self.tenant_id)

    def token(self) -> str:
        """A valid app-only token, requested from Entra if none is cached.

        Raises:
            OAuthError: If the identity platform rejects the request or
                cannot be reached
        """
        if self._cached is None or not self._cached.usable():
            self._cached = self._request_token()
        return self._cached.value

    def close(self) -> None:
        if self._http is not None:
            self._http.close()
            self._http = None

    def _request_token(self) -> AccessToken:
        if self._http is None:
            self._http = httpx.Client(timeout=self.timeout)

        logger.debug(f"Requesting app-only token for {self.client_id} from {self.token_url}")
        try:
            response = self._http.post(
                self.token_url,
                data={
                    "grant_type": "client_credentials",
                    "client_id": self.client_id,
                    "client_secret": self.client_secret,
                    "scope": GRAPH_DEFAULT_SCOPE,
                },
            )
        except httpx.RequestError as e:
            raise OAuthError(f"Cannot reach the Microsoft identity platform: {e}") from e

        if not response.is_success:
            raise self._token_error(response)

        body = response.json()
        if not body.get("access_token"):
            raise OAuthError("Token response did not contain an access_token")

        expires_in = int(body.get("expires_in", 3600))
        logger.info(f"Obtained app-only token for tenant {self.tenant_id} (valid {expires_in}s)")
        return AccessToken(body["access_token"], time.time() + expires_in)

    @staticmethod
    def _token_error(response: httpx.Response) -> OAuthError:
        try:
            body = response.json()
        except ValueError:
            body = {}
        error_code = body.get("error") if isinstance(body, dict) else None
        description = body.get("error_description") if isinstance(body, dict) else None

        message = f"Token request failed: {response.status_code}"
        if error_code:
            message += f" {error_code}"
        return OAuthError(message, error_code=error_code, error_description=description)
