"""Pytest configuration and shared fixtures."""

from __future__ import annotations

import base64
import json
from typing import Any, Iterable
from unittest.mock import MagicMock

import httpx
import pytest

from entragroup.client import Client
from entragroup.config import AppRegistration, Config
from entragroup.directory import Directory
from entragroup.errors import AccessDeniedError, AuthenticationError, ObjectNotFoundError
from entragroup.models import Group, MemberRef, UserProfile


# Sample data for tests
SAMPLE_TENANT_ID = "contoso.onmicrosoft.com"
SAMPLE_CLIENT_ID = "11111111-2222-3333-4444-555555555555"
SAMPLE_CLIENT_SECRET = "s3cr3t~value~for~tests"


@pytest.fixture
def sample_config() -> Config:
    """A config with one current app registration context."""
    return Config(
        current_context="test",
        contexts={
            "test": AppRegistration(
                tenant_id=SAMPLE_TENANT_ID,
                client_id=SAMPLE_CLIENT_ID,
                client_secret=SAMPLE_CLIENT_SECRET,
            ),
        },
    )


@pytest.fixture
def mock_credential():
    """A token source that always hands out the same token."""
    credential = MagicMock()
    credential.authorization.return_value = {"Authorization": "Bearer test-token"}
    credential.token.return_value = "test-token"
    return credential


@pytest.fixture
def mock_client(mock_credential) -> Client:
    """Create a client for testing."""
    return Client(credential=mock_credential, timeout=30.0, verbose=False)


class MockResponse:
    """Mock httpx response for testing."""

    def __init__(
        self,
        json_data: Any = None,
        status_code: int = 200,
        text: str = "",
    ):
        self._json_data = json_data
        self.status_code = status_code
        self._text = text or (json.dumps(json_data) if json_data is not None else "")

    def json(self) -> Any:
        return self._json_data

    @property
    def text(self) -> str:
        return self._text

    @property
    def is_success(self) -> bool:
        return 200 <= self.status_code < 300

    @property
    def reason_phrase(self) -> str:
        return httpx.codes.get_reason_phrase(self.status_code)


@pytest.fixture
def mock_response():
    """Factory fixture for creating mock responses."""
    def _create_response(json_data: Any = None, status_code: int = 200):
        return MockResponse(json_data=json_data, status_code=status_code)
    return _create_response


def graph_error(code: str, message: str) -> dict[str, Any]:
    """A Graph error response body."""
    return {"error": {"code": code, "message": message}}


def make_jwt(claims: dict[str, Any]) -> str:
    """Build an unsigned JWT carrying the given claims."""
    def segment(data: dict[str, Any]) -> str:
        return base64.urlsafe_b64encode(json.dumps(data).encode()).decode().rstrip("=")
    return f"{segment({'alg': 'none', 'typ': 'JWT'})}.{segment(claims)}.signature"


class FakeDirectory(Directory):
    """In-memory directory that records every call made to it."""

    def __init__(
        self,
        groups: list[Group] | None = None,
        members: dict[str, list[MemberRef]] | None = None,
        users: dict[str, UserProfile] | None = None,
        denied: Iterable[str] = (),
        auth_error: str | None = None,
    ):
        self.groups = list(groups or [])
        self.members = dict(members or {})
        self.users = dict(users or {})
        self.denied = set(denied)
        self.auth_error = auth_error
        self.calls: list[tuple[Any, ...]] = []

    def calls_to(self, operation: str) -> list[tuple[Any, ...]]:
        return [call for call in self.calls if call[0] == operation]

    def open_session(self, scopes: Iterable[str]) -> None:
        self.calls.append(("open_session", tuple(scopes)))
        if self.auth_error:
            raise AuthenticationError(self.auth_error)

    def close_session(self) -> None:
        self.calls.append(("close_session",))

    def get_group(self, group_id: str) -> Group | None:
        self.calls.append(("get_group", group_id))
        for group in self.groups:
            if group.id == group_id:
                return group
        return None

    def find_groups(self, display_name: str) -> list[Group]:
        self.calls.append(("find_groups", display_name))
        return [g for g in self.groups if g.display_name == display_name]

    def list_group_members(self, group_id: str) -> list[MemberRef]:
        self.calls.append(("list_group_members", group_id))
        return list(self.members.get(group_id, []))

    def get_user(self, user_id: str, fields: Iterable[str] = ()) -> UserProfile:
        self.calls.append(("get_user", user_id, tuple(fields)))
        if user_id in self.denied:
            raise AccessDeniedError(f"Permission denied for get on user {user_id}", status_code=403)
        if user_id not in self.users:
            raise ObjectNotFoundError(f"User not found: {user_id}", status_code=404)
        return self.users[user_id]


def make_user(user_id: str, name: str, department: str | None = "Marketing") -> UserProfile:
    """Build a complete user profile."""
    login = name.lower().replace(" ", ".")
    return UserProfile(
        id=user_id,
        display_name=name,
        user_principal_name=f"{login}@contoso.com",
        mail=f"{login}@contoso.com",
        job_title="Analyst",
        department=department,
    )


@pytest.fixture
def marketing_group() -> Group:
    return Group(id="G1", display_name="Marketing Team")


@pytest.fixture
def sample_users() -> dict[str, UserProfile]:
    """Sample user profiles keyed by ID."""
    return {
        "u1": make_user("u1", "Ada Lovelace"),
        "u2": make_user("u2", "Grace Hopper", department="Engineering"),
        "u3": make_user("u3", "Zoë Ångström"),
    }


@pytest.fixture
def fake_directory(marketing_group, sample_users) -> FakeDirectory:
    """Directory with one group holding users of every kind."""
    return FakeDirectory(
        groups=[marketing_group],
        members={
            "G1": [
                MemberRef(id="u1", object_type="user"),
                MemberRef(id="d1", object_type="device"),
                MemberRef(id="u2", object_type="user"),
                MemberRef(id="sp1", object_type="service-principal"),
                MemberRef(id="g2", object_type="group"),
                MemberRef(id="u3", object_type=None),
            ],
        },
        users=sample_users,
    )


@pytest.fixture
def sample_graph_groups() -> list[dict[str, Any]]:
    """Sample Graph groups response items."""
    return [
        {"id": "group-id-1", "displayName": "Marketing Team"},
        {"id": "group-id-2", "displayName": "Marketing Team"},
    ]


@pytest.fixture
def sample_graph_members() -> list[dict[str, Any]]:
    """Sample Graph membership response items."""
    return [
        {"@odata.type": "#microsoft.graph.user", "id": "user-id-1"},
        {"@odata.type": "#microsoft.graph.device", "id": "device-id-1"},
        {"@odata.type": "#microsoft.graph.servicePrincipal", "id": "sp-id-1"},
        {"@odata.type": "#microsoft.graph.group", "id": "group-id-3"},
        {"id": "user-id-2"},
    ]


@pytest.fixture
def sample_graph_user() -> dict[str, Any]:
    """Sample Graph user response."""
    return {
        "@odata.context": "https://graph.microsoft.com/v1.0/$metadata#users(id,displayName)/$entity",
        "id": "user-id-1",
        "displayName": "Ada Lovelace",
        "userPrincipalName": "ada.lovelace@contoso.com",
        "mail": "ada.lovelace@contoso.com",
        "jobTitle": "Analyst",
        "department": "Marketing",
    }
