"""Tests for resource handlers."""

from __future__ import annotations

from unittest.mock import patch

import pytest

from entragroup.client import APIError
from entragroup.errors import AccessDeniedError, DirectoryError, ObjectNotFoundError
from entragroup.models import USER_FIELDS
from entragroup.resources.groups import GroupHandler, odata_quote
from entragroup.resources.users import UserHandler


def api_error(status_code: int, error_code: str | None = None) -> APIError:
    return APIError(f"Request failed: {status_code}", status_code=status_code, error_code=error_code)


class TestOdataQuote:
    """Tests for OData string literals."""

    def test_plain(self):
        assert odata_quote("Marketing Team") == "'Marketing Team'"

    def test_single_quote_doubled(self):
        """Test embedded quotes cannot terminate the literal."""
        assert odata_quote("O'Brien's Team") == "'O''Brien''s Team'"


class TestGroupHandler:
    """Tests for GroupHandler."""

    def test_get_group(self, mock_client, mock_response):
        """Test getting a single group."""
        with patch.object(mock_client, "get") as mock_get:
            mock_get.return_value = mock_response({"id": "G1", "displayName": "Marketing Team"})

            group = GroupHandler(mock_client).get("G1")

            assert group.id == "G1"
            assert group.display_name == "Marketing Team"
            mock_get.assert_called_once_with("/groups/G1", params={"$select": "id,displayName"})

    def test_find_by_name(self, mock_client, sample_graph_groups):
        """Test all groups sharing a display name are returned in order."""
        with patch.object(mock_client, "get_all") as mock_get_all:
            mock_get_all.return_value = sample_graph_groups

            groups = GroupHandler(mock_client).find_by_name("Marketing Team")

            assert [g.id for g in groups] == ["group-id-1", "group-id-2"]
            path = mock_get_all.call_args[0][0]
            params = mock_get_all.call_args[1]["params"]
            assert path == "/groups"
            assert params["$filter"] == "displayName eq 'Marketing Team'"
            assert params["$select"] == "id,displayName"

    def test_find_by_name_escapes_quotes(self, mock_client):
        """Test names with quotes are escaped in the filter."""
        with patch.object(mock_client, "get_all", return_value=[]) as mock_get_all:
            assert GroupHandler(mock_client).find_by_name("R&D 'Core'") == []

            params = mock_get_all.call_args[1]["params"]
            assert params["$filter"] == "displayName eq 'R&D ''Core'''"

    def test_get_members(self, mock_client, sample_graph_members):
        """Test direct members are listed with their object types."""
        with patch.object(mock_client, "get_all") as mock_get_all:
            mock_get_all.return_value = sample_graph_members

            members = GroupHandler(mock_client).get_members("G1")

            assert [m.id for m in members] == [
                "user-id-1", "device-id-1", "sp-id-1", "group-id-3", "user-id-2"
            ]
            assert members[0].object_type == "user"
            assert members[-1].object_type is None
            assert mock_get_all.call_args[0][0] == "/groups/G1/members"

    def test_get_members_transitive(self, mock_client):
        """Test nested membership uses transitiveMembers."""
        with patch.object(mock_client, "get_all", return_value=[]) as mock_get_all:
            GroupHandler(mock_client).get_members("G1", transitive=True)

            assert mock_get_all.call_args[0][0] == "/groups/G1/transitiveMembers"

    @pytest.mark.parametrize(
        "error,expected",
        [
            (api_error(404, "Request_ResourceNotFound"), ObjectNotFoundError),
            (api_error(400, "Request_BadRequest"), ObjectNotFoundError),
            (api_error(403, "Authorization_RequestDenied"), AccessDeniedError),
            (api_error(500), DirectoryError),
        ],
    )
    def test_get_error_mapping(self, mock_client, error, expected):
        """Test Graph failures are translated by status and code."""
        with patch.object(mock_client, "get", side_effect=error):
            with pytest.raises(expected) as exc_info:
                GroupHandler(mock_client).get("not-a-guid")

        assert exc_info.value.status_code == error.status_code
        assert exc_info.value.__cause__ is error

    def test_list_bad_request_not_reported_as_missing(self, mock_client):
        """Test a rejected filter is not mistaken for a missing object."""
        with patch.object(mock_client, "get_all", side_effect=api_error(400, "Request_BadRequest")):
            with pytest.raises(DirectoryError) as exc_info:
                GroupHandler(mock_client).find_by_name("x")

        assert not isinstance(exc_info.value, ObjectNotFoundError)
        assert "Failed to list group" in str(exc_info.value)


class TestUserHandler:
    """Tests for UserHandler."""

    def test_get_user_default_fields(self, mock_client, sample_graph_user, mock_response):
        """Test users are fetched with the report fields by default."""
        with patch.object(mock_client, "get") as mock_get:
            mock_get.return_value = mock_response(sample_graph_user)

            user = UserHandler(mock_client).get("user-id-1")

            assert user.display_name == "Ada Lovelace"
            assert user.mail == "ada.lovelace@contoso.com"
            mock_get.assert_called_once_with(
                "/users/user-id-1", params={"$select": ",".join(USER_FIELDS)}
            )

    def test_get_user_explicit_fields(self, mock_client, mock_response):
        """Test an explicit field list is passed through as $select."""
        with patch.object(mock_client, "get") as mock_get:
            mock_get.return_value = mock_response({"id": "u1", "displayName": "Ada"})

            user = UserHandler(mock_client).get("u1", select=["id", "displayName"])

            assert user.job_title is None
            assert mock_get.call_args[1]["params"] == {"$select": "id,displayName"}

    def test_get_user_denied(self, mock_client):
        """Test an unreadable user raises AccessDeniedError."""
        with patch.object(mock_client, "get", side_effect=api_error(403)):
            with pytest.raises(AccessDeniedError, match="user u1"):
                UserHandler(mock_client).get("u1")
