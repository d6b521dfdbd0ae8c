# tests/test_auth.py

"""
Tests for bearer-token authentication against Supabase and the Users sheet.
"""

import pytest
from fastapi import HTTPException
from fastapi.testclient import TestClient
from unittest.mock import patch, Mock

from core.config import settings
from dependencies.auth import resolve_token_email

AUTH = {"Authorization": "Bearer test-token"}


def test_known_user_gets_in(client: TestClient):
    with patch("dependencies.auth.resolve_token_email", return_value="Staff@School.edu"):
        response = client.get("/me", headers=AUTH)

    assert response.status_code == 200
    assert response.json()["user"]["email"] == "staff@school.edu"


def test_rejected_token_is_401(client: TestClient):
    with patch("dependencies.auth.resolve_token_email", return_value=None):
        response = client.get("/me", headers=AUTH)

    assert response.status_code == 401
    assert response.headers["www-authenticate"] == "Bearer"


def test_email_not_in_users_sheet_is_403(client: TestClient):
    with patch("dependencies.auth.resolve_token_email", return_value="stranger@gmail.com"):
        response = client.get("/me", headers=AUTH)

    assert response.status_code == 403
    assert settings.UNAUTHORIZED_MESSAGE in response.json()["detail"]
    assert settings.SUPPORT_CONTACT in response.json()["detail"]


def test_permission_check_uses_the_sheet_user(client: TestClient):
    with patch("dependencies.auth.resolve_token_email", return_value="parent@school.edu"):
        response = client.get("/roles", headers=AUTH)

    assert response.status_code == 403


# ------------------------------------------------------------
# Token -> email
# ------------------------------------------------------------
def test_resolve_token_email():
    with patch("dependencies.auth.get_supabase_client") as mock_supabase:
        mock_client = Mock()
        mock_client.auth.get_user.return_value = Mock(user=Mock(email="tech@school.edu"))
        mock_supabase.return_value = mock_client

        assert resolve_token_email("good-token") == "tech@school.edu"
        mock_client.auth.get_user.assert_called_once_with("good-token")


def test_resolve_token_email_rejected():
    with patch("dependencies.auth.get_supabase_client") as mock_supabase:
        mock_client = Mock()
        mock_client.auth.get_user.side_effect = Exception("invalid JWT")
        mock_supabase.return_value = mock_client

        assert resolve_token_email("bad-token") is None


def test_resolve_token_email_without_supabase():
    with patch("dependencies.auth.get_supabase_client", return_value=None):
        with pytest.raises(HTTPException) as exc:
            resolve_token_email("any")
    assert exc.value.status_code == 500
