"""
Habit Tracker Backend — Profile Creation Tests
================================================

What we test:
    ✅ First call inserts the blank profile row with the service-role handle
    ✅ Repeat call (unique violation) is still a 200
    ✅ Missing userId/email → 400 before any insert
    ✅ Any other insert failure → 500
    ✅ Optional X-Internal-Key guard
    ✅ No Supabase handle → 500
"""

import pytest

from habitapi.config import settings
from habitapi.dependencies import get_optional_backend
from habitapi.exceptions import BackendError

PROFILE_BODY = {"userId": "user-42", "email": "new@example.com"}


class TestCreateProfile:

    @pytest.mark.asyncio
    async def test_creates_blank_profile(self, test_client, mock_backend):
        response = await test_client.post("/api/users/create-profile", json=PROFILE_BODY)

        assert response.status_code == 200
        assert response.json() == {"success": True, "message": "User profile created"}
        mock_backend.admin_insert.assert_awaited_once_with(
            "users",
            {"id": "user-42", "email": "new@example.com", "full_name": "", "avatar_url": ""},
        )

    @pytest.mark.asyncio
    async def test_second_call_is_idempotent(self, test_client, mock_backend):
        mock_backend.admin_insert.side_effect = [
            [],
            BackendError(
                message='duplicate key value violates unique constraint "users_pkey"',
                code="23505",
            ),
        ]

        first = await test_client.post("/api/users/create-profile", json=PROFILE_BODY)
        second = await test_client.post("/api/users/create-profile", json=PROFILE_BODY)

        assert first.status_code == second.status_code == 200
        assert second.json()["success"] is True
        assert second.json()["message"] == "User profile already exists"

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "payload",
        [
            {},
            {"userId": "user-42"},
            {"email": "new@example.com"},
            {"userId": "", "email": "new@example.com"},
        ],
    )
    async def test_missing_fields_are_400(self, test_client, mock_backend, payload):
        response = await test_client.post("/api/users/create-profile", json=payload)

        assert response.status_code == 400
        assert response.json() == {
            "success": False,
            "error": "Bad Request",
            "message": "Missing userId or email",
        }
        mock_backend.admin_insert.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_other_insert_failure_is_500(self, test_client, mock_backend):
        mock_backend.admin_insert.side_effect = BackendError(
            message='insert or update on table "users" violates foreign key constraint',
            code="23503",
        )

        response = await test_client.post("/api/users/create-profile", json=PROFILE_BODY)

        assert response.status_code == 500
        assert response.json() == {
            "success": False,
            "error": "Internal server error",
            "message": "Failed to create user profile",
        }

    @pytest.mark.asyncio
    async def test_backend_unavailable_is_500(self, app, test_client):
        app.dependency_overrides[get_optional_backend] = lambda: None

        response = await test_client.post("/api/users/create-profile", json=PROFILE_BODY)

        assert response.status_code == 500
        assert response.json()["success"] is False
        assert response.json()["error"] == "Backend unavailable"


class TestInternalKeyGuard:

    @pytest.mark.asyncio
    async def test_open_when_no_key_configured(self, test_client, monkeypatch):
        monkeypatch.setattr(settings, "internal_api_key", None)

        response = await test_client.post("/api/users/create-profile", json=PROFILE_BODY)

        assert response.status_code == 200

    @pytest.mark.asyncio
    @pytest.mark.parametrize("headers", [{}, {"X-Internal-Key": "wrong"}])
    async def test_rejects_missing_or_wrong_key(
        self, test_client, mock_backend, monkeypatch, headers
    ):
        monkeypatch.setattr(settings, "internal_api_key", "s3cret")

        response = await test_client.post(
            "/api/users/create-profile", json=PROFILE_BODY, headers=headers
        )

        assert response.status_code == 401
        assert response.json()["error"] == "Unauthorized"
        mock_backend.admin_insert.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_accepts_matching_key(self, test_client, monkeypatch):
        monkeypatch.setattr(settings, "internal_api_key", "s3cret")

        response = await test_client.post(
            "/api/users/create-profile",
            json=PROFILE_BODY,
            headers={"X-Internal-Key": "s3cret"},
        )

        assert response.status_code == 200
