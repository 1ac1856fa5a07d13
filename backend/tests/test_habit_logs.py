"""
Habit Tracker Backend — Habit Log Deletion Tests
==================================================

What we test:
    ✅ Owner deletes a log → 200 with the deleted row
    ✅ The delete is filtered by the token's user id, not anything client-supplied
    ✅ Someone else's log and a missing log produce identical 404 responses
    ✅ Backend failure → 500 envelope
"""

import pytest

from habitapi.exceptions import BackendError

DELETED_ROW = {
    "id": "log-1",
    "user_id": "user-1",
    "habit_id": "habit-7",
    "date": "2024-01-15",
    "completed": True,
    "created_at": "2024-01-15T08:30:00+00:00",
}


class TestDeleteHabitLog:

    @pytest.mark.asyncio
    async def test_owner_deletes_log(self, test_client, mock_backend, auth_headers):
        mock_backend.delete_owned.return_value = [DELETED_ROW]

        response = await test_client.delete("/api/habit-logs/log-1", headers=auth_headers)

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["data"] == DELETED_ROW

    @pytest.mark.asyncio
    async def test_delete_is_scoped_to_token_owner(self, test_client, mock_backend, auth_headers):
        mock_backend.delete_owned.return_value = [DELETED_ROW]

        await test_client.delete(
            "/api/habit-logs/log-1?user_id=someone-else", headers=auth_headers
        )

        mock_backend.delete_owned.assert_awaited_once_with(
            access_token="valid-token",
            table="habit_logs",
            row_id="log-1",
            user_id="user-1",
        )

    @pytest.mark.asyncio
    async def test_extra_columns_are_echoed(self, test_client, mock_backend, auth_headers):
        row = {**DELETED_ROW, "notes": "felt great"}
        mock_backend.delete_owned.return_value = [row]

        response = await test_client.delete("/api/habit-logs/log-1", headers=auth_headers)

        assert response.json()["data"]["notes"] == "felt great"

    @pytest.mark.asyncio
    async def test_not_owned_and_missing_are_indistinguishable(
        self, test_client, mock_backend, auth_headers
    ):
        # The owner filter makes both cases match zero rows
        mock_backend.delete_owned.return_value = []

        not_owned = await test_client.delete(
            "/api/habit-logs/log-of-another-user", headers=auth_headers
        )
        missing = await test_client.delete(
            "/api/habit-logs/does-not-exist", headers=auth_headers
        )

        assert not_owned.status_code == missing.status_code == 404
        assert not_owned.json() == missing.json() == {
            "success": False,
            "error": "Not found",
            "message": "Habit log not found or unauthorized",
        }

    @pytest.mark.asyncio
    async def test_backend_failure_is_500(self, test_client, mock_backend, auth_headers):
        mock_backend.delete_owned.side_effect = BackendError(
            message="permission denied for table habit_logs", code="42501"
        )

        response = await test_client.delete("/api/habit-logs/log-1", headers=auth_headers)

        assert response.status_code == 500
        body = response.json()
        assert body["success"] is False
        assert body["error"] == "Internal server error"
