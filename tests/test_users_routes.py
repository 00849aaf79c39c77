"""
HTTP surface of the users resource
"""

import pytest


class TestListUsers:

    @pytest.mark.asyncio
    async def test_returns_all_users(self, client):
        response = await client.get("/users")

        assert response.status_code == 200
        assert response.json() == [
            {"id": 1, "firstname": "John", "lastname": "Doe"},
            {"id": 2, "firstname": "Jane", "lastname": "Smith"},
        ]
        assert "X-Trace-ID" in response.headers

    @pytest.mark.asyncio
    async def test_store_failure_is_500(self, failing_client):
        response = await failing_client.get("/users")

        assert response.status_code == 500
        body = response.json()
        assert body["error"] == "Internal Server Error"
        assert "connection refused" not in body["message"]


class TestCreateUser:

    @pytest.mark.asyncio
    async def test_returns_201_with_created_user(self, client):
        response = await client.post("/users", json={"firstname": "Ada", "lastname": "Lovelace"})

        assert response.status_code == 201
        assert response.json() == {"id": 3, "firstname": "Ada", "lastname": "Lovelace"}

    @pytest.mark.asyncio
    async def test_missing_field_is_422(self, client):
        response = await client.post("/users", json={"firstname": "Ada"})

        assert response.status_code == 422
        body = response.json()
        assert body["error"] == "Validation Error"
        assert any("lastname" in detail["field"] for detail in body["detail"])

    @pytest.mark.asyncio
    async def test_store_failure_is_500(self, failing_client):
        response = await failing_client.post("/users", json={"firstname": "Ada", "lastname": "Lovelace"})

        assert response.status_code == 500


class TestGetUser:

    @pytest.mark.asyncio
    async def test_returns_user(self, client):
        response = await client.get("/users/1")

        assert response.status_code == 200
        assert response.json() == {"id": 1, "firstname": "John", "lastname": "Doe"}

    @pytest.mark.asyncio
    async def test_missing_user_is_404(self, client):
        response = await client.get("/users/999")

        assert response.status_code == 404
        body = response.json()
        assert body["message"] == "User with ID 999 not found"
        assert "trace_id" in body
        assert "timestamp" in body
        assert response.headers["X-Trace-ID"] == body["trace_id"]

    @pytest.mark.asyncio
    async def test_non_integer_id_is_422(self, client):
        response = await client.get("/users/abc")

        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_store_failure_is_500_not_404(self, failing_client):
        response = await failing_client.get("/users/1")

        assert response.status_code == 500


class TestUpdateUser:

    @pytest.mark.asyncio
    async def test_partial_update(self, client):
        response = await client.patch("/users/1", json={"firstname": "Jane"})

        assert response.status_code == 200
        assert response.json() == {"id": 1, "firstname": "Jane", "lastname": "Doe"}

    @pytest.mark.asyncio
    @pytest.mark.parametrize("payload", [
        {"firstname": None},
        {"lastname": None},
        {"firstname": "Jane", "lastname": None},
    ])
    async def test_null_field_is_422_and_row_unchanged(self, client, payload):
        response = await client.patch("/users/1", json=payload)

        assert response.status_code == 422
        assert response.json()["error"] == "Validation Error"

        listed = (await client.get("/users")).json()
        assert listed[0] == {"id": 1, "firstname": "John", "lastname": "Doe"}

    @pytest.mark.asyncio
    async def test_missing_user_is_404(self, client):
        response = await client.patch("/users/999", json={"firstname": "Jane"})

        assert response.status_code == 404
        assert response.json()["message"] == "User with ID 999 not found"

    @pytest.mark.asyncio
    async def test_store_failure_is_500(self, failing_client):
        response = await failing_client.patch("/users/1", json={"firstname": "Jane"})

        assert response.status_code == 500


class TestDeleteUser:

    @pytest.mark.asyncio
    async def test_delete_then_get_is_404(self, client):
        response = await client.delete("/users/1")

        assert response.status_code == 204
        assert response.content == b""
        assert (await client.get("/users/1")).status_code == 404

    @pytest.mark.asyncio
    async def test_delete_missing_user_is_204(self, client):
        response = await client.delete("/users/999")

        assert response.status_code == 204

    @pytest.mark.asyncio
    async def test_store_failure_is_500(self, failing_client):
        response = await failing_client.delete("/users/1")

        assert response.status_code == 500


class TestUnknownRoute:

    @pytest.mark.asyncio
    async def test_unknown_path_is_404(self, client):
        response = await client.get("/accounts")

        assert response.status_code == 404
        assert response.json()["error"] == "HTTP 404"
