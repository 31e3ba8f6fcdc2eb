"""
Postboard Backend — Auth & Registration Endpoint Tests
========================================================

What:  HTTP contract of /api/auth and /api/users through the full app
       (middleware, exception handlers, auth guard).
"""

import pytest

from postboard.services.token_service import token_service


class TestLoginEndpoint:

    @pytest.mark.asyncio
    async def test_login_returns_verifiable_token(self, test_client, make_user):
        user = await make_user("Ann", "ann@example.com", "secret123")

        response = await test_client.post(
            "/api/auth", json={"email": "ann@example.com", "password": "secret123"}
        )

        assert response.status_code == 200
        assert token_service.verify(response.json()["token"]).id == user.id

    @pytest.mark.asyncio
    async def test_login_unknown_user(self, test_client):
        response = await test_client.post(
            "/api/auth", json={"email": "a@b.com", "password": "secret"}
        )

        assert response.status_code == 400
        assert response.json() == {"errors": [{"msg": "Invalid Credentials"}]}

    @pytest.mark.asyncio
    async def test_wrong_password_matches_unknown_user_response(self, test_client, make_user):
        await make_user("Ann", "ann@example.com", "secret123")

        wrong = await test_client.post(
            "/api/auth", json={"email": "ann@example.com", "password": "nope"}
        )
        unknown = await test_client.post(
            "/api/auth", json={"email": "nobody@example.com", "password": "nope"}
        )

        assert wrong.status_code == unknown.status_code == 400
        assert wrong.json() == unknown.json()

    @pytest.mark.asyncio
    async def test_login_validation_lists_each_field(self, test_client):
        response = await test_client.post(
            "/api/auth", json={"email": "not-an-email"}
        )

        assert response.status_code == 400
        errors = response.json()["errors"]
        assert {e["param"]: e["msg"] for e in errors} == {
            "email": "Please include a valid email",
            "password": "Password is required",
        }
        assert all(e["location"] == "body" for e in errors)
        assert "token" not in response.json()

    @pytest.mark.asyncio
    async def test_login_without_body_lists_each_field(self, test_client):
        response = await test_client.post("/api/auth")

        assert response.status_code == 400
        assert response.json() == {
            "errors": [
                {"msg": "Please include a valid email", "param": "email", "location": "body"},
                {"msg": "Password is required", "param": "password", "location": "body"},
            ]
        }


class TestCurrentUserEndpoint:

    @pytest.mark.asyncio
    async def test_returns_user_without_password(self, test_client, make_user, auth_headers):
        user = await make_user("Ann", "ann@example.com")

        response = await test_client.get("/api/auth", headers=auth_headers(user))

        assert response.status_code == 200
        body = response.json()
        assert body["id"] == str(user.id)
        assert body["email"] == "ann@example.com"
        assert "password_hash" not in body
        assert body["date"].endswith("Z") or body["date"].endswith("+00:00")

    @pytest.mark.asyncio
    async def test_bearer_header_accepted(self, test_client, make_user):
        user = await make_user("Ann", "ann@example.com")
        token = token_service.issue(user.id)

        response = await test_client.get("/api/auth", headers={"Authorization": f"Bearer {token}"})

        assert response.status_code == 200

    @pytest.mark.asyncio
    async def test_missing_token(self, test_client):
        response = await test_client.get("/api/auth")

        assert response.status_code == 401
        assert response.json() == {"msg": "No token, authorization denied"}

    @pytest.mark.asyncio
    async def test_invalid_token(self, test_client):
        response = await test_client.get("/api/auth", headers={"x-auth-token": "garbage"})

        assert response.status_code == 401
        assert response.json() == {"msg": "Token is not valid"}


class TestRegisterEndpoint:

    @pytest.mark.asyncio
    async def test_register_then_login(self, test_client):
        registered = await test_client.post(
            "/api/users",
            json={"name": "Bob", "email": "bob@example.com", "password": "hunter22"},
        )
        assert registered.status_code == 200

        me = await test_client.get(
            "/api/auth", headers={"x-auth-token": registered.json()["token"]}
        )
        assert me.json()["name"] == "Bob"

        login = await test_client.post(
            "/api/auth", json={"email": "bob@example.com", "password": "hunter22"}
        )
        assert login.status_code == 200

    @pytest.mark.asyncio
    async def test_register_duplicate(self, test_client, make_user):
        await make_user("Ann", "ann@example.com")

        response = await test_client.post(
            "/api/users",
            json={"name": "Ann", "email": "ann@example.com", "password": "hunter22"},
        )

        assert response.status_code == 400
        assert response.json() == {"errors": [{"msg": "User already exists"}]}

    @pytest.mark.asyncio
    async def test_register_validation(self, test_client):
        response = await test_client.post("/api/users", json={"email": "bob@example.com"})

        assert response.status_code == 400
        params = {e["param"] for e in response.json()["errors"]}
        assert params == {"name", "password"}
