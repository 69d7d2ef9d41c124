"""Integration tests for auth and health endpoints."""


class TestAuthAPI:
    """Tests for /v1/auth endpoints."""

    def test_signup(self, client):
        """Test that signup creates a standard user with the default limit."""
        response = client.post(
            "/v1/auth/signup",
            json={"email": "New.Shopper@Shop.com", "password": "secret"},
        )
        assert response.status_code == 201
        data = response.json()
        assert data["session_token"]
        assert data["user"]["email"] == "new.shopper@shop.com"
        assert data["user"]["role"] == "standard"
        assert data["user"]["usage_count"] == 0
        assert data["user"]["usage_limit"] == 5
        assert data["user"]["can_generate"] is True

    def test_signup_duplicate_email(self, client, signup):
        """Test that emails are unique ignoring case."""
        signup("shopper@shop.com")

        response = client.post(
            "/v1/auth/signup",
            json={"email": "SHOPPER@shop.com", "password": "other"},
        )
        assert response.status_code == 409
        assert response.json()["error"]["code"] == "USER_EXISTS"

    def test_signup_requires_password(self, client):
        response = client.post(
            "/v1/auth/signup",
            json={"email": "shopper@shop.com", "password": ""},
        )
        assert response.status_code == 400
        assert response.json()["error"]["code"] == "VALIDATION_ERROR"

    def test_login_unknown_user(self, client):
        response = client.post(
            "/v1/auth/login",
            json={"email": "nobody@shop.com", "password": "secret"},
        )
        assert response.status_code == 404
        data = response.json()
        assert data["error"]["code"] == "USER_NOT_FOUND"
        assert data["error"]["message"] == "User not found. Please sign up."

    def test_login_seeded_admin(self, client):
        """Test that the admin is seeded at startup."""
        response = client.post(
            "/v1/auth/login",
            json={"email": "Admin@Admin.com", "password": "anything"},
        )
        assert response.status_code == 200
        user = response.json()["user"]
        assert user["user_id"] == "admin-1"
        assert user["role"] == "admin"
        assert user["usage_limit"] == 1000

    def test_login_existing_user(self, client, signup):
        signup("shopper@shop.com")

        response = client.post(
            "/v1/auth/login",
            json={"email": "shopper@shop.com", "password": "wrong-but-ignored"},
        )
        assert response.status_code == 200
        assert response.json()["user"]["email"] == "shopper@shop.com"

    def test_me(self, client, user_headers):
        response = client.get("/v1/auth/me", headers=user_headers)
        assert response.status_code == 200
        data = response.json()
        assert data["email"] == "shopper@shop.com"
        assert data["remaining"] == 5

    def test_me_without_token(self, client):
        response = client.get("/v1/auth/me")
        assert response.status_code == 401
        assert response.json()["error"]["code"] == "AUTH_MISSING_CREDENTIALS"

    def test_me_invalid_session(self, client, invalid_session_headers):
        response = client.get("/v1/auth/me", headers=invalid_session_headers)
        assert response.status_code == 401
        assert response.json()["error"]["code"] == "AUTH_INVALID_SESSION"

    def test_logout(self, client, user_headers):
        """Test that logout ends the session but keeps the account."""
        response = client.post("/v1/auth/logout", headers=user_headers)
        assert response.status_code == 204

        response = client.get("/v1/auth/me", headers=user_headers)
        assert response.status_code == 401

        response = client.post(
            "/v1/auth/login",
            json={"email": "shopper@shop.com", "password": "secret"},
        )
        assert response.status_code == 200

    def test_sessions_are_independent(self, client, signup):
        first = signup("a@shop.com")
        second = signup("b@shop.com")

        assert client.get("/v1/auth/me", headers=first).json()["email"] == "a@shop.com"
        assert client.get("/v1/auth/me", headers=second).json()["email"] == "b@shop.com"


class TestHealthAPI:
    """Tests for health and root endpoints."""

    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["components"]["storage"]["type"] == "in-memory"
        assert data["components"]["studio"] == {"status": "up", "workspaces": 0}

    def test_root(self, client):
        response = client.get("/")
        assert response.status_code == 200
        assert response.json()["name"] == "EcomLens API"

    def test_request_id_header(self, client):
        response = client.get("/health")
        assert response.headers["X-Request-ID"]

    def test_request_id_in_errors(self, client):
        response = client.get("/v1/auth/me", headers={"X-Request-ID": "req-123"})
        assert response.headers["X-Request-ID"] == "req-123"
        assert response.json()["error"]["request_id"] == "req-123"
