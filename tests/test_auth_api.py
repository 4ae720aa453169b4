"""End-to-end tests for /api/v1/auth with TestClient and an in-memory SQLite database."""

import unittest

from blog_api.core.tokens import TokenCodec
from blog_api.models import RefreshToken
from tests.support import (
    ADMIN_EMAIL,
    bearer,
    make_client,
    make_settings,
    refresh_cookie_from,
    refresh_cookie_header,
)

AUTH = "/api/v1/auth"
TEST_USER = {"email": "a@x.com", "password": "secret1"}


class AuthApiTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self.settings = make_settings()
        self.client = make_client(self.settings)
        self.codec = TokenCodec(self.settings)

    def tearDown(self) -> None:
        self.client.close()

    def _register(self, body: dict | None = None):
        return self.client.post(f"{AUTH}/register", json=body or TEST_USER)

    def _stored_tokens(self) -> int:
        db = self.client.app.state.session_factory()
        try:
            return db.query(RefreshToken).count()
        finally:
            db.close()


class TestRegisterEndpoint(AuthApiTestCase):
    """POST /auth/register."""

    def test_register_then_login_scenario(self) -> None:
        res = self._register()
        self.assertEqual(res.status_code, 201)
        body = res.json()
        self.assertEqual(body["message"], "User registered successfully")
        self.assertEqual(body["user"]["email"], "a@x.com")
        self.assertEqual(body["user"]["role"], "user")
        self.assertNotIn("password", body["user"])
        self.assertNotIn("password_hash", body["user"])

        login = self.client.post(f"{AUTH}/login", json=TEST_USER)
        self.assertEqual(login.status_code, 200)
        self.assertEqual(login.json()["message"], "Login successful")
        self.assertNotEqual(login.json()["accessToken"], body["accessToken"])

    def test_refresh_cookie_attributes(self) -> None:
        res = self._register()
        cookie = res.headers["set-cookie"].lower()
        self.assertIn("httponly", cookie)
        self.assertIn("samesite=strict", cookie)
        self.assertIn("path=/", cookie)
        self.assertIn("max-age=604800", cookie)
        self.assertNotIn("secure", cookie)
        token = refresh_cookie_from(res)
        self.assertEqual(self.codec.verify_refresh_token(token).subject, self.codec.verify_access_token(res.json()["accessToken"]).subject)

    def test_duplicate_email(self) -> None:
        self._register()
        res = self._register({"email": "A@x.com", "password": "another1"})
        self.assertEqual(res.status_code, 409)
        self.assertEqual(res.json()["code"], "Conflict")

    def test_register_plus_and_long_tld_addresses(self) -> None:
        for email in ("a+tag@x.com", "dev@company.engineering", "o'neil@x.com"):
            res = self._register({"email": email, "password": "secret1"})
            self.assertEqual(res.status_code, 201, email)
            self.assertEqual(res.json()["user"]["email"], email)
            login = self.client.post(f"{AUTH}/login", json={"email": email.upper(), "password": "secret1"})
            self.assertEqual(login.status_code, 200, email)

    def test_admin_not_on_allow_list(self) -> None:
        res = self._register({"email": "b@x.com", "password": "secret1", "role": "admin"})
        self.assertEqual(res.status_code, 403)
        self.assertEqual(res.json(), {"code": "AuthorizationError", "message": "You cannot register as an admin"})
        self.assertEqual(self._stored_tokens(), 0)

    def test_admin_on_allow_list(self) -> None:
        res = self._register({"email": ADMIN_EMAIL, "password": "secret1", "role": "admin"})
        self.assertEqual(res.status_code, 201)
        self.assertEqual(res.json()["user"]["role"], "admin")

    def test_validation_errors_are_400(self) -> None:
        for body in ({}, {"email": "a@x.com"}, {"email": "nope", "password": "secret1"}, {"email": "a@x.com", "password": "123"}):
            res = self.client.post(f"{AUTH}/register", json=body)
            self.assertEqual(res.status_code, 400, body)
            self.assertEqual(res.json()["code"], "InvalidRequest")
            self.assertTrue(res.json()["errors"])


class TestLoginEndpoint(AuthApiTestCase):
    """POST /auth/login."""

    def setUp(self) -> None:
        super().setUp()
        self._register()

    def test_login_sets_verifiable_refresh_cookie(self) -> None:
        res = self.client.post(f"{AUTH}/login", json=TEST_USER)
        self.assertEqual(res.status_code, 200)
        token = refresh_cookie_from(res)
        self.assertIsNotNone(token)
        self.codec.verify_refresh_token(token)
        self.assertEqual(self._stored_tokens(), 2)

    def test_wrong_password(self) -> None:
        res = self.client.post(f"{AUTH}/login", json={"email": "a@x.com", "password": "wrong-pass"})
        self.assertEqual(res.status_code, 401)
        self.assertEqual(res.json()["code"], "Unauthorized")
        self.assertIsNone(refresh_cookie_from(res))

    def test_unknown_user(self) -> None:
        res = self.client.post(f"{AUTH}/login", json={"email": "ghost@x.com", "password": "secret1"})
        self.assertEqual(res.status_code, 404)
        self.assertEqual(res.json()["code"], "NotFound")

    def test_missing_password(self) -> None:
        res = self.client.post(f"{AUTH}/login", json={"email": "a@x.com"})
        self.assertEqual(res.status_code, 400)


class TestRefreshAndLogout(AuthApiTestCase):
    """POST /auth/refresh-token and POST /auth/logout."""

    def setUp(self) -> None:
        super().setUp()
        res = self._register()
        self.access_token = res.json()["accessToken"]
        self.refresh_token = refresh_cookie_from(res)

    def test_refresh_returns_new_access_token(self) -> None:
        res = self.client.post(f"{AUTH}/refresh-token", headers=refresh_cookie_header(self.refresh_token))
        self.assertEqual(res.status_code, 200)
        new_token = res.json()["accessToken"]
        self.assertNotEqual(new_token, self.access_token)
        self.assertEqual(
            self.codec.verify_access_token(new_token).subject,
            self.codec.verify_access_token(self.access_token).subject,
        )

    def test_refresh_without_cookie(self) -> None:
        self.client.cookies.clear()
        res = self.client.post(f"{AUTH}/refresh-token")
        self.assertEqual(res.status_code, 400)

    def test_refresh_with_forged_token(self) -> None:
        res = self.client.post(f"{AUTH}/refresh-token", headers=refresh_cookie_header("a.b.c"))
        self.assertEqual(res.status_code, 401)

    def test_logout_revokes_refresh_token(self) -> None:
        headers = {**bearer(self.access_token), **refresh_cookie_header(self.refresh_token)}
        res = self.client.post(f"{AUTH}/logout", headers=headers)
        self.assertEqual(res.status_code, 204)
        self.assertIn("refreshtoken=", res.headers["set-cookie"].lower())
        self.assertEqual(self._stored_tokens(), 0)
        # Signature still verifies, but the store no longer knows the token.
        self.codec.verify_refresh_token(self.refresh_token)
        again = self.client.post(f"{AUTH}/refresh-token", headers=refresh_cookie_header(self.refresh_token))
        self.assertEqual(again.status_code, 401)

    def test_logout_without_cookie_still_succeeds(self) -> None:
        self.client.cookies.clear()
        res = self.client.post(f"{AUTH}/logout", headers=bearer(self.access_token))
        self.assertEqual(res.status_code, 204)
        self.assertEqual(self._stored_tokens(), 1)

    def test_logout_requires_bearer(self) -> None:
        self.client.cookies.clear()
        res = self.client.post(f"{AUTH}/logout")
        self.assertEqual(res.status_code, 401)
        self.assertEqual(res.json()["message"], "Access denied, no token provided")
        res = self.client.post(f"{AUTH}/logout", headers={"Authorization": f"Basic {self.access_token}"})
        self.assertEqual(res.status_code, 401)


class TestSecureCookieInProduction(unittest.TestCase):
    """The refresh cookie carries Secure when APP_ENV=prod."""

    def test_secure_flag(self) -> None:
        client = make_client(make_settings(APP_ENV="prod"))
        try:
            res = client.post(f"{AUTH}/register", json=TEST_USER)
            self.assertEqual(res.status_code, 201)
            self.assertIn("secure", res.headers["set-cookie"].lower())
        finally:
            client.close()


class TestRateLimit(unittest.TestCase):
    """Requests beyond RATE_LIMIT get 429 with the JSON error shape."""

    def test_limit_exceeded(self) -> None:
        client = make_client(make_settings(RATE_LIMIT_ENABLED=True, RATE_LIMIT="2/minute"))
        try:
            statuses = [client.get("/api/v1/").status_code for _ in range(3)]
            self.assertEqual(statuses[:2], [200, 200])
            self.assertEqual(statuses[2], 429)
            self.assertEqual(client.get("/api/v1/").json()["code"], "TooManyRequests")
        finally:
            client.close()

    def test_limit_covers_nested_routers(self) -> None:
        client = make_client(make_settings(RATE_LIMIT_ENABLED=True, RATE_LIMIT="1/minute"))
        try:
            self.assertEqual(client.get("/api/v1/health/").status_code, 200)
            res = client.post(f"{AUTH}/login", json=TEST_USER)
            self.assertEqual(res.status_code, 429)
            self.assertTrue(res.json()["message"].startswith("Rate limit exceeded"))
            self.assertEqual(client.get("/").status_code, 200)
        finally:
            client.close()

    def test_disabled_limiter_never_blocks(self) -> None:
        client = make_client(make_settings(RATE_LIMIT_ENABLED=False, RATE_LIMIT="1/minute"))
        try:
            statuses = {client.get("/api/v1/").status_code for _ in range(5)}
            self.assertEqual(statuses, {200})
        finally:
            client.close()


if __name__ == "__main__":
    unittest.main()
