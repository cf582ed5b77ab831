"""Tests for AuthClient."""

import unittest
from unittest.mock import MagicMock, patch

import requests
from firebase_admin import auth

from instaclone.auth import AuthClient
from instaclone.auth.client import SIGN_IN_URL
from instaclone.errors import AuthError

MOCK_PASSWORD = "Password123"  # nosec


def mock_response(status_code, payload):
    response = MagicMock()
    response.status_code = status_code
    response.ok = status_code < 400
    response.json.return_value = payload
    return response


class TestCreateAccount(unittest.TestCase):
    def setUp(self):
        self.client = AuthClient("api-key")

    @patch("firebase_admin.auth.create_user")
    def test_success_signs_in(self, mock_create_user):
        mock_create_user.return_value = MagicMock(uid="new_user_uid")

        uid = self.client.create_account("new@example.com", MOCK_PASSWORD)

        self.assertEqual(uid, "new_user_uid")
        self.assertEqual(self.client.current_user_id, "new_user_uid")
        mock_create_user.assert_called_once_with(
            email="new@example.com", password=MOCK_PASSWORD, app=None
        )

    @patch("firebase_admin.auth.create_user")
    def test_email_already_exists(self, mock_create_user):
        mock_create_user.side_effect = auth.EmailAlreadyExistsError(
            "exists", None, None
        )

        with self.assertRaises(AuthError) as ctx:
            self.client.create_account("new@example.com", MOCK_PASSWORD)

        self.assertIn("already in use", ctx.exception.message)
        self.assertIsNone(self.client.current_user_id)

    @patch("firebase_admin.auth.create_user")
    def test_invalid_password(self, mock_create_user):
        mock_create_user.side_effect = ValueError(
            "Password must be a string at least 6 characters long."
        )

        with self.assertRaises(AuthError) as ctx:
            self.client.create_account("new@example.com", "pw")

        self.assertEqual(ctx.exception.status_code, 401)


class TestSignIn(unittest.TestCase):
    def setUp(self):
        self.client = AuthClient("api-key", timeout=5)

    @patch("instaclone.auth.client.requests.post")
    def test_success(self, mock_post):
        mock_post.return_value = mock_response(
            200, {"localId": "user1", "idToken": "token"}
        )

        uid = self.client.sign_in("user1@example.com", MOCK_PASSWORD)

        self.assertEqual(uid, "user1")
        self.assertEqual(self.client.current_user_id, "user1")
        mock_post.assert_called_once_with(
            SIGN_IN_URL,
            params={"key": "api-key"},
            json={
                "email": "user1@example.com",
                "password": MOCK_PASSWORD,
                "returnSecureToken": True,
            },
            timeout=5,
        )

    @patch("instaclone.auth.client.requests.post")
    def test_known_error_code(self, mock_post):
        mock_post.return_value = mock_response(
            400, {"error": {"code": 400, "message": "INVALID_PASSWORD"}}
        )

        with self.assertRaises(AuthError) as ctx:
            self.client.sign_in("user1@example.com", "wrong")

        self.assertEqual(ctx.exception.message, "The password is invalid.")
        self.assertIsNone(self.client.current_user_id)

    @patch("instaclone.auth.client.requests.post")
    def test_error_code_with_detail(self, mock_post):
        mock_post.return_value = mock_response(
            400,
            {
                "error": {
                    "message": "TOO_MANY_ATTEMPTS_TRY_LATER : Access disabled."
                }
            },
        )

        with self.assertRaises(AuthError) as ctx:
            self.client.sign_in("user1@example.com", "wrong")

        self.assertIn("Too many unsuccessful", ctx.exception.message)

    @patch("instaclone.auth.client.requests.post")
    def test_unknown_error_body(self, mock_post):
        response = mock_response(503, None)
        response.json.side_effect = ValueError("no json")
        mock_post.return_value = response

        with self.assertRaises(AuthError) as ctx:
            self.client.sign_in("user1@example.com", MOCK_PASSWORD)

        self.assertEqual(
            ctx.exception.message, "Authentication failed with status 503."
        )

    @patch("instaclone.auth.client.requests.post")
    def test_network_error(self, mock_post):
        mock_post.side_effect = requests.ConnectionError("connection refused")

        with self.assertRaises(AuthError) as ctx:
            self.client.sign_in("user1@example.com", MOCK_PASSWORD)

        self.assertIn("connection refused", ctx.exception.message)

    @patch("instaclone.auth.client.requests.post")
    def test_missing_api_key(self, mock_post):
        client = AuthClient(None)

        with self.assertRaises(AuthError):
            client.sign_in("user1@example.com", MOCK_PASSWORD)

        mock_post.assert_not_called()

    def test_sign_out(self):
        client = AuthClient("api-key", user_id="user1")
        self.assertEqual(client.current_user_id, "user1")

        client.sign_out()

        self.assertIsNone(client.current_user_id)


if __name__ == "__main__":
    unittest.main()
