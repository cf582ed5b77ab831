"""Tests for the application factory."""

import json
import unittest
from unittest.mock import MagicMock, patch

from instaclone import create_app
from instaclone import constants as c
from instaclone.controller import SessionController
from instaclone.sessions import ControllerRegistry


class TestCreateApp(unittest.TestCase):
    def test_testing_mode_skips_firebase(self):
        with patch("firebase_admin.initialize_app") as mock_init:
            app = create_app({"TESTING": True})

        mock_init.assert_not_called()
        self.assertNotIn(c.REGISTRY_KEY, app.extensions)

    def test_config_from_environment(self):
        env = {"FIREBASE_API_KEY": "env-key", "LOG_LEVEL": "DEBUG"}
        with patch.dict("os.environ", env):
            app = create_app({"TESTING": True})

        self.assertEqual(app.config["FIREBASE_API_KEY"], "env-key")
        self.assertEqual(app.config["AUTH_REQUEST_TIMEOUT"], 10)
        self.assertEqual(app.logger.level, 10)

    @patch("firebase_admin.storage.bucket")
    @patch("firebase_admin.firestore.client")
    @patch("firebase_admin.initialize_app")
    @patch("firebase_admin.credentials.Certificate")
    def test_firebase_initialized_from_json_credentials(
        self, mock_cert, mock_init, mock_client, mock_bucket
    ):
        firebase_app = MagicMock()
        mock_init.return_value = firebase_app

        with patch.dict("firebase_admin._apps", {}, clear=True):
            app = create_app(
                {
                    "FIREBASE_CREDENTIALS_JSON": json.dumps({"project_id": "demo"}),
                    "FIREBASE_API_KEY": "key",
                }
            )

        mock_cert.assert_called_once_with({"project_id": "demo"})
        mock_init.assert_called_once_with(
            mock_cert.return_value,
            {"storageBucket": "demo.firebasestorage.app", "projectId": "demo"},
        )
        mock_client.assert_called_once_with(app=firebase_app)
        mock_bucket.assert_called_once_with(app=firebase_app)
        registry = app.extensions[c.REGISTRY_KEY]
        self.assertIsInstance(registry, ControllerRegistry)
        self.assertEqual(registry.max_sessions, 1000)

        controller = registry.create("uid1")
        self.assertIsInstance(controller, SessionController)
        self.assertEqual(controller.auth.api_key, "key")
        self.assertEqual(controller.auth.timeout, 10)
        self.assertEqual(controller.auth.current_user_id, "uid1")
        self.assertTrue(controller.signed_in)

    @patch("firebase_admin.credentials.ApplicationDefault")
    @patch("firebase_admin.initialize_app")
    def test_no_credentials_leaves_backend_unconfigured(
        self, mock_init, mock_default
    ):
        mock_default.side_effect = ValueError("no default credentials")

        app = create_app({"FIREBASE_CREDENTIALS_JSON": None})

        mock_init.assert_not_called()
        self.assertNotIn(c.REGISTRY_KEY, app.extensions)


if __name__ == "__main__":
    unittest.main()
