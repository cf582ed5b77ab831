"""Initialize the Flask app and the per-client session controllers."""

import functools
import json
import os

import firebase_admin
from firebase_admin import credentials, firestore, storage
from flask import Flask

from .auth import AuthClient
from .constants import REGISTRY_KEY
from .sessions import ControllerRegistry


def create_app(test_config=None):
    """Create and configure an instance of the Flask application."""
    app = Flask(__name__, instance_relative_config=True)

    # Load configuration
    app.config.from_mapping(
        SECRET_KEY=os.environ.get("SECRET_KEY") or "dev",
        FIREBASE_API_KEY=os.environ.get("FIREBASE_API_KEY"),
        FIREBASE_CREDENTIALS_JSON=os.environ.get("FIREBASE_CREDENTIALS_JSON"),
        FIREBASE_PROJECT_ID=os.environ.get("FIREBASE_PROJECT_ID"),
        FIREBASE_STORAGE_BUCKET=os.environ.get("FIREBASE_STORAGE_BUCKET"),
        AUTH_REQUEST_TIMEOUT=float(os.environ.get("AUTH_REQUEST_TIMEOUT") or 10),
        LOG_LEVEL=os.environ.get("LOG_LEVEL") or "INFO",
        MAX_SESSIONS=int(os.environ.get("MAX_SESSIONS") or 1000),
        MAX_CONTENT_LENGTH=16 * 1024 * 1024,
    )

    if test_config:
        app.config.update(test_config)

    # Modules log under "instaclone.*", which is the app logger's hierarchy.
    app.logger.setLevel(app.config["LOG_LEVEL"])

    # Initialize Firebase Admin SDK only if not in testing mode
    if not app.config.get("TESTING"):
        firebase_app = init_firebase(app)
        if firebase_app is not None:
            auth_factory = functools.partial(
                AuthClient,
                app.config["FIREBASE_API_KEY"],
                timeout=app.config["AUTH_REQUEST_TIMEOUT"],
                app=firebase_app,
            )
            try:
                app.extensions[REGISTRY_KEY] = ControllerRegistry(
                    auth_factory,
                    firestore.client(app=firebase_app),
                    storage.bucket(app=firebase_app),
                    max_sessions=app.config["MAX_SESSIONS"],
                )
            except Exception as e:
                # No project ID, storage bucket or usable credentials.
                app.logger.error(f"Could not create Firebase clients: {e}")

    # Register blueprints
    from . import api as api_bp

    app.register_blueprint(api_bp.bp)

    from . import error_handlers

    app.register_blueprint(error_handlers.error_handlers_bp)

    return app


def init_firebase(app):
    """Initialize the default Firebase app from the configured credentials.

    Credentials come from FIREBASE_CREDENTIALS_JSON, then a
    firebase_credentials.json file next to the package, then application
    default credentials. Returns None when none of them can be loaded.
    """
    cred = None
    project_id = app.config.get("FIREBASE_PROJECT_ID")

    # First, try the config/environment value (for production)
    cred_json = app.config.get("FIREBASE_CREDENTIALS_JSON")
    if cred_json:
        try:
            cred_info = json.loads(cred_json)
            project_id = cred_info.get("project_id") or project_id
            cred = credentials.Certificate(cred_info)
        except (json.JSONDecodeError, ValueError) as e:
            app.logger.error(f"Error parsing FIREBASE_CREDENTIALS_JSON: {e}")

    # Then a credentials file (for local dev)
    if not cred:
        cred_path = os.path.join(
            os.path.dirname(os.path.dirname(__file__)), "firebase_credentials.json"
        )
        if os.path.exists(cred_path):
            try:
                with open(cred_path, "r") as f:
                    cred_info = json.load(f)
                project_id = cred_info.get("project_id") or project_id
                cred = credentials.Certificate(cred_path)
            except (json.JSONDecodeError, ValueError) as e:
                app.logger.error(f"Error loading credentials from file: {e}")

    # Finally, fall back to default credentials
    if not cred:
        try:
            cred = credentials.ApplicationDefault()
        except Exception as e:
            app.logger.error(
                f"Could not find any valid credentials (env, file, or default): {e}"
            )
            return None

    if firebase_admin._apps:
        app.logger.info("Firebase app already initialized.")
        return firebase_admin.get_app()

    storage_bucket = app.config.get("FIREBASE_STORAGE_BUCKET")
    if not storage_bucket and project_id:
        storage_bucket = f"{project_id}.firebasestorage.app"

    firebase_options = {"storageBucket": storage_bucket}
    if project_id:
        firebase_options["projectId"] = project_id

    return firebase_admin.initialize_app(cred, firebase_options)
