"""Map HTTP requests onto session controller operations.

Each browser session gets its own controller, found through a key in the
Flask session cookie. The signed-in user ID is kept in the cookie as well,
so a controller that has been dropped is rebuilt and its profile reloaded.
Every response carries the controller state. The pending notification is
consumed by the response that returns it.
"""

from __future__ import annotations

from typing import Any

from flask import current_app, jsonify, request, session

from instaclone.constants import (
    REGISTRY_KEY,
    SESSION_CONTROLLER_KEY,
    SESSION_USER_ID,
)
from instaclone.errors import AppError, ValidationError

from . import bp


async def get_controller():
    """Return the session controller of the requesting client."""
    registry = current_app.extensions.get(REGISTRY_KEY)
    if registry is None:
        raise AppError("The backend is not configured.", 503)

    controller = registry.get(session.get(SESSION_CONTROLLER_KEY))
    if controller is None:
        user_id = session.get(SESSION_USER_ID)
        controller = registry.create(user_id)
        session[SESSION_CONTROLLER_KEY] = registry.add(controller)
        if user_id is not None:
            current_app.logger.info(f"Restoring session for {user_id}")
            await controller.start()
    return controller


def state_response(controller) -> Any:
    """Remember the session user and serialize the controller state.

    The notification is consumed here.
    """
    user_id = controller.auth.current_user_id
    if user_id is None:
        session.pop(SESSION_USER_ID, None)
    else:
        session[SESSION_USER_ID] = user_id

    user = controller.user
    return jsonify(
        {
            "signedIn": controller.signed_in,
            "inProgress": controller.in_progress,
            "user": user.to_document() if user is not None else None,
            "posts": [post.to_document() for post in controller.posts],
            "notification": controller.consume_notification(),
        }
    )


def _json_body() -> dict[str, Any]:
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationError("Expected a JSON object body.")
    return data


def _image_file():
    image = request.files.get("image")
    if image is None or not image.filename:
        raise ValidationError("No image file provided.")
    return image


@bp.route("/state", methods=["GET"])
async def state():
    """Return the current state."""
    return state_response(await get_controller())


@bp.route("/signup", methods=["POST"])
async def signup():
    """Create an account and profile."""
    controller = await get_controller()
    data = _json_body()
    await controller.sign_up(
        data.get("username", ""), data.get("email", ""), data.get("password", "")
    )
    return state_response(controller)


@bp.route("/login", methods=["POST"])
async def login():
    """Sign in with email and password."""
    controller = await get_controller()
    data = _json_body()
    await controller.log_in(data.get("email", ""), data.get("password", ""))
    return state_response(controller)


@bp.route("/logout", methods=["POST"])
async def logout():
    """Sign out."""
    controller = await get_controller()
    controller.log_out()
    return state_response(controller)


@bp.route("/profile", methods=["PUT"])
async def update_profile():
    """Save name, username and bio. Missing keys keep their stored value."""
    data = _json_body()
    username = data.get("username")
    if username is not None and not str(username).strip():
        raise ValidationError("Username cannot be empty.")
    controller = await get_controller()
    await controller.update_profile_data(
        data.get("name"), username, data.get("bio")
    )
    return state_response(controller)


@bp.route("/profile/image", methods=["POST"])
async def upload_profile_image():
    """Replace the profile picture."""
    controller = await get_controller()
    image = _image_file()
    current_app.logger.info(f"Uploading profile image {image.filename}")
    await controller.upload_profile_image(image.stream, image.mimetype)
    return state_response(controller)


@bp.route("/posts", methods=["GET"])
async def list_posts():
    """Reload and return the user's posts."""
    controller = await get_controller()
    await controller.refresh_posts()
    return state_response(controller)


@bp.route("/posts", methods=["POST"])
async def create_post():
    """Publish an uploaded image as a post."""
    controller = await get_controller()
    image = _image_file()
    await controller.create_post(
        image.stream,
        request.form.get("description", ""),
        content_type=image.mimetype,
    )
    return state_response(controller)
