"""Session, profile and post state for one signed-in user."""

from __future__ import annotations

import asyncio
import logging
import time
import uuid
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any, Callable, Iterator

from . import constants as c
from .events import Event
from .models import Post, ProfileUpdate, UserProfile, merge_profile, profile_changes
from .services import post_service, storage_service, user_service

if TYPE_CHECKING:
    from google.cloud.firestore_v1.client import Client
    from google.cloud.storage.bucket import Bucket

    from .auth import AuthClient
    from .services.storage_service import ImageSource

logger = logging.getLogger(__name__)


def error_message(exception: BaseException | None = None, label: str = "") -> str:
    """Join a context label and an exception's text as "label: detail"."""
    detail = str(exception) if exception is not None else ""
    if label and detail:
        return f"{label}: {detail}"
    return label or detail


class SessionController:
    """Drive auth, Firestore and Storage on behalf of the presentation layer.

    Every operation reports its outcome through ``notification`` instead of
    raising, and keeps ``in_progress`` set until the whole chain of backend
    calls it started has finished. Blocking SDK calls are run in worker
    threads; state is only mutated from the event loop.
    """

    def __init__(self, auth_client: AuthClient, db: Client, bucket: Bucket) -> None:
        """Initialize the controller from the auth client's current session."""
        self.auth = auth_client
        self.db = db
        self.bucket = bucket
        self.signed_in = auth_client.current_user_id is not None
        self.user: UserProfile | None = None
        self.posts: list[Post] = []
        self.notification: Event[str] | None = None
        self._pending = 0

    @property
    def in_progress(self) -> bool:
        """Return True while any operation is outstanding."""
        return self._pending > 0

    @contextmanager
    def _busy(self) -> Iterator[None]:
        self._pending += 1
        try:
            yield
        finally:
            self._pending -= 1

    def notify(self, message: str) -> None:
        """Replace the pending notification."""
        self.notification = Event(message)

    def handle_exception(
        self, exception: BaseException | None = None, label: str = ""
    ) -> None:
        """Log a failure and turn it into the pending notification."""
        message = error_message(exception, label)
        if exception is not None:
            logger.error(message, exc_info=exception)
        else:
            logger.warning(message)
        self.notify(message)

    def consume_notification(self) -> str | None:
        """Return the pending message once and clear it."""
        event, self.notification = self.notification, None
        if event is None:
            return None
        return event.get_content_or_none()

    async def start(self) -> None:
        """Load the profile for a session restored by the auth client."""
        user_id = self.auth.current_user_id
        self.signed_in = user_id is not None
        if user_id is not None:
            await self.fetch_profile(user_id)

    async def sign_up(self, username: str, email: str, password: str) -> None:
        """Create an account and its profile, if the username is free."""
        if not username or not email or not password:
            self.handle_exception(label=c.MSG_FILL_ALL_FIELDS)
            return

        with self._busy():
            try:
                taken = await asyncio.to_thread(
                    user_service.username_exists, self.db, username
                )
            except Exception as e:
                self.handle_exception(e, c.MSG_CANNOT_CHECK_USERNAME)
                return
            if taken:
                self.handle_exception(label=c.MSG_USERNAME_EXISTS)
                return

            try:
                await asyncio.to_thread(self.auth.create_account, email, password)
            except Exception as e:
                self.handle_exception(e, c.MSG_SIGNUP_FAILED)
                return

            self.signed_in = True
            await self.upsert_profile(username=username)

    async def log_in(self, email: str, password: str) -> None:
        """Sign in and load the user's profile."""
        if not email or not password:
            self.handle_exception(label=c.MSG_FILL_ALL_FIELDS)
            return

        with self._busy():
            try:
                user_id = await asyncio.to_thread(self.auth.sign_in, email, password)
            except Exception as e:
                self.handle_exception(e, c.MSG_LOGIN_FAILED)
                return

            self.signed_in = True
            self.notify(c.MSG_LOGIN_SUCCESS)
            await self.fetch_profile(user_id)

    async def upsert_profile(
        self,
        name: str | None = None,
        username: str | None = None,
        bio: str | None = None,
        image_url: str | None = None,
    ) -> None:
        """Create the session user's profile, or update the supplied fields.

        Unsupplied fields keep the value of the previously loaded profile. If
        no profile is loaded yet, the stored document is the previous value.
        """
        user_id = self.auth.current_user_id
        if user_id is None:
            logger.warning("Profile update requested without a signed-in user")
            return
        update = ProfileUpdate(
            name=name, username=username, bio=bio, image_url=image_url
        )

        with self._busy():
            try:
                stored = await asyncio.to_thread(
                    user_service.get_profile, self.db, user_id
                )
            except Exception as e:
                self.handle_exception(e, c.MSG_CANNOT_CREATE_USER)
                return

            if self.user is not None and self.user.user_id == user_id:
                previous = self.user
            else:
                previous = stored or UserProfile(user_id=user_id)
            profile = merge_profile(previous, update)

            if stored is None:
                try:
                    await asyncio.to_thread(
                        user_service.create_profile, self.db, profile
                    )
                except Exception as e:
                    self.handle_exception(e, c.MSG_CANNOT_CREATE_USER)
                    return
                await self.fetch_profile(user_id)
                return

            changes = profile_changes(previous, profile)
            if changes:
                try:
                    await asyncio.to_thread(
                        user_service.update_profile, self.db, user_id, changes
                    )
                except Exception as e:
                    self.handle_exception(e, c.MSG_CANNOT_UPDATE_USER)
                    return
            self.user = profile

    async def update_profile_data(
        self,
        name: str | None = None,
        username: str | None = None,
        bio: str | None = None,
    ) -> None:
        """Save the edit-profile form. Fields left as None keep their value."""
        user_id = self.auth.current_user_id
        with self._busy():
            current = self.user.username if self.user is not None else None
            if user_id is not None and username is not None and username != current:
                try:
                    taken = await asyncio.to_thread(
                        user_service.username_exists, self.db, username, user_id
                    )
                except Exception as e:
                    self.handle_exception(e, c.MSG_CANNOT_CHECK_USERNAME)
                    return
                if taken:
                    self.handle_exception(label=c.MSG_USERNAME_EXISTS)
                    return
            await self.upsert_profile(name=name, username=username, bio=bio)

    async def fetch_profile(self, user_id: str) -> None:
        """Load a profile into ``user``. A missing document leaves it None."""
        with self._busy():
            try:
                self.user = await asyncio.to_thread(
                    user_service.get_profile, self.db, user_id
                )
            except Exception as e:
                self.handle_exception(e, c.MSG_CANNOT_RETRIEVE_USER)

    def log_out(self) -> None:
        """Sign out and drop all user state."""
        self.auth.sign_out()
        self.signed_in = False
        self.user = None
        self.posts = []
        self.notify(c.MSG_LOGGED_OUT)

    async def upload_image(
        self, image: ImageSource, content_type: str | None = None
    ) -> str | None:
        """Upload an image and return its download URL, or None on failure."""
        with self._busy():
            try:
                return await asyncio.to_thread(
                    storage_service.upload_image, self.bucket, image, content_type
                )
            except Exception as e:
                self.handle_exception(e)
                return None

    async def upload_profile_image(
        self, image: ImageSource, content_type: str | None = None
    ) -> None:
        """Upload an image and make it the profile picture."""
        if self.auth.current_user_id is None:
            self.handle_exception(label=c.MSG_IMAGE_NO_USER)
            return

        with self._busy():
            image_url = await self.upload_image(image, content_type)
            if image_url is not None:
                await self.upsert_profile(image_url=image_url)

    async def create_post(
        self,
        image: ImageSource,
        description: str,
        on_success: Callable[[], Any] | None = None,
        content_type: str | None = None,
    ) -> None:
        """Upload an image and publish it as a new post."""
        with self._busy():
            image_url = await self.upload_image(image, content_type)
            if image_url is None:
                return

            user_id = self.auth.current_user_id
            if user_id is None:
                # Session state is unusable; reset to signed out.
                self.log_out()
                self.handle_exception(label=c.MSG_POST_NO_USER)
                return

            post = Post(
                post_id=str(uuid.uuid4()),
                user_id=user_id,
                post_image=image_url,
                description=description,
                time=int(time.time() * 1000),
                username=self.user.username if self.user else None,
                user_image=self.user.image_url if self.user else None,
            )
            try:
                await asyncio.to_thread(post_service.create_post, self.db, post)
            except Exception as e:
                self.handle_exception(e, c.MSG_POST_FAILED)
                return

            self.posts.insert(0, post)
            self.notify(c.MSG_POST_CREATED)
            if on_success is not None:
                on_success()

    async def refresh_posts(self) -> None:
        """Load the session user's own posts, newest first."""
        user_id = self.auth.current_user_id
        if user_id is None:
            self.posts = []
            return

        with self._busy():
            try:
                self.posts = await asyncio.to_thread(
                    post_service.get_user_posts, self.db, user_id
                )
            except Exception as e:
                self.handle_exception(e, c.MSG_CANNOT_RETRIEVE_POSTS)
