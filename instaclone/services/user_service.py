"""Service functions for user profile documents."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, cast

from firebase_admin import firestore

from instaclone.constants import USER_USERNAME, USERS_COLLECTION
from instaclone.models import UserProfile

if TYPE_CHECKING:
    from google.cloud.firestore_v1.base_document import DocumentSnapshot
    from google.cloud.firestore_v1.client import Client


def username_exists(
    db: Client, username: str, exclude_user_id: str | None = None
) -> bool:
    """Check whether any profile already uses ``username``.

    The profile of ``exclude_user_id`` does not count, so a user keeping
    their own name is not reported as a clash.

    This is a plain read; two sign-ups racing on the same name can both see
    False before either profile is written.
    """
    existing = (
        db.collection(USERS_COLLECTION)
        .where(filter=firestore.FieldFilter(USER_USERNAME, "==", username))
        .limit(2)
        .stream()
    )
    return any(doc.id != exclude_user_id for doc in existing)


def get_profile(db: Client, user_id: str) -> UserProfile | None:
    """Fetch a profile by user ID, or None if it does not exist."""
    user_ref = db.collection(USERS_COLLECTION).document(user_id)
    user_doc = cast("DocumentSnapshot", user_ref.get())
    if not user_doc.exists:
        return None
    return UserProfile.from_document(user_id, user_doc.to_dict() or {})


def create_profile(db: Client, profile: UserProfile) -> None:
    """Write a full profile document."""
    user_ref = db.collection(USERS_COLLECTION).document(profile.user_id)
    user_ref.set(profile.to_document())


def update_profile(db: Client, user_id: str, changes: dict[str, Any]) -> None:
    """Update only the given keys of a profile document."""
    db.collection(USERS_COLLECTION).document(user_id).update(changes)
