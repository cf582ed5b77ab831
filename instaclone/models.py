"""Data models for profiles and posts."""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from typing import Any

from . import constants as c

# Attribute name -> Firestore key for profile documents.
_PROFILE_KEYS = {
    "user_id": c.USER_ID,
    "name": c.USER_NAME,
    "username": c.USER_USERNAME,
    "bio": c.USER_BIO,
    "image_url": c.USER_IMAGE_URL,
    "following": c.USER_FOLLOWING,
}


@dataclass(frozen=True)
class UserProfile:
    """A user document in the 'users' collection."""

    user_id: str
    name: str | None = None
    username: str | None = None
    bio: str | None = None
    image_url: str | None = None
    following: list[str] | None = None

    def to_document(self) -> dict[str, Any]:
        """Serialize to a Firestore document, skipping unset fields."""
        doc = {}
        for attr, key in _PROFILE_KEYS.items():
            value = getattr(self, attr)
            if value is not None:
                doc[key] = value
        return doc

    @classmethod
    def from_document(cls, user_id: str, data: dict[str, Any]) -> UserProfile:
        """Build a profile from stored data. Missing keys become defaults."""
        return cls(
            user_id=data.get(c.USER_ID) or user_id,
            name=data.get(c.USER_NAME),
            username=data.get(c.USER_USERNAME),
            bio=data.get(c.USER_BIO),
            image_url=data.get(c.USER_IMAGE_URL),
            following=list(data.get(c.USER_FOLLOWING) or []),
        )


@dataclass(frozen=True)
class ProfileUpdate:
    """A partial profile update. None means "keep the previous value"."""

    name: str | None = None
    username: str | None = None
    bio: str | None = None
    image_url: str | None = None

    def supplied(self) -> dict[str, str]:
        """Return the fields that were explicitly supplied."""
        return {
            f.name: getattr(self, f.name)
            for f in dataclasses.fields(self)
            if getattr(self, f.name) is not None
        }


def merge_profile(previous: UserProfile, update: ProfileUpdate) -> UserProfile:
    """Return a new profile with supplied fields laid over ``previous``.

    Every field falls back to the same field of the previous snapshot.
    ``user_id`` and ``following`` are never touched by an update.
    """
    return dataclasses.replace(previous, **update.supplied())


def profile_changes(previous: UserProfile, current: UserProfile) -> dict[str, Any]:
    """Return the Firestore keys whose values differ between two snapshots."""
    changes = {}
    for attr, key in _PROFILE_KEYS.items():
        new_value = getattr(current, attr)
        if new_value is not None and new_value != getattr(previous, attr):
            changes[key] = new_value
    return changes


@dataclass
class Post:
    """A post document in the 'posts' collection.

    ``username`` and ``user_image`` are copied from the author's profile at
    creation time and are not kept in sync with later profile edits.
    """

    post_id: str
    user_id: str
    post_image: str
    description: str
    time: int
    username: str | None = None
    user_image: str | None = None

    def to_document(self) -> dict[str, Any]:
        """Serialize to a Firestore document."""
        return {
            c.POST_ID: self.post_id,
            c.POST_USER_ID: self.user_id,
            c.POST_USERNAME: self.username,
            c.POST_USER_IMAGE: self.user_image,
            c.POST_IMAGE: self.post_image,
            c.POST_DESCRIPTION: self.description,
            c.POST_TIME: self.time,
        }

    @classmethod
    def from_document(cls, post_id: str, data: dict[str, Any]) -> Post:
        """Build a post from stored data."""
        return cls(
            post_id=data.get(c.POST_ID) or post_id,
            user_id=data.get(c.POST_USER_ID, ""),
            post_image=data.get(c.POST_IMAGE, ""),
            description=data.get(c.POST_DESCRIPTION, ""),
            time=int(data.get(c.POST_TIME) or 0),
            username=data.get(c.POST_USERNAME),
            user_image=data.get(c.POST_USER_IMAGE),
        )
