"""Service functions for post documents."""

from __future__ import annotations

from typing import TYPE_CHECKING

from firebase_admin import firestore

from instaclone.constants import POST_USER_ID, POSTS_COLLECTION
from instaclone.models import Post

if TYPE_CHECKING:
    from google.cloud.firestore_v1.client import Client


def create_post(db: Client, post: Post) -> None:
    """Write a new post document keyed by its post ID."""
    db.collection(POSTS_COLLECTION).document(post.post_id).set(post.to_document())


def get_user_posts(db: Client, user_id: str, limit: int = 50) -> list[Post]:
    """Fetch a user's posts, newest first."""
    query = db.collection(POSTS_COLLECTION).where(
        filter=firestore.FieldFilter(POST_USER_ID, "==", user_id)
    )
    posts = []
    for doc in query.stream():
        data = doc.to_dict()
        if data:
            posts.append(Post.from_document(doc.id, data))
    # Sorted here so the query needs no composite index.
    posts.sort(key=lambda p: p.time, reverse=True)
    return posts[:limit]
