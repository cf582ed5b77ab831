"""Common utilities for tests."""

from typing import Any, Optional
from unittest.mock import MagicMock

from mockfirestore import CollectionReference, Query

from instaclone.auth import AuthClient

PUBLIC_URL = "https://storage.googleapis.com/instaclone.appspot.com/images/abc"


def patch_mockfirestore() -> None:
    """Apply monkeypatches to mockfirestore to support FieldFilter."""

    def collection_where(
        self: Any,
        field_path: Optional[str] = None,
        op_string: Optional[str] = None,
        value: Any = None,
        filter: Any = None,
    ) -> Any:
        if filter:
            return self._where(filter.field_path, filter.op_string, filter.value)
        return self._where(field_path, op_string, value)

    if not hasattr(CollectionReference, "_where"):
        CollectionReference._where = CollectionReference.where
        CollectionReference.where = collection_where

    def query_where(
        self: Any,
        field_path: Optional[str] = None,
        op_string: Optional[str] = None,
        value: Any = None,
        filter: Any = None,
    ) -> Any:
        if filter:
            return self._where(filter.field_path, filter.op_string, filter.value)
        return self._where(field_path, op_string, value)

    if not hasattr(Query, "_where"):
        Query._where = Query.where
        Query.where = query_where


def make_auth_client(
    user_id: Optional[str] = None, new_user_id: str = "new_uid"
) -> MagicMock:
    """Create an AuthClient mock that tracks the signed-in user like the real one."""
    client = MagicMock(spec=AuthClient)
    client.current_user_id = user_id

    def sign_in(email: str, password: str) -> str:
        client.current_user_id = new_user_id
        return new_user_id

    def sign_out() -> None:
        client.current_user_id = None

    client.create_account.side_effect = sign_in
    client.sign_in.side_effect = sign_in
    client.sign_out.side_effect = sign_out
    return client


def make_bucket(public_url: str = PUBLIC_URL) -> MagicMock:
    """Create a Storage bucket mock whose blobs report ``public_url``."""
    bucket = MagicMock()
    bucket.blob.return_value.public_url = public_url
    return bucket
