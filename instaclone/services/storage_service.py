"""Service functions for image uploads to Firebase Storage."""

from __future__ import annotations

import os
import uuid
from typing import IO, TYPE_CHECKING, Union

from instaclone.constants import IMAGES_PREFIX

if TYPE_CHECKING:
    from google.cloud.storage.bucket import Bucket

ImageSource = Union[str, "os.PathLike[str]", IO[bytes]]


def upload_image(
    bucket: Bucket, image: ImageSource, content_type: str | None = None
) -> str:
    """Upload an image under a fresh unique key and return its public URL.

    ``image`` is either a local file path or a readable binary stream.
    """
    blob = bucket.blob(f"{IMAGES_PREFIX}/{uuid.uuid4()}")
    if isinstance(image, (str, os.PathLike)):
        blob.upload_from_filename(os.fspath(image), content_type=content_type)
    else:
        blob.upload_from_file(image, content_type=content_type)
    blob.make_public()
    return blob.public_url
