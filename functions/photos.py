import logging
import os
import random
import string
import time

import variables as var
from functions.errors import PhotoRejected

logger = logging.getLogger(__name__)


def validate_photo(content_type, size, current_count):
    if current_count >= var.max_photos:
        raise PhotoRejected(f"Maximum {var.max_photos} photos")
    if (content_type or "").lower() not in var.allowed_photo_types:
        raise PhotoRejected("Please upload an image (JPG, PNG, WEBP, HEIC)")
    if size > var.max_photo_bytes:
        raise PhotoRejected("File must not exceed 10 MB")


def storage_path(user_id, file_name):
    ext = os.path.splitext(file_name or "")[1].lstrip(".").lower() or "jpg"
    suffix = "".join(random.choices(string.ascii_lowercase + string.digits, k=6))
    return f"{user_id}/{int(time.time() * 1000)}-{suffix}.{ext}"


def upload_bytes(client, path, data, content_type):
    bucket = client.storage.from_(var.bucket_photos)
    bucket.upload(
        path,
        data,
        file_options={"content-type": content_type, "cache-control": "3600", "upsert": "false"},
    )
    return bucket.get_public_url(path)


def upload_photo(client, user_id, file_name, content_type, data, photos):
    """Validate and store one photo, returning the new photo list."""
    photos = list(photos or [])
    validate_photo(content_type, len(data), len(photos))

    url = upload_bytes(client, storage_path(user_id, file_name), data, content_type)
    logger.info("Uploaded photo for %s", user_id)
    return photos + [url]


def path_from_url(url):
    marker = f"/{var.bucket_photos}/"
    if marker not in (url or ""):
        return None
    return url.split(marker, 1)[1].split("?", 1)[0]


def remove_photo(client, photos, index):
    photos = list(photos)
    url = photos.pop(index)
    path = path_from_url(url)
    if path:
        client.storage.from_(var.bucket_photos).remove([path])
    return photos
