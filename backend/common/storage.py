# backend/common/storage.py
from __future__ import annotations

import logging
import uuid
from pathlib import PurePath

from django.conf import settings
from django.core.files.storage import default_storage

from common.exceptions import InvalidInput

logger = logging.getLogger(__name__)

ALLOWED_IMAGE_TYPES = {"image/jpeg", "image/png", "image/gif", "image/webp"}


def upload_file(file, folder: str) -> str:
    """
    Store an uploaded image under `<folder>/<uuid><ext>` and return its public URL.
    Backed by Django's default storage (local media in dev, any remote backend in prod).
    """
    if file is None:
        raise InvalidInput("No file provided")
    content_type = getattr(file, "content_type", None)
    if content_type not in ALLOWED_IMAGE_TYPES:
        raise InvalidInput(f"Unsupported file type: {content_type}")
    if file.size > settings.MAX_UPLOAD_BYTES:
        raise InvalidInput(f"File too large (max {settings.MAX_UPLOAD_BYTES} bytes)")

    ext = PurePath(file.name or "").suffix.lower()
    name = default_storage.save(f"{folder}/{uuid.uuid4().hex}{ext}", file)
    url = default_storage.url(name)
    logger.info("Stored upload %s (%s bytes)", name, file.size)
    return url
