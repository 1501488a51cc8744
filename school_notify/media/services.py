"""Image processing for uploaded pictures.

Uploads are re-encoded to JPEG and stored base64-encoded in :class:`Media`
rows. Announcements keep a full-size copy plus a square thumbnail; profile
pictures only keep the square version.
"""

from __future__ import annotations

import base64
import io
import logging
import time
from contextlib import suppress
from typing import TYPE_CHECKING

from django.conf import settings
from django.db import transaction
from PIL import Image
from PIL import ImageOps
from PIL import UnidentifiedImageError
from rest_framework import serializers

from school_notify.media.models import Media

if TYPE_CHECKING:  # import for type checking only
    from django.core.files.uploadedfile import UploadedFile

logger = logging.getLogger(__name__)

JPEG_MIME_TYPE = "image/jpeg"


def validate_image_upload(f: UploadedFile | None):
    """Reject oversized, non-image or unsupported uploads."""

    if f is None:
        return f
    max_size = settings.MEDIA_MAX_UPLOAD_SIZE
    size = getattr(f, "size", 0) or 0
    if size > max_size:
        size_mb = size / (1024 * 1024)
        max_mb = max_size / (1024 * 1024)
        msg = f"Image too large: {size_mb:.1f} MB > {max_mb:.0f} MB"
        raise serializers.ValidationError(msg)
    content_type = getattr(f, "content_type", None)
    if content_type not in settings.MEDIA_ALLOWED_CONTENT_TYPES:
        msg = "Invalid file type. Only JPEG, PNG, GIF and WebP are allowed."
        raise serializers.ValidationError(msg)
    try:
        # Pillow validation to ensure file is a real image
        Image.open(f).verify()
    except (UnidentifiedImageError, OSError) as exc:
        msg = "Invalid image file"
        raise serializers.ValidationError(msg) from exc
    finally:
        with suppress(Exception):
            f.seek(0)
    return f


def _open(raw: bytes) -> Image.Image:
    image = Image.open(io.BytesIO(raw))
    image = ImageOps.exif_transpose(image)
    if image.mode != "RGB":
        image = image.convert("RGB")
    return image


def _to_jpeg(image: Image.Image) -> bytes:
    buffer = io.BytesIO()
    image.save(buffer, format="JPEG", quality=settings.MEDIA_JPEG_QUALITY)
    return buffer.getvalue()


def _thumbnail(image: Image.Image) -> Image.Image:
    # Center crop to cover the target box, like CSS `object-fit: cover`.
    return ImageOps.fit(
        image,
        tuple(settings.MEDIA_THUMBNAIL_SIZE),
        method=Image.Resampling.LANCZOS,
    )


def _store(jpeg: bytes, filename: str) -> Media:
    return Media.objects.create(
        data=base64.b64encode(jpeg).decode("ascii"),
        mime_type=JPEG_MIME_TYPE,
        filename=filename,
    )


def _read(upload: UploadedFile) -> bytes:
    upload.seek(0)
    return upload.read()


def _stamp() -> int:
    return int(time.time() * 1000)


@transaction.atomic
def store_image_with_thumbnail(upload: UploadedFile) -> tuple[Media, Media]:
    """Store a full-size JPEG and a square thumbnail for an announcement."""

    image = _open(_read(upload))
    stamp = _stamp()
    full = _store(_to_jpeg(image), f"notif-{stamp}.jpg")
    thumb = _store(_to_jpeg(_thumbnail(image)), f"thumb-{stamp}.jpg")
    logger.info("Stored notification image media=%s thumbnail=%s", full.pk, thumb.pk)
    return full, thumb


def store_profile_picture(upload: UploadedFile, user_id: int) -> Media:
    image = _open(_read(upload))
    return _store(_to_jpeg(_thumbnail(image)), f"profile-{user_id}-{_stamp()}.jpg")


def decode(media: Media) -> bytes:
    return base64.b64decode(media.data)


def delete_media(*items: Media | None) -> None:
    """Delete media rows, skipping missing references."""

    ids = [m.pk for m in items if m is not None]
    if ids:
        Media.objects.filter(pk__in=ids).delete()
