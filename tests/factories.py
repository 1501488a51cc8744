from __future__ import annotations

import io

from django.core.files.uploadedfile import SimpleUploadedFile
from PIL import Image
from rest_framework_simplejwt.tokens import AccessToken

from school_notify.chat.models import Message
from school_notify.users.models import User

DEFAULT_PASSWORD = "TestPass123!"  # noqa: S105
DEFAULT_PHONE = "+639123456789"


def create_user(username: str, *, role: str = User.Role.STUDENT, **extra) -> User:
    extra.setdefault("email", f"{username}@example.com")
    extra.setdefault("phone", DEFAULT_PHONE)
    return User.objects.create_user(
        username=username,
        password=DEFAULT_PASSWORD,
        role=role,
        **extra,
    )


def create_message(
    sender: User,
    *,
    content: str = "Hello",
    recipient: User | None = None,
    is_broadcast: bool = False,
) -> Message:
    return Message.objects.create(
        sender=sender,
        content=content,
        recipient=recipient,
        is_broadcast=is_broadcast,
    )


def access_token_for(user: User) -> str:
    return str(AccessToken.for_user(user))


def make_image_upload(
    name: str = "picture.png",
    *,
    size: tuple[int, int] = (640, 480),
    image_format: str = "PNG",
    content_type: str = "image/png",
) -> SimpleUploadedFile:
    buffer = io.BytesIO()
    Image.new("RGB", size, color=(200, 30, 30)).save(buffer, format=image_format)
    return SimpleUploadedFile(name, buffer.getvalue(), content_type=content_type)
