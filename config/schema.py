"""drf-spectacular post-processing hook.

Groups every operation under one feature tag so the Swagger UI sidebar
follows the API sections rather than the viewset names.
"""

from __future__ import annotations

from typing import Any

_HTTP_METHODS = {"get", "post", "put", "patch", "delete", "options", "head"}


PATTERN_TAGS = [
    ("/api/v1/auth/jwt", "JWT Authentication"),
    ("/api/v1/auth/", "Authentication"),
    ("/api/v1/users/me", "Profile"),
    ("/api/v1/users/profile", "Profile"),
    ("/api/v1/users", "Users"),
    ("/api/v1/notifications/calendar", "Calendar"),
    ("/api/v1/notifications/upcoming", "Calendar"),
    ("/api/v1/notifications", "Notifications"),
    ("/api/v1/messages", "Messages"),
    ("/api/v1/media", "Media"),
    ("/api/v1/audit", "Audit"),
]

ALL_TAGS = list(dict.fromkeys(t for _, t in PATTERN_TAGS))


def assign_group_tag(path: str) -> str | None:
    """Return the first matching tag name for a given path."""
    for prefix, tag in PATTERN_TAGS:
        if path.startswith(prefix):
            return tag
    return None


def group_tags(result: dict[str, Any], **kwargs: Any) -> dict[str, Any]:
    paths = result.get("paths", {})
    for path, path_item in paths.items():
        tag = assign_group_tag(path)
        if not tag:
            continue
        for method, op_obj in path_item.items():
            if method.lower() not in _HTTP_METHODS or not isinstance(op_obj, dict):
                continue
            op_obj["tags"] = [tag]

    existing = {t.get("name") for t in result.get("tags", [])}
    tag_list = result.setdefault("tags", [])
    for tag in ALL_TAGS:
        if tag not in existing:
            tag_list.append({"name": tag})
    return result
