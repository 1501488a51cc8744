from __future__ import annotations

import logging

from django.contrib.auth import get_user_model

from .models import AuditLog

logger = logging.getLogger(__name__)


def log_action(
    action: str,
    *,
    actor: object | None = None,
    message: str = "",
    model_name: str = "",
    record_id: int | None = None,
) -> AuditLog:
    user_model = get_user_model()
    actor_user = actor if isinstance(actor, user_model) else None
    logger.info(
        "audit action=%s actor=%s %s",
        action,
        getattr(actor_user, "pk", None),
        message,
    )
    return AuditLog.objects.create(
        action=action,
        actor=actor_user,
        message=message,
        model_name=model_name,
        record_id=record_id,
    )
