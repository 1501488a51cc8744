from django.conf import settings
from django.db import models
from django.db.models import Exists
from django.db.models import OuterRef
from django.db.models import Q


class MessageQuerySet(models.QuerySet):
    def hydrated(self):
        return self.select_related("sender", "recipient")

    def not_hidden_for(self, user_id: int):
        """Drop messages the user removed with "delete for me"."""

        hidden = HiddenMessage.objects.filter(message=OuterRef("pk"), user_id=user_id)
        return self.filter(~Exists(hidden))

    def visible_to(self, user, *, admins_observe_direct: bool = True):
        """Broadcasts plus the direct messages this user may read."""

        if admins_observe_direct and user.is_admin_role:
            qs = self
        else:
            qs = self.filter(
                Q(is_broadcast=True) | Q(sender=user) | Q(recipient=user),
            )
        return qs.not_hidden_for(user.pk)

    def conversation(self, user_id: int, other_id: int):
        return self.filter(
            Q(sender_id=user_id, recipient_id=other_id)
            | Q(sender_id=other_id, recipient_id=user_id),
            is_broadcast=False,
        )


class Message(models.Model):
    """Chat message, either a broadcast or addressed to one recipient."""

    content = models.TextField()
    sender = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="sent_messages",
    )
    recipient = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="received_messages",
        null=True,
        blank=True,
    )
    is_broadcast = models.BooleanField(default=False)
    is_read = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)

    objects = MessageQuerySet.as_manager()

    class Meta:
        ordering = ["created_at", "id"]
        constraints = [
            models.CheckConstraint(
                condition=Q(is_broadcast=False) | Q(recipient__isnull=True),
                name="chat_broadcast_has_no_recipient",
            ),
        ]

    def __str__(self) -> str:  # pragma: no cover - trivial
        target = "all" if self.is_broadcast else self.recipient_id
        return f"Message({self.sender_id} -> {target})"

    def hide_for(self, user_id: int) -> bool:
        """Record a per-user delete. Returns False when already hidden."""

        _, created = HiddenMessage.objects.get_or_create(message=self, user_id=user_id)
        return created


class HiddenMessage(models.Model):
    """A message one user removed from their own view ("delete for me")."""

    message = models.ForeignKey(
        Message,
        on_delete=models.CASCADE,
        related_name="hidden_entries",
    )
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="hidden_messages",
    )
    hidden_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(
                fields=["message", "user"],
                name="chat_hidden_message_once_per_user",
            ),
        ]
