from django.db import models
from django.utils import timezone
from django.utils.translation import gettext_lazy as _


class Notification(models.Model):
    """School-wide announcement, optionally illustrated and dated."""

    class Type(models.TextChoices):
        INFO = "info", _("Info")
        EVENT = "event", _("Event")
        EMERGENCY = "emergency", _("Emergency")
        SUCCESS = "success", _("Success")
        WARNING = "warning", _("Warning")

    title = models.CharField(max_length=100, unique=True)
    content = models.TextField()
    notification_type = models.CharField(
        max_length=20,
        choices=Type.choices,
        default=Type.INFO,
    )
    image = models.ForeignKey(
        "media.Media",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )
    thumbnail = models.ForeignKey(
        "media.Media",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )
    # Drives the calendar; any type may carry one.
    event_date = models.DateTimeField(null=True, blank=True, db_index=True)
    timestamp = models.DateTimeField(default=timezone.now)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-timestamp", "-id"]

    def __str__(self):
        return self.title

    @property
    def image_path(self) -> str | None:
        return f"media/{self.image_id}" if self.image_id else None

    @property
    def thumbnail_path(self) -> str | None:
        return f"media/{self.thumbnail_id}" if self.thumbnail_id else None
