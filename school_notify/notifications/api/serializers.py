from __future__ import annotations

from rest_framework import serializers

from school_notify.media.services import validate_image_upload
from school_notify.notifications.models import Notification

READ_FIELDS = (
    "id",
    "title",
    "content",
    "notification_type",
    "image",
    "thumbnail",
    "event_date",
    "timestamp",
    "created_at",
    "updated_at",
)


class NotificationSerializer(serializers.ModelSerializer):
    """Read serializer; images are exposed as ``media/{id}`` paths."""

    image = serializers.CharField(source="image_path", read_only=True)
    thumbnail = serializers.CharField(source="thumbnail_path", read_only=True)

    class Meta:
        model = Notification
        fields = READ_FIELDS
        read_only_fields = READ_FIELDS


class NotificationWriteSerializer(serializers.ModelSerializer):
    """Create/update serializer.

    ``image`` is an optional upload; a new upload replaces the stored image
    and thumbnail. Sending ``event_date`` as an empty value clears it.
    """

    title = serializers.CharField(max_length=100)
    image = serializers.ImageField(write_only=True, required=False)
    event_date = serializers.CharField(
        required=False,
        allow_null=True,
        allow_blank=True,
    )

    class Meta:
        model = Notification
        fields = ("title", "content", "notification_type", "event_date", "image")

    def validate_event_date(self, value):
        # Multipart forms send a cleared date as "".
        if not value:
            return None
        return serializers.DateTimeField().to_internal_value(value)

    def validate_title(self, value: str) -> str:
        value = value.strip()
        qs = Notification.objects.filter(title=value)
        if self.instance is not None:
            qs = qs.exclude(pk=self.instance.pk)
        if qs.exists():
            msg = "A notification with this title already exists"
            raise serializers.ValidationError(msg)
        return value

    def validate_image(self, value):
        return validate_image_upload(value)

    def to_representation(self, instance):
        return NotificationSerializer(instance, context=self.context).data
