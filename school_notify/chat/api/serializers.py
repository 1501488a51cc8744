from rest_framework import serializers

from school_notify.chat.models import Message
from school_notify.realtime.events.messages import build_message_payload


class MessageSerializer(serializers.Serializer):
    """Same shape clients receive in the ``new_message`` socket event."""

    def to_representation(self, instance: Message):
        return build_message_payload(instance)


class MessageCreateSerializer(serializers.Serializer):
    content = serializers.CharField()
    recipientId = serializers.IntegerField(  # noqa: N815
        source="recipient_id",
        required=False,
        allow_null=True,
        min_value=1,
    )
    isBroadcast = serializers.BooleanField(  # noqa: N815
        source="is_broadcast",
        required=False,
        default=False,
    )

    def validate(self, attrs):
        if attrs.get("is_broadcast"):
            attrs["recipient_id"] = None
        return attrs
