from __future__ import annotations

import logging

from django.conf import settings
from django.db import transaction
from django.db.models import Q
from drf_spectacular.utils import OpenApiParameter
from drf_spectacular.utils import extend_schema
from drf_spectacular.utils import extend_schema_view
from rest_framework import mixins
from rest_framework import status
from rest_framework.decorators import action
from rest_framework.exceptions import APIException
from rest_framework.exceptions import PermissionDenied
from rest_framework.exceptions import ValidationError
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.viewsets import GenericViewSet

from school_notify.chat import services
from school_notify.chat.models import Message
from school_notify.realtime.events.messages import build_participant
from school_notify.realtime.events.messages import publish_message_created
from school_notify.realtime.events.messages import publish_message_deleted
from school_notify.users.api.permissions import has_role
from school_notify.users.models import User

from .serializers import MessageCreateSerializer
from .serializers import MessageSerializer

logger = logging.getLogger(__name__)


def _admins_observe() -> bool:
    return settings.REALTIME_ADMINS_OBSERVE_DIRECT_MESSAGES


@extend_schema_view(
    list=extend_schema(
        tags=["Messages"],
        parameters=[OpenApiParameter("user", int, required=False)],
    ),
    create=extend_schema(tags=["Messages"], request=MessageCreateSerializer),
)
class MessageViewSet(mixins.ListModelMixin, GenericViewSet):
    """Chat history and REST counterpart of the ``send_message`` socket event.

    - list: broadcasts plus the caller's direct messages, oldest first;
      ``?user=<id>`` narrows it to the conversation with that user
    - read: recipient only
    - delete-for-me: anyone who can see the message
    - delete-for-everyone: sender or admin
    """

    serializer_class = MessageSerializer
    permission_classes = [IsAuthenticated]
    pagination_class = None

    def get_queryset(self):
        return Message.objects.hydrated().visible_to(
            self.request.user,
            admins_observe_direct=_admins_observe(),
        )

    def filter_queryset(self, queryset):
        queryset = super().filter_queryset(queryset)
        if self.action != "list":
            return queryset
        other = self.request.query_params.get("user")
        if other in (None, ""):
            return queryset
        try:
            other_id = int(other)
        except (TypeError, ValueError) as exc:
            raise ValidationError({"user": ["Must be an integer."]}) from exc
        return queryset.conversation(self.request.user.pk, other_id)

    def create(self, request, *args, **kwargs):
        serializer = MessageCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        try:
            message = services.create_message(
                sender_id=request.user.pk,
                content=data["content"],
                recipient_id=data.get("recipient_id"),
                is_broadcast=data.get("is_broadcast", False),
            )
        except services.RecipientNotFound as exc:
            raise ValidationError({"recipientId": ["Recipient not found"]}) from exc

        created_pk = message.pk
        message = services.hydrate(created_pk)
        if message is None:
            logger.warning("Message %s vanished before it could be sent", created_pk)
            raise APIException("Failed to send message")
        transaction.on_commit(lambda: publish_message_created(message))
        return Response(
            MessageSerializer(message).data,
            status=status.HTTP_201_CREATED,
        )

    @extend_schema(tags=["Messages"])
    @action(detail=False)
    def conversations(self, request):
        """Direct conversation partners, most recent first."""

        me = request.user.pk
        qs = Message.objects.hydrated().filter(
            Q(sender_id=me) | Q(recipient_id=me),
            is_broadcast=False,
        )
        qs = qs.not_hidden_for(me)

        latest: dict[int, Message] = {}
        unread: dict[int, int] = {}
        partners: dict[int, User] = {}
        for message in qs.order_by("-created_at", "-id"):
            if message.sender_id == me:
                partner = message.recipient
            else:
                partner = message.sender
            if partner is None:
                continue
            latest.setdefault(partner.pk, message)
            partners.setdefault(partner.pk, partner)
            if message.recipient_id == me and not message.is_read:
                unread[partner.pk] = unread.get(partner.pk, 0) + 1

        data = [
            {
                "user": build_participant(partners[partner_id]),
                "lastMessage": MessageSerializer(message).data,
                "unreadCount": unread.get(partner_id, 0),
            }
            for partner_id, message in latest.items()
        ]
        return Response(data)

    @extend_schema(tags=["Messages"], request=None)
    @action(detail=True, methods=["put"])
    def read(self, request, pk=None):
        message = self.get_object()
        if message.recipient_id != request.user.pk:
            msg = "Only the recipient can mark a message as read"
            raise PermissionDenied(msg)
        if not message.is_read:
            message.is_read = True
            message.save(update_fields=["is_read"])
        return Response(MessageSerializer(message).data)

    @extend_schema(tags=["Messages"], request=None)
    @action(detail=True, methods=["delete"], url_path="delete-for-me")
    def delete_for_me(self, request, pk=None):
        message = self.get_object()
        message.hide_for(request.user.pk)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @extend_schema(tags=["Messages"], request=None)
    @action(detail=True, methods=["delete"], url_path="delete-for-everyone")
    def delete_for_everyone(self, request, pk=None):
        message = self.get_object()
        if message.sender_id != request.user.pk and not has_role(
            request.user,
            (User.Role.ADMIN,),
        ):
            msg = "Only the sender or an admin can delete this message"
            raise PermissionDenied(msg)

        message_id = message.pk
        message.delete()
        # ``delete()`` clears the primary key; the event still needs it.
        message.pk = message_id
        logger.info(
            "Message %s deleted for everyone by user %s",
            message_id,
            request.user.pk,
        )
        transaction.on_commit(lambda: publish_message_deleted(message))
        return Response(status=status.HTTP_204_NO_CONTENT)
