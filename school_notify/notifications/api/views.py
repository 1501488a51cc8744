from __future__ import annotations

import calendar
from collections import defaultdict
from datetime import datetime

from django.db import transaction
from django.utils import timezone
from drf_spectacular.utils import OpenApiParameter
from drf_spectacular.utils import extend_schema
from drf_spectacular.utils import extend_schema_view
from rest_framework.decorators import action
from rest_framework.exceptions import ValidationError
from rest_framework.parsers import FormParser
from rest_framework.parsers import JSONParser
from rest_framework.parsers import MultiPartParser
from rest_framework.response import Response
from rest_framework.viewsets import ModelViewSet

from school_notify.audit.utils import log_action
from school_notify.media.services import delete_media
from school_notify.media.services import store_image_with_thumbnail
from school_notify.notifications.models import Notification
from school_notify.users.api.permissions import IsAdminOrTeacherCanWrite

from .filters import NotificationFilter
from .serializers import NotificationSerializer
from .serializers import NotificationWriteSerializer

DECEMBER = 12


def _month_bounds(year: int, month: int) -> tuple[datetime, datetime]:
    tz = timezone.get_current_timezone()
    start = datetime(year, month, 1, tzinfo=tz)
    if month == DECEMBER:
        end = datetime(year + 1, 1, 1, tzinfo=tz)
    else:
        end = datetime(year, month + 1, 1, tzinfo=tz)
    return start, end


def _int_param(request, name: str, default: int, low: int, high: int) -> int:
    raw = request.query_params.get(name)
    if raw in (None, ""):
        return default
    try:
        value = int(raw)
    except (TypeError, ValueError) as exc:
        raise ValidationError({name: ["Must be an integer."]}) from exc
    if not low <= value <= high:
        raise ValidationError({name: [f"Must be between {low} and {high}."]})
    return value


@extend_schema_view(
    list=extend_schema(tags=["Notifications"]),
    retrieve=extend_schema(tags=["Notifications"]),
    create=extend_schema(tags=["Notifications"]),
    update=extend_schema(tags=["Notifications"]),
    partial_update=extend_schema(tags=["Notifications"]),
    destroy=extend_schema(tags=["Notifications"]),
)
class NotificationViewSet(ModelViewSet):
    """School announcements.

    - list/retrieve/calendar/upcoming: any signed-in user
    - create/update/destroy: admins and teachers
    """

    queryset = Notification.objects.all()
    permission_classes = [IsAdminOrTeacherCanWrite]
    serializer_class = NotificationSerializer
    filterset_class = NotificationFilter
    parser_classes = [JSONParser, MultiPartParser, FormParser]
    pagination_class = None

    def get_serializer_class(self):
        if self.action in {"create", "update", "partial_update"}:
            return NotificationWriteSerializer
        return super().get_serializer_class()

    @transaction.atomic
    def perform_create(self, serializer):
        upload = serializer.validated_data.pop("image", None)
        extra = {}
        if upload is not None:
            extra["image"], extra["thumbnail"] = store_image_with_thumbnail(upload)
        instance = serializer.save(**extra)
        log_action(
            "notification_created",
            actor=self.request.user,
            model_name="notifications.Notification",
            record_id=instance.pk,
            message=f"title={instance.title}",
        )

    @transaction.atomic
    def perform_update(self, serializer):
        upload = serializer.validated_data.pop("image", None)
        old_media = ()
        extra = {}
        if upload is not None:
            old_media = (serializer.instance.image, serializer.instance.thumbnail)
            extra["image"], extra["thumbnail"] = store_image_with_thumbnail(upload)
        instance = serializer.save(**extra)
        delete_media(*old_media)
        log_action(
            "notification_updated",
            actor=self.request.user,
            model_name="notifications.Notification",
            record_id=instance.pk,
            message=f"title={instance.title}",
        )

    @transaction.atomic
    def perform_destroy(self, instance):
        media = (instance.image, instance.thumbnail)
        record_id, title = instance.pk, instance.title
        instance.delete()
        delete_media(*media)
        log_action(
            "notification_deleted",
            actor=self.request.user,
            model_name="notifications.Notification",
            record_id=record_id,
            message=f"title={title}",
        )

    @extend_schema(
        tags=["Calendar"],
        parameters=[
            OpenApiParameter("year", int, required=False),
            OpenApiParameter("month", int, required=False),
        ],
    )
    @action(detail=False)
    def calendar(self, request):
        """Announcements with an event date in a month, grouped by day."""

        today = timezone.localdate()
        year = _int_param(request, "year", today.year, 1, 9999)
        month = _int_param(request, "month", today.month, 1, DECEMBER)
        start, end = _month_bounds(year, month)

        qs = Notification.objects.filter(
            event_date__gte=start,
            event_date__lt=end,
        ).order_by("event_date", "id")

        days: dict[int, list] = defaultdict(list)
        for item in qs:
            day = timezone.localtime(item.event_date).day
            days[day].append(item)

        return Response(
            {
                "year": year,
                "month": month,
                "days_in_month": calendar.monthrange(year, month)[1],
                "days": {
                    str(day): NotificationSerializer(
                        items,
                        many=True,
                        context={"request": request},
                    ).data
                    for day, items in sorted(days.items())
                },
            },
        )

    @extend_schema(tags=["Calendar"])
    @action(detail=False)
    def upcoming(self, request):
        """Future ``event`` announcements, soonest first."""

        qs = Notification.objects.filter(
            notification_type=Notification.Type.EVENT,
            event_date__gte=timezone.now(),
        ).order_by("event_date", "id")
        return Response(
            NotificationSerializer(qs, many=True, context={"request": request}).data,
        )
