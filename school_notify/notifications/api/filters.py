import django_filters

from school_notify.notifications.models import Notification


class NotificationFilter(django_filters.FilterSet):
    notification_type = django_filters.ChoiceFilter(choices=Notification.Type.choices)
    has_event = django_filters.BooleanFilter(
        field_name="event_date",
        lookup_expr="isnull",
        exclude=True,
    )
    event_after = django_filters.IsoDateTimeFilter(
        field_name="event_date",
        lookup_expr="gte",
    )
    event_before = django_filters.IsoDateTimeFilter(
        field_name="event_date",
        lookup_expr="lt",
    )

    class Meta:
        model = Notification
        fields = ["notification_type", "has_event", "event_after", "event_before"]
