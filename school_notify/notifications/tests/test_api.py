import io
from datetime import datetime
from datetime import timedelta
from unittest import mock

import pytest
from django.utils import timezone
from PIL import Image
from rest_framework import status

from school_notify.audit.models import AuditLog
from school_notify.media.models import Media
from school_notify.media.services import decode
from school_notify.notifications.models import Notification
from tests.factories import make_image_upload

pytestmark = pytest.mark.django_db

LIST_URL = "/api/v1/notifications/"


def detail_url(pk: int) -> str:
    return f"{LIST_URL}{pk}/"


def local(*args) -> datetime:
    return timezone.make_aware(datetime(*args))  # noqa: DTZ001


def create_notification(title: str, **extra) -> Notification:
    extra.setdefault("content", f"{title} details")
    return Notification.objects.create(title=title, **extra)


class TestPermissions:
    def test_anyone_signed_in_can_read(self, api_client, student):
        create_notification("Enrollment")
        api_client.force_authenticate(student)
        response = api_client.get(LIST_URL)
        assert response.status_code == status.HTTP_200_OK
        assert [item["title"] for item in response.data] == ["Enrollment"]

    def test_anonymous_is_rejected(self, api_client):
        assert api_client.get(LIST_URL).status_code == status.HTTP_401_UNAUTHORIZED

    def test_student_cannot_write(self, api_client, student):
        api_client.force_authenticate(student)
        response = api_client.post(
            LIST_URL,
            {"title": "Party", "content": "Tonight"},
            format="json",
        )
        assert response.status_code == status.HTTP_403_FORBIDDEN

    @pytest.mark.parametrize("account", ["admin_account", "teacher"])
    def test_staff_roles_can_create(self, api_client, request, account):
        api_client.force_authenticate(request.getfixturevalue(account))
        response = api_client.post(
            LIST_URL,
            {"title": "Foundation Day", "content": "No classes", "notification_type": "event"},
            format="json",
        )
        assert response.status_code == status.HTTP_201_CREATED, response.data
        assert response.data["notification_type"] == "event"
        assert AuditLog.objects.filter(action="notification_created").exists()


class TestCreate:
    def test_title_must_be_unique(self, api_client, teacher):
        create_notification("Exams")
        api_client.force_authenticate(teacher)
        response = api_client.post(
            LIST_URL,
            {"title": "Exams", "content": "Again"},
            format="json",
        )
        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert "title" in response.data

    def test_update_may_keep_its_own_title(self, api_client, teacher):
        notification = create_notification("Exams")
        api_client.force_authenticate(teacher)
        response = api_client.patch(
            detail_url(notification.pk),
            {"title": "Exams", "content": "Moved to Friday"},
            format="json",
        )
        assert response.status_code == status.HTTP_200_OK
        notification.refresh_from_db()
        assert notification.content == "Moved to Friday"

    def test_image_upload_stores_jpeg_and_thumbnail(self, api_client, admin_account):
        api_client.force_authenticate(admin_account)
        response = api_client.post(
            LIST_URL,
            {
                "title": "Sports Fest",
                "content": "Wear your PE uniform",
                "image": make_image_upload(size=(800, 400)),
            },
            format="multipart",
        )
        assert response.status_code == status.HTTP_201_CREATED, response.data

        notification = Notification.objects.get(title="Sports Fest")
        assert response.data["image"] == f"media/{notification.image_id}"
        assert response.data["thumbnail"] == f"media/{notification.thumbnail_id}"

        full = Image.open(io.BytesIO(decode(notification.image)))
        thumb = Image.open(io.BytesIO(decode(notification.thumbnail)))
        assert full.format == "JPEG"
        assert full.size == (800, 400)
        assert thumb.format == "JPEG"
        assert thumb.size == (300, 300)

    def test_non_image_upload_is_rejected(self, api_client, admin_account):
        api_client.force_authenticate(admin_account)
        bogus = make_image_upload(name="notes.txt", content_type="text/plain")
        response = api_client.post(
            LIST_URL,
            {"title": "Notes", "content": "x", "image": bogus},
            format="multipart",
        )
        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert not Media.objects.exists()

    def test_new_image_replaces_old_media(self, api_client, admin_account):
        api_client.force_authenticate(admin_account)
        api_client.post(
            LIST_URL,
            {"title": "Fair", "content": "x", "image": make_image_upload()},
            format="multipart",
        )
        notification = Notification.objects.get(title="Fair")
        old_ids = {notification.image_id, notification.thumbnail_id}

        response = api_client.patch(
            detail_url(notification.pk),
            {"image": make_image_upload(name="new.png")},
            format="multipart",
        )
        assert response.status_code == status.HTTP_200_OK, response.data
        assert not Media.objects.filter(pk__in=old_ids).exists()
        assert Media.objects.count() == 2  # noqa: PLR2004

    def test_blank_event_date_clears_it(self, api_client, teacher):
        notification = create_notification("Meeting", event_date=local(2026, 5, 1, 9))
        api_client.force_authenticate(teacher)
        response = api_client.patch(
            detail_url(notification.pk),
            {"event_date": ""},
            format="multipart",
        )
        assert response.status_code == status.HTTP_200_OK, response.data
        notification.refresh_from_db()
        assert notification.event_date is None

    def test_delete_removes_media(self, api_client, admin_account):
        api_client.force_authenticate(admin_account)
        api_client.post(
            LIST_URL,
            {"title": "Fair", "content": "x", "image": make_image_upload()},
            format="multipart",
        )
        notification = Notification.objects.get(title="Fair")
        response = api_client.delete(detail_url(notification.pk))
        assert response.status_code == status.HTTP_204_NO_CONTENT
        assert not Media.objects.exists()

    def test_creation_is_pushed_after_commit(
        self, api_client, teacher, django_capture_on_commit_callbacks
    ):
        api_client.force_authenticate(teacher)
        with (
            mock.patch(
                "school_notify.notifications.signals.publish_notification_created",
            ) as publish,
            django_capture_on_commit_callbacks(execute=True),
        ):
            api_client.post(
                LIST_URL,
                {"title": "Typhoon", "content": "Classes suspended", "notification_type": "emergency"},
                format="json",
            )
        publish.assert_called_once()
        assert publish.call_args.args[0].title == "Typhoon"


class TestListing:
    def test_newest_first_and_type_filter(self, api_client, student):
        now = timezone.now()
        older = create_notification("Old", timestamp=now - timedelta(days=2))
        newer = create_notification("New", timestamp=now, notification_type="warning")
        api_client.force_authenticate(student)

        response = api_client.get(LIST_URL)
        assert [item["id"] for item in response.data] == [newer.pk, older.pk]

        response = api_client.get(LIST_URL, {"notification_type": "warning"})
        assert [item["id"] for item in response.data] == [newer.pk]

    def test_calendar_groups_events_by_day(self, api_client, student):
        first = create_notification("Quiz", event_date=local(2026, 3, 10, 9))
        second = create_notification("Seminar", event_date=local(2026, 3, 10, 14))
        third = create_notification("Recital", event_date=local(2026, 3, 31, 18))
        create_notification("April", event_date=local(2026, 4, 1, 8))
        create_notification("Undated")

        api_client.force_authenticate(student)
        response = api_client.get(f"{LIST_URL}calendar/", {"year": 2026, "month": 3})

        assert response.status_code == status.HTTP_200_OK
        assert response.data["days_in_month"] == 31  # noqa: PLR2004
        days = response.data["days"]
        assert set(days) == {"10", "31"}
        assert [item["id"] for item in days["10"]] == [first.pk, second.pk]
        assert [item["id"] for item in days["31"]] == [third.pk]

    def test_calendar_rejects_bad_month(self, api_client, student):
        api_client.force_authenticate(student)
        response = api_client.get(f"{LIST_URL}calendar/", {"year": 2026, "month": 13})
        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_upcoming_lists_future_events_soonest_first(self, api_client, student):
        now = timezone.now()
        later = create_notification(
            "Later",
            notification_type="event",
            event_date=now + timedelta(days=10),
        )
        sooner = create_notification(
            "Sooner",
            notification_type="event",
            event_date=now + timedelta(days=1),
        )
        create_notification("Past", notification_type="event", event_date=now - timedelta(days=1))
        create_notification("Info", notification_type="info", event_date=now + timedelta(days=2))

        api_client.force_authenticate(student)
        response = api_client.get(f"{LIST_URL}upcoming/")

        assert [item["id"] for item in response.data] == [sooner.pk, later.pk]
