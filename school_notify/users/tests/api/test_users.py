import pytest
from rest_framework import status

from school_notify.audit.models import AuditLog
from school_notify.media.models import Media
from school_notify.users.models import User
from tests.factories import DEFAULT_PASSWORD
from tests.factories import create_user
from tests.factories import make_image_upload

pytestmark = pytest.mark.django_db

LIST_URL = "/api/v1/users/"


def detail_url(pk: int) -> str:
    return f"{LIST_URL}{pk}/"


class TestDirectory:
    def test_list_is_grouped_by_role_without_caller(
        self, api_client, admin_account, teacher, student, other_student
    ):
        other_admin = create_user("registrar", role=User.Role.ADMIN)
        api_client.force_authenticate(admin_account)

        response = api_client.get(LIST_URL)

        assert response.status_code == status.HTTP_200_OK
        assert [u["id"] for u in response.data["admins"]] == [other_admin.pk]
        assert [u["id"] for u in response.data["teachers"]] == [teacher.pk]
        assert {u["id"] for u in response.data["students"]} == {student.pk, other_student.pk}

    def test_profile_fields_do_not_leak_password(self, api_client, student):
        api_client.force_authenticate(student)
        response = api_client.get(detail_url(student.pk))
        assert response.status_code == status.HTTP_200_OK
        assert "password" not in response.data
        assert response.data["profile_picture"] is None

    def test_me(self, api_client, teacher):
        api_client.force_authenticate(teacher)
        response = api_client.get(f"{LIST_URL}me/")
        assert response.data["username"] == "teacher"
        assert response.data["role"] == "teacher"


class TestAdministration:
    def test_only_admins_create_accounts(self, api_client, teacher):
        api_client.force_authenticate(teacher)
        response = api_client.post(
            LIST_URL,
            {
                "username": "newbie",
                "email": "newbie@example.com",
                "phone": "+639171234567",
                "password": "secret123",
                "role": "student",
            },
            format="json",
        )
        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_admin_creates_another_admin(self, api_client, admin_account):
        api_client.force_authenticate(admin_account)
        response = api_client.post(
            LIST_URL,
            {
                "username": "registrar",
                "email": "registrar@example.com",
                "phone": "+639171234567",
                "password": "secret123",
                "role": "admin",
            },
            format="json",
        )
        assert response.status_code == status.HTTP_201_CREATED, response.data
        created = User.objects.get(username="registrar")
        assert created.role == User.Role.ADMIN
        assert created.check_password("secret123")
        assert AuditLog.objects.filter(action="user_created", record_id=created.pk).exists()

    def test_admin_updates_role(self, api_client, admin_account, student):
        api_client.force_authenticate(admin_account)
        response = api_client.patch(
            detail_url(student.pk),
            {"role": "teacher", "department": "English"},
            format="json",
        )
        assert response.status_code == status.HTTP_200_OK, response.data
        student.refresh_from_db()
        assert student.role == User.Role.TEACHER
        assert student.department == "English"
        assert student.course == ""

    def test_admin_deletes_account(self, api_client, admin_account, student):
        api_client.force_authenticate(admin_account)
        response = api_client.delete(detail_url(student.pk))
        assert response.status_code == status.HTTP_204_NO_CONTENT
        assert not User.objects.filter(pk=student.pk).exists()

    def test_default_admin_cannot_be_deleted(self, api_client, admin_account, settings):
        settings.DEFAULT_ADMIN_USERNAME = "admin"
        default_admin = create_user("admin", role=User.Role.ADMIN)
        api_client.force_authenticate(admin_account)
        response = api_client.delete(detail_url(default_admin.pk))
        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert User.objects.filter(pk=default_admin.pk).exists()


class TestProfile:
    def test_update_profile(self, api_client, student):
        api_client.force_authenticate(student)
        response = api_client.patch(
            f"{LIST_URL}profile/",
            {"bio": "Hello", "year_level": 3, "department": "nope"},
            format="json",
        )
        assert response.status_code == status.HTTP_200_OK, response.data
        student.refresh_from_db()
        assert student.bio == "Hello"
        assert student.year_level == 3  # noqa: PLR2004
        assert student.department == ""

    def test_update_profile_with_picture(self, api_client, student):
        api_client.force_authenticate(student)
        response = api_client.put(
            f"{LIST_URL}profile/",
            {"bio": "With picture", "profile_picture": make_image_upload()},
            format="multipart",
        )
        assert response.status_code == status.HTTP_200_OK, response.data
        student.refresh_from_db()
        assert response.data["profile_picture"] == f"media/{student.profile_picture_id}"

    def test_picture_upload_replaces_previous(self, api_client, student):
        api_client.force_authenticate(student)
        url = f"{LIST_URL}profile/picture/"
        first = api_client.post(url, {"profile_picture": make_image_upload()}, format="multipart")
        assert first.status_code == status.HTTP_200_OK, first.data
        second = api_client.post(
            url,
            {"profile_picture": make_image_upload(name="again.png")},
            format="multipart",
        )
        assert second.status_code == status.HTTP_200_OK
        student.refresh_from_db()
        assert second.data["profile_picture"] == f"media/{student.profile_picture_id}"
        assert list(Media.objects.values_list("pk", flat=True)) == [student.profile_picture_id]

    def test_change_password(self, api_client, student):
        api_client.force_authenticate(student)
        response = api_client.post(
            f"{LIST_URL}profile/password/",
            {"current_password": DEFAULT_PASSWORD, "new_password": "brandnew1"},
            format="json",
        )
        assert response.status_code == status.HTTP_200_OK, response.data
        student.refresh_from_db()
        assert student.check_password("brandnew1")

    def test_change_password_requires_current(self, api_client, student):
        api_client.force_authenticate(student)
        response = api_client.post(
            f"{LIST_URL}profile/password/",
            {"current_password": "wrong", "new_password": "brandnew1"},
            format="json",
        )
        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert "current_password" in response.data
