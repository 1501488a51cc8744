from django.contrib.auth.models import AbstractUser
from django.core.validators import RegexValidator
from django.db import models
from django.db.models import CharField
from django.db.models import EmailField
from django.utils.translation import gettext_lazy as _

phone_validator = RegexValidator(
    regex=r"^\+639\d{9}$",
    message=_("Invalid Philippine phone number format. Use +639XXXXXXXXX"),
)


class User(AbstractUser):
    """
    Default custom user model for school_notify.

    Every account carries exactly one role; role drives the realtime rooms a
    connection joins and what the REST API allows.
    """

    class Role(models.TextChoices):
        ADMIN = "admin", _("Admin")
        TEACHER = "teacher", _("Teacher")
        STUDENT = "student", _("Student")

    email = EmailField(_("email address"), unique=True)
    phone = CharField(_("Phone"), max_length=20, validators=[phone_validator])
    role = CharField(
        _("Role"),
        max_length=20,
        choices=Role.choices,
        default=Role.STUDENT,
        db_index=True,
    )

    # Role specific details
    department = CharField(_("Department"), max_length=100, blank=True)
    course = CharField(_("Course"), max_length=100, blank=True)
    year_level = models.PositiveSmallIntegerField(
        _("Year level"),
        null=True,
        blank=True,
    )
    bio = models.TextField(_("Bio"), blank=True)
    profile_picture = models.ForeignKey(
        "media.Media",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )

    # Presence, maintained by the realtime layer
    online_status = models.BooleanField(default=False)
    last_active = models.DateTimeField(null=True, blank=True)

    # Audit timestamps
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["username"]

    @property
    def is_admin_role(self) -> bool:
        return self.role == self.Role.ADMIN

    @property
    def profile_picture_path(self) -> str | None:
        if self.profile_picture_id is None:
            return None
        return f"media/{self.profile_picture_id}"
