from django.contrib import admin
from django.contrib.auth import admin as auth_admin
from django.utils.translation import gettext_lazy as _

from school_notify.users.models import User


@admin.register(User)
class UserAdmin(auth_admin.UserAdmin):
    fieldsets = (
        (None, {"fields": ("username", "password")}),
        (
            _("Personal info"),
            {"fields": ("first_name", "last_name", "email", "phone", "bio")},
        ),
        (
            _("School"),
            {"fields": ("role", "department", "course", "year_level")},
        ),
        (_("Presence"), {"fields": ("online_status", "last_active")}),
        (
            _("Permissions"),
            {"fields": ("is_active", "is_superuser", "groups", "user_permissions")},
        ),
        (_("Important dates"), {"fields": ("last_login", "date_joined")}),
    )
    list_display = ["username", "email", "role", "online_status", "is_superuser"]
    list_filter = ["role", "online_status", "is_active"]
    search_fields = ["username", "email", "phone"]
