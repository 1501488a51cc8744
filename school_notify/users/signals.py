from __future__ import annotations

from django.contrib.auth import get_user_model
from django.db.models.signals import pre_save
from django.dispatch import receiver


@receiver(pre_save, sender=get_user_model())
def sync_staff_flag_with_role(sender, instance, **kwargs):
    """Give admin-role accounts access to the Django admin site.

    Superusers keep ``is_staff`` whatever their role is.
    """

    if instance.is_superuser:
        instance.is_staff = True
        return
    instance.is_staff = instance.is_admin_role
