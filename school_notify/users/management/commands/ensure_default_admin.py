from django.conf import settings
from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand
from django.utils.translation import gettext as _


class Command(BaseCommand):
    help = _("Create the default admin account if it does not exist")

    def handle(self, *args, **options):
        user_model = get_user_model()
        username = settings.DEFAULT_ADMIN_USERNAME
        if user_model.objects.filter(username=username).exists():
            self.stdout.write(f"Default admin '{username}' already exists")
            return

        user_model.objects.create_user(
            username=username,
            email=settings.DEFAULT_ADMIN_EMAIL,
            phone=settings.DEFAULT_ADMIN_PHONE,
            password=settings.DEFAULT_ADMIN_PASSWORD,
            role=user_model.Role.ADMIN,
        )
        self.stdout.write(self.style.SUCCESS(f"Default admin '{username}' created"))
