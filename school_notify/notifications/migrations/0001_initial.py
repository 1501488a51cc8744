import django.db.models.deletion
import django.utils.timezone
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("media", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="Notification",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("title", models.CharField(max_length=100, unique=True)),
                ("content", models.TextField()),
                ("notification_type", models.CharField(choices=[("info", "Info"), ("event", "Event"), ("emergency", "Emergency"), ("success", "Success"), ("warning", "Warning")], default="info", max_length=20)),
                ("event_date", models.DateTimeField(blank=True, db_index=True, null=True)),
                ("timestamp", models.DateTimeField(default=django.utils.timezone.now)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("image", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="+", to="media.media")),
                ("thumbnail", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="+", to="media.media")),
            ],
            options={
                "ordering": ["-timestamp", "-id"],
            },
        ),
    ]
