from django.contrib import admin

from school_notify.notifications import models


@admin.register(models.Notification)
class NotificationAdmin(admin.ModelAdmin):
    list_display = ["id", "title", "notification_type", "event_date", "timestamp"]
    search_fields = ["title", "content"]
    list_filter = ["notification_type", "event_date", "timestamp"]
    raw_id_fields = ["image", "thumbnail"]
