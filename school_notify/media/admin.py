from django.contrib import admin

from school_notify.media import models


@admin.register(models.Media)
class MediaAdmin(admin.ModelAdmin):
    list_display = ["id", "filename", "mime_type", "created_at"]
    search_fields = ["filename"]
    list_filter = ["mime_type", "created_at"]
    exclude = ["data"]
