from django.contrib import admin

from school_notify.chat import models


@admin.register(models.Message)
class MessageAdmin(admin.ModelAdmin):
    list_display = [
        "id",
        "sender",
        "recipient",
        "is_broadcast",
        "is_read",
        "created_at",
    ]
    search_fields = ["content", "sender__username", "recipient__username"]
    list_filter = ["is_broadcast", "is_read", "created_at"]
    raw_id_fields = ["sender", "recipient"]
