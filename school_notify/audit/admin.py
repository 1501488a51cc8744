from django.contrib import admin

from school_notify.audit import models


@admin.register(models.AuditLog)
class AuditLogAdmin(admin.ModelAdmin):
    list_display = ["id", "action", "actor", "model_name", "record_id", "created_at"]
    search_fields = ["action", "message", "model_name"]
    list_filter = ["action", "created_at"]
    readonly_fields = ["action", "actor", "message", "model_name", "record_id"]
