from django.contrib import admin

from .models import AuditLog


@admin.register(AuditLog)
class AuditLogAdmin(admin.ModelAdmin):
    list_display = ("timestamp", "entity_type", "entity_id", "action", "performed_by")
    list_filter = ("entity_type", "action")
    search_fields = ("entity_id", "details", "performed_by")
    readonly_fields = [f.name for f in AuditLog._meta.fields]

    def has_add_permission(self, request):
        return False
