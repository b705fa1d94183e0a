from django.db import models
from django.utils.translation import gettext_lazy as _


class AuditLog(models.Model):
    """
    Append-only record of a state transition on a bill, table or ticket.
    """

    class Action(models.TextChoices):
        CREATE = "CREATE", _("Create")
        UPDATE = "UPDATE", _("Update")
        PAID = "PAID", _("Paid")
        CREDIT = "CREDIT", _("Credit")
        SHIFT = "SHIFT", _("Shift")
        OVERRIDE = "OVERRIDE", _("Override")
        DELETE = "DELETE", _("Delete")

    entity_type = models.CharField(max_length=50)
    entity_id = models.CharField(max_length=50)
    action = models.CharField(max_length=20, choices=Action.choices)
    details = models.TextField(blank=True, default="")
    old_values = models.JSONField(null=True, blank=True)
    new_values = models.JSONField(null=True, blank=True)
    performed_by = models.CharField(max_length=150, blank=True, default="")
    timestamp = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-timestamp", "-id"]
        indexes = [
            models.Index(fields=["entity_type", "entity_id"], name="audit_entity_idx"),
        ]

    def __str__(self):
        return f"{self.entity_type} {self.entity_id} {self.action}"
