from decimal import Decimal
from django.db import models
from django.db.models import F
from django.utils.translation import gettext_lazy as _

from core_backend.utils.money import line_amount


class TempOrderLineQuerySet(models.QuerySet):
    def for_table(self, table_no):
        return self.filter(table_no=table_no)

    def printable(self):
        """Kitchen lines with quantity not yet sent to the kitchen."""
        return self.filter(is_kitchen_item=True, quantity__gt=F("sent_quantity"))


class TempOrderLine(models.Model):
    """
    One unconfirmed item on a table's running order.

    Lines live here until the table is closed, at which point their contents
    are copied into the bill and the lines are deleted. A negative quantity
    represents a reduction of an earlier entry.
    """

    table_no = models.PositiveIntegerField(db_index=True)
    item_name = models.CharField(max_length=150)
    quantity = models.DecimalField(max_digits=10, decimal_places=2)
    rate = models.DecimalField(max_digits=10, decimal_places=2)
    amount = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal("0.00"),
        help_text=_("Always quantity x rate; recomputed on save."),
    )
    waiter_id = models.PositiveIntegerField()
    is_kitchen_item = models.BooleanField(default=True)
    sent_quantity = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        default=Decimal("0.00"),
        help_text=_("How much of this line has already been sent to the kitchen."),
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = TempOrderLineQuerySet.as_manager()

    class Meta:
        ordering = ["id"]
        verbose_name = _("Provisional Order Line")
        verbose_name_plural = _("Provisional Order Lines")
        indexes = [
            models.Index(fields=["table_no", "item_name"], name="orders_line_table_item_idx"),
        ]

    def __str__(self):
        return f"Table {self.table_no}: {self.item_name} x {self.quantity}"

    @property
    def pending_quantity(self):
        """Quantity still to be printed on a KOT."""
        if not self.is_kitchen_item:
            return Decimal("0.00")
        return max(self.quantity - self.sent_quantity, Decimal("0.00"))

    def save(self, *args, **kwargs):
        self.amount = line_amount(self.quantity, self.rate)
        update_fields = kwargs.get("update_fields")
        if update_fields is not None and "amount" not in update_fields:
            kwargs["update_fields"] = list(update_fields) + ["amount"]
        super().save(*args, **kwargs)


class ReducedItem(models.Model):
    """
    Trail of quantities taken back after they were already sent to the kitchen.
    """

    table_no = models.PositiveIntegerField(db_index=True)
    item_name = models.CharField(max_length=150)
    reduced_quantity = models.DecimalField(max_digits=10, decimal_places=2)
    rate = models.DecimalField(max_digits=10, decimal_places=2)
    amount = models.DecimalField(max_digits=12, decimal_places=2)
    waiter_id = models.PositiveIntegerField(null=True, blank=True)
    reduced_by_user_id = models.PositiveIntegerField(null=True, blank=True)
    reduced_by_user_name = models.CharField(max_length=150, blank=True, default="")
    reason = models.CharField(max_length=255, blank=True, default="")
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at"]

    def __str__(self):
        return f"Table {self.table_no}: -{self.reduced_quantity} {self.item_name}"
