from decimal import Decimal
from django.db import models
from django.db.models import Q
from django.utils.translation import gettext_lazy as _

from core_backend.utils.money import line_amount, sum_amounts


class BillStatus(models.TextChoices):
    CLOSE = "CLOSE", _("Closed (unpaid)")
    PAID = "PAID", _("Paid")
    CREDIT = "CREDIT", _("Credit")


class PayMode(models.TextChoices):
    PENDING = "PENDING", _("Pending")
    CASH = "CASH", _("Cash")
    BANK = "BANK", _("Bank")
    CREDIT = "CREDIT", _("Credit")


class BillQuerySet(models.QuerySet):
    def open(self):
        return self.filter(status=BillStatus.CLOSE)

    def settled(self):
        return self.filter(status__in=[BillStatus.PAID, BillStatus.CREDIT])

    def for_table(self, table_no):
        return self.filter(table_no=table_no)


class Bill(models.Model):
    """
    The financial record of one table visit.

    Created in CLOSE when the table is first closed; further closes append
    lines. Settles exactly once, to PAID or CREDIT.
    """

    bill_no = models.BigAutoField(primary_key=True)
    table_no = models.PositiveIntegerField(db_index=True)
    waiter_id = models.PositiveIntegerField(null=True, blank=True)
    user_id = models.PositiveIntegerField(
        null=True, blank=True, help_text=_("Cashier who closed the table")
    )
    customer_id = models.PositiveIntegerField(null=True, blank=True)
    bank_id = models.PositiveIntegerField(null=True, blank=True)

    bill_amount = models.DecimalField(
        max_digits=12, decimal_places=2, default=Decimal("0.00"),
        help_text=_("Gross: sum of line amounts"),
    )
    discount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    net_amount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    cash_received = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    return_amount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    total_quantity = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal("0.00"))

    paymode = models.CharField(max_length=10, choices=PayMode.choices, default=PayMode.PENDING)
    status = models.CharField(max_length=10, choices=BillStatus.choices, default=BillStatus.CLOSE)

    # Stored as formatted strings; searches and the daily summary match on them
    bill_date = models.CharField(max_length=10, db_index=True)
    bill_time = models.CharField(max_length=8)

    remarks = models.CharField(max_length=255, blank=True, default="")
    closed_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = BillQuerySet.as_manager()

    class Meta:
        ordering = ["-bill_no"]
        indexes = [
            models.Index(fields=["table_no", "status"], name="billing_bill_table_status_idx"),
            models.Index(fields=["bill_date", "status"], name="billing_bill_date_status_idx"),
            models.Index(fields=["customer_id", "status"], name="billing_bill_cust_status_idx"),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=["table_no"],
                condition=Q(status="CLOSE"),
                name="billing_one_open_bill_per_table",
            ),
        ]

    def __str__(self):
        return f"Bill #{self.bill_no} - Table {self.table_no} ({self.status})"

    @property
    def is_open(self):
        return self.status == BillStatus.CLOSE

    def recalculate_totals(self):
        """
        Recompute gross, quantity and net from the lines. Does not save.
        """
        lines = list(self.lines.all())
        self.bill_amount = sum_amounts(line.amount for line in lines)
        self.total_quantity = sum((line.quantity for line in lines), Decimal("0.00"))
        self.net_amount = self.bill_amount - (self.discount or Decimal("0.00"))


class BillLine(models.Model):
    """One billed item. Owned by its bill; deleted with it."""

    bill = models.ForeignKey(Bill, on_delete=models.CASCADE, related_name="lines")
    item_name = models.CharField(max_length=150)
    item_code = models.CharField(max_length=50, blank=True, default="")
    quantity = models.DecimalField(max_digits=10, decimal_places=2)
    rate = models.DecimalField(max_digits=10, decimal_places=2)
    amount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    position = models.PositiveIntegerField(default=0)

    class Meta:
        ordering = ["position", "id"]

    def __str__(self):
        return f"{self.item_name} x {self.quantity} @ {self.rate}"

    def save(self, *args, **kwargs):
        self.amount = line_amount(self.quantity, self.rate)
        super().save(*args, **kwargs)
