from decimal import Decimal
from django.db import models
from django.utils.translation import gettext_lazy as _


class DiningTable(models.Model):
    """
    A physical dining unit. The primary key is the stable table number staff
    use on the floor, so it is assigned explicitly rather than generated.
    """

    id = models.PositiveIntegerField(primary_key=True, help_text=_("Table number"))
    name = models.CharField(max_length=50)
    section = models.CharField(max_length=50, blank=True, default="")
    is_active = models.BooleanField(default=True)

    class Meta:
        ordering = ["id"]
        verbose_name = _("Dining Table")
        verbose_name_plural = _("Dining Tables")

    def __str__(self):
        return self.name


class MenuItem(models.Model):
    name = models.CharField(max_length=150, unique=True)
    item_code = models.CharField(max_length=50, blank=True, default="")
    rate = models.DecimalField(
        max_digits=10, decimal_places=2, default=Decimal("0.00")
    )
    is_kitchen_item = models.BooleanField(
        default=True,
        help_text=_("Kitchen items are printed on KOTs; counter stock items are not."),
    )
    is_active = models.BooleanField(default=True)

    class Meta:
        ordering = ["name"]
        indexes = [
            models.Index(fields=["name", "is_active"], name="masters_menu_name_active_idx"),
        ]

    def __str__(self):
        return f"{self.name} ({self.rate})"


class Customer(models.Model):
    name = models.CharField(max_length=150)
    phone = models.CharField(max_length=20, blank=True, default="")
    address = models.CharField(max_length=255, blank=True, default="")

    class Meta:
        ordering = ["name"]

    def __str__(self):
        return self.name


class Waiter(models.Model):
    name = models.CharField(max_length=100)
    is_active = models.BooleanField(default=True)

    class Meta:
        ordering = ["name"]

    def __str__(self):
        return self.name


class Bank(models.Model):
    name = models.CharField(max_length=100)
    account_no = models.CharField(max_length=50, blank=True, default="")
    is_cash = models.BooleanField(
        default=False, help_text=_("The cash drawer is modelled as a bank account.")
    )

    class Meta:
        ordering = ["name"]

    def __str__(self):
        return self.name
