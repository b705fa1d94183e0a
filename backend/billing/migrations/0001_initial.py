from decimal import Decimal
import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Bill",
            fields=[
                ("bill_no", models.BigAutoField(primary_key=True, serialize=False)),
                ("table_no", models.PositiveIntegerField(db_index=True)),
                ("waiter_id", models.PositiveIntegerField(blank=True, null=True)),
                ("user_id", models.PositiveIntegerField(blank=True, help_text="Cashier who closed the table", null=True)),
                ("customer_id", models.PositiveIntegerField(blank=True, null=True)),
                ("bank_id", models.PositiveIntegerField(blank=True, null=True)),
                ("bill_amount", models.DecimalField(decimal_places=2, default=Decimal("0.00"), help_text="Gross: sum of line amounts", max_digits=12)),
                ("discount", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=12)),
                ("net_amount", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=12)),
                ("cash_received", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=12)),
                ("return_amount", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=12)),
                ("total_quantity", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=10)),
                ("paymode", models.CharField(choices=[("PENDING", "Pending"), ("CASH", "Cash"), ("BANK", "Bank"), ("CREDIT", "Credit")], default="PENDING", max_length=10)),
                ("status", models.CharField(choices=[("CLOSE", "Closed (unpaid)"), ("PAID", "Paid"), ("CREDIT", "Credit")], default="CLOSE", max_length=10)),
                ("bill_date", models.CharField(db_index=True, max_length=10)),
                ("bill_time", models.CharField(max_length=8)),
                ("remarks", models.CharField(blank=True, default="", max_length=255)),
                ("closed_at", models.DateTimeField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "ordering": ["-bill_no"],
                "indexes": [
                    models.Index(fields=["table_no", "status"], name="billing_bill_table_status_idx"),
                    models.Index(fields=["bill_date", "status"], name="billing_bill_date_status_idx"),
                    models.Index(fields=["customer_id", "status"], name="billing_bill_cust_status_idx"),
                ],
                "constraints": [
                    models.UniqueConstraint(condition=models.Q(("status", "CLOSE")), fields=("table_no",), name="billing_one_open_bill_per_table"),
                ],
            },
        ),
        migrations.CreateModel(
            name="BillLine",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("item_name", models.CharField(max_length=150)),
                ("item_code", models.CharField(blank=True, default="", max_length=50)),
                ("quantity", models.DecimalField(decimal_places=2, max_digits=10)),
                ("rate", models.DecimalField(decimal_places=2, max_digits=10)),
                ("amount", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=12)),
                ("position", models.PositiveIntegerField(default=0)),
                ("bill", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="lines", to="billing.bill")),
            ],
            options={
                "ordering": ["position", "id"],
            },
        ),
    ]
