from decimal import Decimal
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="TempOrderLine",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("table_no", models.PositiveIntegerField(db_index=True)),
                ("item_name", models.CharField(max_length=150)),
                ("quantity", models.DecimalField(decimal_places=2, max_digits=10)),
                ("rate", models.DecimalField(decimal_places=2, max_digits=10)),
                ("amount", models.DecimalField(decimal_places=2, default=Decimal("0.00"), help_text="Always quantity x rate; recomputed on save.", max_digits=12)),
                ("waiter_id", models.PositiveIntegerField()),
                ("is_kitchen_item", models.BooleanField(default=True)),
                ("sent_quantity", models.DecimalField(decimal_places=2, default=Decimal("0.00"), help_text="How much of this line has already been sent to the kitchen.", max_digits=10)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "verbose_name": "Provisional Order Line",
                "verbose_name_plural": "Provisional Order Lines",
                "ordering": ["id"],
                "indexes": [models.Index(fields=["table_no", "item_name"], name="orders_line_table_item_idx")],
            },
        ),
        migrations.CreateModel(
            name="ReducedItem",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("table_no", models.PositiveIntegerField(db_index=True)),
                ("item_name", models.CharField(max_length=150)),
                ("reduced_quantity", models.DecimalField(decimal_places=2, max_digits=10)),
                ("rate", models.DecimalField(decimal_places=2, max_digits=10)),
                ("amount", models.DecimalField(decimal_places=2, max_digits=12)),
                ("waiter_id", models.PositiveIntegerField(blank=True, null=True)),
                ("reduced_by_user_id", models.PositiveIntegerField(blank=True, null=True)),
                ("reduced_by_user_name", models.CharField(blank=True, default="", max_length=150)),
                ("reason", models.CharField(blank=True, default="", max_length=255)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
            ],
            options={
                "ordering": ["-created_at"],
            },
        ),
    ]
