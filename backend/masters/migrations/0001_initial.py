from decimal import Decimal
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="DiningTable",
            fields=[
                ("id", models.PositiveIntegerField(help_text="Table number", primary_key=True, serialize=False)),
                ("name", models.CharField(max_length=50)),
                ("section", models.CharField(blank=True, default="", max_length=50)),
                ("is_active", models.BooleanField(default=True)),
            ],
            options={
                "verbose_name": "Dining Table",
                "verbose_name_plural": "Dining Tables",
                "ordering": ["id"],
            },
        ),
        migrations.CreateModel(
            name="MenuItem",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=150, unique=True)),
                ("item_code", models.CharField(blank=True, default="", max_length=50)),
                ("rate", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=10)),
                ("is_kitchen_item", models.BooleanField(default=True, help_text="Kitchen items are printed on KOTs; counter stock items are not.")),
                ("is_active", models.BooleanField(default=True)),
            ],
            options={
                "ordering": ["name"],
                "indexes": [models.Index(fields=["name", "is_active"], name="masters_menu_name_active_idx")],
            },
        ),
        migrations.CreateModel(
            name="Customer",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=150)),
                ("phone", models.CharField(blank=True, default="", max_length=20)),
                ("address", models.CharField(blank=True, default="", max_length=255)),
            ],
            options={
                "ordering": ["name"],
            },
        ),
        migrations.CreateModel(
            name="Waiter",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=100)),
                ("is_active", models.BooleanField(default=True)),
            ],
            options={
                "ordering": ["name"],
            },
        ),
        migrations.CreateModel(
            name="Bank",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=100)),
                ("account_no", models.CharField(blank=True, default="", max_length=50)),
                ("is_cash", models.BooleanField(default=False, help_text="The cash drawer is modelled as a bank account.")),
            ],
            options={
                "ordering": ["name"],
            },
        ),
    ]
