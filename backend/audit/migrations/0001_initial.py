from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="AuditLog",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("entity_type", models.CharField(max_length=50)),
                ("entity_id", models.CharField(max_length=50)),
                ("action", models.CharField(choices=[("CREATE", "Create"), ("UPDATE", "Update"), ("PAID", "Paid"), ("CREDIT", "Credit"), ("SHIFT", "Shift"), ("OVERRIDE", "Override"), ("DELETE", "Delete")], max_length=20)),
                ("details", models.TextField(blank=True, default="")),
                ("old_values", models.JSONField(blank=True, null=True)),
                ("new_values", models.JSONField(blank=True, null=True)),
                ("performed_by", models.CharField(blank=True, default="", max_length=150)),
                ("timestamp", models.DateTimeField(auto_now_add=True)),
            ],
            options={
                "ordering": ["-timestamp", "-id"],
                "indexes": [models.Index(fields=["entity_type", "entity_id"], name="audit_entity_idx")],
            },
        ),
    ]
