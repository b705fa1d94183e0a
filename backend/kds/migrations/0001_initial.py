from decimal import Decimal
import django.db.models.deletion
import django.utils.timezone
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='KitchenTicket',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('table_no', models.PositiveIntegerField(db_index=True)),
                ('table_name', models.CharField(blank=True, default='', max_length=50)),
                ('waiter_id', models.PositiveIntegerField(blank=True, null=True)),
                ('status', models.CharField(choices=[('SENT', 'Sent'), ('READY', 'Ready'), ('SERVE', 'Served')], default='SENT', max_length=10)),
                ('item_count', models.PositiveIntegerField(default=0)),
                ('total_quantity', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=10)),
                ('sent_at', models.DateTimeField(default=django.utils.timezone.now)),
                ('ready_at', models.DateTimeField(blank=True, null=True)),
                ('served_at', models.DateTimeField(blank=True, null=True)),
            ],
            options={
                'ordering': ['sent_at', 'id'],
                'indexes': [
                    models.Index(fields=['table_no', 'status'], name='kds_ticket_table_status_idx'),
                    models.Index(fields=['status', 'sent_at'], name='kds_ticket_status_sent_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='KitchenTicketLine',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('item_id', models.PositiveIntegerField(blank=True, null=True)),
                ('item_name', models.CharField(max_length=150)),
                ('quantity', models.DecimalField(decimal_places=2, max_digits=10)),
                ('rate', models.DecimalField(decimal_places=2, max_digits=10)),
                ('position', models.PositiveIntegerField(default=0)),
                ('ticket', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='lines', to='kds.kitchenticket')),
            ],
            options={
                'ordering': ['position', 'id'],
            },
        ),
    ]
