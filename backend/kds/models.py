from decimal import Decimal
from django.db import models
from django.utils import timezone


class KitchenTicketStatus(models.TextChoices):
    SENT = 'SENT', 'Sent'
    READY = 'READY', 'Ready'
    SERVE = 'SERVE', 'Served'


class KitchenTicketManager(models.Manager):
    """Custom manager for kitchen tickets with display queries"""

    def get_optimized_queryset(self):
        return self.prefetch_related('lines').order_by('sent_at', 'id')

    def pending(self):
        return self.get_optimized_queryset().filter(status=KitchenTicketStatus.SENT)

    def ready(self):
        return self.get_optimized_queryset().filter(status=KitchenTicketStatus.READY)

    def for_table(self, table_no):
        return self.get_optimized_queryset().filter(table_no=table_no)


class KitchenTicket(models.Model):
    """
    One batch of items sent to the kitchen for a table (a KOT).

    The ticket's lines are a snapshot of what was printed and are never edited;
    only the status moves, and only forward.
    """

    table_no = models.PositiveIntegerField(db_index=True)
    table_name = models.CharField(max_length=50, blank=True, default='')
    waiter_id = models.PositiveIntegerField(null=True, blank=True)
    status = models.CharField(
        max_length=10,
        choices=KitchenTicketStatus.choices,
        default=KitchenTicketStatus.SENT,
    )
    item_count = models.PositiveIntegerField(default=0)
    total_quantity = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal('0.00'))

    sent_at = models.DateTimeField(default=timezone.now)
    ready_at = models.DateTimeField(null=True, blank=True)
    served_at = models.DateTimeField(null=True, blank=True)

    objects = KitchenTicketManager()

    class Meta:
        ordering = ['sent_at', 'id']
        indexes = [
            models.Index(fields=['table_no', 'status'], name='kds_ticket_table_status_idx'),
            models.Index(fields=['status', 'sent_at'], name='kds_ticket_status_sent_idx'),
        ]

    def __str__(self):
        return f"KOT #{self.id} - {self.table_name or self.table_no} ({self.status})"

    @property
    def prep_time_minutes(self):
        """Minutes from sending to ready"""
        if self.sent_at and self.ready_at:
            return int((self.ready_at - self.sent_at).total_seconds() / 60)
        return None

    def to_dict(self):
        """Payload pushed to kitchen displays"""
        return {
            'id': self.id,
            'table_no': self.table_no,
            'table_name': self.table_name,
            'waiter_id': self.waiter_id,
            'status': self.status,
            'item_count': self.item_count,
            'total_quantity': str(self.total_quantity),
            'sent_at': self.sent_at.isoformat() if self.sent_at else None,
            'ready_at': self.ready_at.isoformat() if self.ready_at else None,
            'served_at': self.served_at.isoformat() if self.served_at else None,
            'lines': [line.to_dict() for line in self.lines.all()],
        }


class KitchenTicketLine(models.Model):
    ticket = models.ForeignKey(KitchenTicket, on_delete=models.CASCADE, related_name='lines')
    item_id = models.PositiveIntegerField(null=True, blank=True)
    item_name = models.CharField(max_length=150)
    quantity = models.DecimalField(max_digits=10, decimal_places=2)
    rate = models.DecimalField(max_digits=10, decimal_places=2)
    position = models.PositiveIntegerField(default=0)

    class Meta:
        ordering = ['position', 'id']

    def __str__(self):
        return f"{self.item_name} x {self.quantity}"

    def to_dict(self):
        return {
            'item_id': self.item_id,
            'item_name': self.item_name,
            'quantity': str(self.quantity),
            'rate': str(self.rate),
        }
