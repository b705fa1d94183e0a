from .ticket_service import KitchenTicketService
from .notification_service import KitchenNotificationService, notification_service

__all__ = ['KitchenTicketService', 'KitchenNotificationService', 'notification_service']
