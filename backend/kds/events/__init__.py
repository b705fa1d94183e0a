from .publishers import KitchenTicketEventPublisher

__all__ = ['KitchenTicketEventPublisher']
