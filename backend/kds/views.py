from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework import status
import logging

from .serializers import KitchenTicketSerializer, SendTicketSerializer, grouped_tickets_data
from .services import KitchenTicketService

logger = logging.getLogger(__name__)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def pending_tickets(request):
    """SENT tickets grouped by table, tables in order of first ticket"""
    return Response(grouped_tickets_data(KitchenTicketService.list_pending()))


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def ready_tickets(request):
    """READY tickets grouped by table"""
    return Response(grouped_tickets_data(KitchenTicketService.list_ready()))


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def all_tickets(request):
    return Response(grouped_tickets_data(KitchenTicketService.list_all()))


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def table_tickets(request, table_no):
    tickets = KitchenTicketService.tickets_for_table(table_no)
    return Response(KitchenTicketSerializer(tickets, many=True).data)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def send_ticket(request):
    """
    Send an explicit list of lines to the kitchen.

    Body:
    - table_no: Table number (required)
    - table_name: Display name (defaults to the table's name)
    - waiter_id: Waiter sending the ticket
    - lines: [{item_name, quantity, rate, item_id}]
    """
    serializer = SendTicketSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    data = serializer.validated_data

    table_name = data.get('table_name')
    if not table_name:
        from masters.services import NameLookupService
        table_name = NameLookupService.table_name(data['table_no']) or f"Table {data['table_no']}"

    ticket = KitchenTicketService.send(
        data['table_no'],
        table_name,
        data.get('waiter_id'),
        data['lines'],
    )
    logger.info(f"API: Sent KOT {ticket.id} for table {ticket.table_no}")
    return Response(KitchenTicketSerializer(ticket).data, status=status.HTTP_201_CREATED)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def ticket_detail(request, ticket_id):
    ticket = KitchenTicketService.get(ticket_id)
    return Response(KitchenTicketSerializer(ticket).data)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def mark_ticket_ready(request, ticket_id):
    ticket = KitchenTicketService.mark_ready(ticket_id)
    return Response(KitchenTicketSerializer(ticket).data)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def mark_ticket_served(request, ticket_id):
    ticket = KitchenTicketService.mark_serve(ticket_id)
    return Response(KitchenTicketSerializer(ticket).data)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def mark_table_ready(request, table_no):
    """Mark every SENT ticket on the table READY; others are left alone"""
    tickets = KitchenTicketService.mark_all_ready_for_table(table_no)
    return Response({
        'table_no': table_no,
        'updated': len(tickets),
        'tickets': KitchenTicketSerializer(tickets, many=True).data,
    })


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def mark_table_served(request, table_no):
    """Mark every READY ticket on the table SERVE; others are left alone"""
    tickets = KitchenTicketService.mark_all_served_for_table(table_no)
    return Response({
        'table_no': table_no,
        'updated': len(tickets),
        'tickets': KitchenTicketSerializer(tickets, many=True).data,
    })
