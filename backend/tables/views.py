import logging

from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from billing.serializers import BillSerializer
from billing.services import BillService
from kds.serializers import KitchenTicketSerializer
from kds.services import KitchenTicketService
from masters.services import NameLookupService
from orders.serializers import AddOrderLineSerializer, TempOrderLineSerializer
from orders.services import ProvisionalOrderService
from .serializers import (
    TableStatusSerializer,
    TableLineSerializer,
    PrintKotSerializer,
    CloseTableSerializer,
    ShiftTableSerializer,
    ShiftResultSerializer,
)
from .services import TableStatusService, TableShiftService

logger = logging.getLogger(__name__)


class TableViewSet(viewsets.ViewSet):
    """
    Table-scoped operations: floor status, running order, KOT printing,
    closing and shifting.
    """

    permission_classes = [IsAuthenticated]
    lookup_value_regex = r"\d+"

    def list(self, request):
        """Every active table with its derived status (?section= to filter)"""
        grid = TableStatusService.table_grid(section=request.query_params.get("section"))
        return Response(TableStatusSerializer(grid, many=True).data)

    @action(detail=True, methods=["get"], url_path="status")
    def table_status(self, request, pk=None):
        table_no = int(pk)
        data = {"table_no": table_no, "status": TableStatusService.status(table_no)}
        name = NameLookupService.table_name(table_no)
        if name is not None:
            data["name"] = name
        return Response(TableStatusSerializer(data).data)

    @action(detail=True, methods=["get", "post"], url_path="transactions")
    def transactions(self, request, pk=None):
        """
        GET: the open bill's lines (negative ids) followed by provisional lines.
        POST: add a provisional line (or update one via ``line_id``).
        """
        table_no = int(pk)

        if request.method == "GET":
            rows = BillService.combined_lines_for_table(table_no)
            return Response(TableLineSerializer(rows, many=True).data)

        serializer = AddOrderLineSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        line = ProvisionalOrderService.add_or_update(
            table_no,
            data["item_name"],
            data["quantity"],
            data["waiter_id"],
            rate=data.get("rate"),
            line_id=data.get("line_id"),
            user_id=request.user.pk,
            user_name=request.user.get_username(),
            reason=data.get("reason", ""),
        )
        response_status = status.HTTP_200_OK if data.get("line_id") else status.HTTP_201_CREATED
        return Response(TempOrderLineSerializer(line).data, status=response_status)

    @action(detail=True, methods=["post"], url_path="print-kot")
    def print_kot(self, request, pk=None):
        """Send every unsent kitchen quantity on the table as one ticket"""
        serializer = PrintKotSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        ticket = KitchenTicketService.send_pending_for_table(
            int(pk),
            waiter_id=serializer.validated_data.get("waiter_id"),
            table_name=serializer.validated_data.get("table_name"),
        )
        return Response(KitchenTicketSerializer(ticket).data, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=["post"], url_path="close")
    def close(self, request, pk=None):
        serializer = CloseTableSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        bill = BillService.close_table(
            int(pk),
            waiter_id=data["waiter_id"],
            user_id=request.user.pk,
            customer_id=data.get("customer_id"),
            remarks=data.get("remarks", ""),
        )
        return Response(BillSerializer(bill).data)

    @action(detail=True, methods=["get"], url_path="closed-bill")
    def closed_bill(self, request, pk=None):
        bill = BillService.closed_bill_for_table(int(pk))
        if bill is None:
            return Response(
                {"error": f"Table {pk} has no open bill", "code": "not_found", "details": {"table_no": int(pk)}},
                status=status.HTTP_404_NOT_FOUND,
            )
        return Response(BillSerializer(bill).data)

    @action(detail=False, methods=["post"], url_path="shift")
    def shift(self, request):
        serializer = ShiftTableSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        result = TableShiftService.shift(
            data["source_table_no"],
            data["target_table_no"],
            target_table_name=data.get("target_table_name"),
            user_id=request.user.pk,
        )
        logger.info(f"API: Table {result['source_table_no']} shifted to {result['target_table_no']} by user {request.user.pk}")
        return Response(ShiftResultSerializer(result).data)
