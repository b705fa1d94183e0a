import logging

from rest_framework import status
from rest_framework.decorators import action
from rest_framework.response import Response

from core_backend.base import BaseViewSet
from .models import Bill
from .serializers import (
    BillSerializer,
    PayBillSerializer,
    CreditBillSerializer,
    UpdateBillSerializer,
    BillSearchSerializer,
    TodaySummarySerializer,
)
from .services import BillService

logger = logging.getLogger(__name__)


class BillViewSet(BaseViewSet):
    """
    Bills.

    Bills are created by closing a table (``POST tables/<n>/close/``).
    This ViewSet reads them, settles them (pay / credit) and applies the
    correction override (PUT).
    """

    queryset = Bill.objects.all()
    serializer_class = BillSerializer
    http_method_names = ["get", "post", "put", "head", "options"]
    filterset_fields = ["status", "paymode", "table_no", "customer_id", "bill_date"]
    ordering_fields = ["bill_no", "bill_amount", "created_at"]
    ordering = ["-bill_no"]

    def create(self, request, *args, **kwargs):
        return Response(
            {"error": "Bills are created by closing a table"},
            status=status.HTTP_405_METHOD_NOT_ALLOWED,
        )

    def update(self, request, *args, **kwargs):
        """Correction override: replace lines and payment fields"""
        serializer = UpdateBillSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        bill = BillService.update_bill(
            kwargs["pk"],
            data["lines"],
            discount=data.get("discount"),
            cash_received=data.get("cash_received"),
            return_amount=data.get("return_amount"),
            paymode=data.get("paymode"),
            customer_id=data.get("customer_id"),
            bank_id=data.get("bank_id"),
            remarks=data.get("remarks"),
            user_id=request.user.pk,
        )
        logger.info(f"API: Bill {bill.bill_no} overridden by user {request.user.pk}")
        return Response(BillSerializer(bill).data)

    @action(detail=True, methods=["post"], url_path="pay")
    def pay(self, request, pk=None):
        serializer = PayBillSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        bill = BillService.mark_paid(
            pk,
            cash_received=data.get("cash_received"),
            return_amount=data.get("return_amount"),
            discount=data.get("discount"),
            paymode=data.get("paymode"),
            bank_id=data.get("bank_id"),
            user_id=request.user.pk,
        )
        return Response(BillSerializer(bill).data)

    @action(detail=True, methods=["post"], url_path="credit")
    def credit(self, request, pk=None):
        serializer = CreditBillSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        bill = BillService.mark_credit(
            pk,
            customer_id=data.get("customer_id"),
            cash_received=data.get("cash_received"),
            return_amount=data.get("return_amount"),
            discount=data.get("discount"),
            user_id=request.user.pk,
        )
        return Response(BillSerializer(bill).data)

    @action(detail=False, methods=["get"], url_path="today")
    def today(self, request):
        summary = BillService.todays_summary()
        return Response(TodaySummarySerializer(summary).data)

    @action(detail=False, methods=["get"], url_path="search")
    def search(self, request):
        """
        Historical bills.

        Query parameters (one of):
        - bill_no: exact bill number
        - date: dd-MM-yyyy, optionally with customer_id and status (PAID/CREDIT)
        - customer_id: every settled bill for the customer
        """
        params = BillSearchSerializer(data=request.query_params)
        params.is_valid(raise_exception=True)

        bills = BillService.search_bills(**params.validated_data)
        return Response(BillSerializer(bills, many=True).data)
