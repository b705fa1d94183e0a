
from rest_framework import status
from rest_framework.response import Response

from core_backend.base import BaseViewSet, ReadOnlyBaseViewSet
from .models import TempOrderLine, ReducedItem
from .serializers import (
    TempOrderLineSerializer,
    UpdateOrderLineSerializer,
    ReducedItemSerializer,
)
from .services import ProvisionalOrderService


class TempOrderLineViewSet(BaseViewSet):
    """
    Individual provisional lines.

    Lines are created through the table endpoint
    (``POST tables/<n>/transactions/``); this ViewSet reads, updates and
    removes them by id. Mutations go through ProvisionalOrderService so they
    take the table lock.
    """

    queryset = TempOrderLine.objects.all()
    serializer_class = TempOrderLineSerializer
    http_method_names = ["get", "put", "patch", "delete", "head", "options"]
    filterset_fields = ["table_no", "waiter_id", "is_kitchen_item"]
    search_fields = ["item_name"]
    ordering_fields = ["id", "created_at", "amount"]
    ordering = ["id"]

    def update(self, request, *args, **kwargs):
        serializer = UpdateOrderLineSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        line = ProvisionalOrderService.update(
            kwargs["pk"],
            quantity=serializer.validated_data.get("quantity"),
            rate=serializer.validated_data.get("rate"),
            user_id=request.user.pk,
            user_name=request.user.get_username(),
            reason=serializer.validated_data.get("reason", ""),
        )
        return Response(TempOrderLineSerializer(line).data)

    def partial_update(self, request, *args, **kwargs):
        return self.update(request, *args, **kwargs)

    def destroy(self, request, *args, **kwargs):
        ProvisionalOrderService.remove(
            kwargs["pk"],
            user_id=request.user.pk,
            user_name=request.user.get_username(),
            reason=request.query_params.get("reason", ""),
        )
        return Response(status=status.HTTP_204_NO_CONTENT)


class ReducedItemViewSet(ReadOnlyBaseViewSet):
    """Items taken back after being sent to the kitchen."""

    queryset = ReducedItem.objects.all()
    serializer_class = ReducedItemSerializer
    filterset_fields = ["table_no", "item_name", "reduced_by_user_id"]
    ordering = ["-created_at"]
