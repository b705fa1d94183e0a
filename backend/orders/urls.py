from django.urls import path, include
from rest_framework.routers import DefaultRouter

from .views import TempOrderLineViewSet, ReducedItemViewSet

app_name = "orders"

router = DefaultRouter()
router.register(r"transactions", TempOrderLineViewSet, basename="transaction")
router.register(r"reduced-items", ReducedItemViewSet, basename="reduced-item")

urlpatterns = [
    path("", include(router.urls)),
]
