from django.urls import path, include
from rest_framework.routers import DefaultRouter

from .views import BillViewSet

app_name = "billing"

router = DefaultRouter()
router.register(r"bills", BillViewSet, basename="bill")

urlpatterns = [
    path("", include(router.urls)),
]
