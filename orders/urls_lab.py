from django.urls import path, include
from rest_framework.routers import DefaultRouter
from .views import LabOrderViewSet

router = DefaultRouter()
router.register("orders", LabOrderViewSet, basename="lab-order")

urlpatterns = [
    path("", include(router.urls)),
]
