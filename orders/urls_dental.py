from django.urls import path, include
from rest_framework.routers import DefaultRouter
from .views import DentalOrderViewSet

router = DefaultRouter()
router.register("orders", DentalOrderViewSet, basename="dental-order")

urlpatterns = [
    path("", include(router.urls)),
]
