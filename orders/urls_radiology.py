from django.urls import path, include
from rest_framework.routers import DefaultRouter
from .views import RadiologyOrderViewSet

router = DefaultRouter()
router.register("orders", RadiologyOrderViewSet, basename="radiology-order")

urlpatterns = [
    path("", include(router.urls)),
]
