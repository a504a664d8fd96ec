from django.urls import path, include
from rest_framework.routers import DefaultRouter
from .views import BillingViewSet, PaymentViewSet, ServiceViewSet

router = DefaultRouter()
router.register("services", ServiceViewSet, basename="service")
router.register("billings", BillingViewSet, basename="billing")
router.register("payments", PaymentViewSet, basename="payment")

urlpatterns = [ path("", include(router.urls)) ]
