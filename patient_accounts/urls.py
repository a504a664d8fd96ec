from django.urls import path, include
from rest_framework.routers import DefaultRouter
from .views import AccountRequestViewSet, PatientAccountViewSet

router = DefaultRouter()
router.register("requests", AccountRequestViewSet, basename="account-request")
router.register("", PatientAccountViewSet, basename="patient-account")

urlpatterns = [
    path("", include(router.urls)),
]
