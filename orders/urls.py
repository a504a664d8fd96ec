from django.urls import path, include
from rest_framework.routers import DefaultRouter
from .views import OrderViewSet, ResultTemplateViewSet

router = DefaultRouter()
router.register("templates", ResultTemplateViewSet, basename="result-template")
router.register("", OrderViewSet, basename="order")

urlpatterns = [
    path("", include(router.urls)),
]
