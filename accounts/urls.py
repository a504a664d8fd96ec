from django.urls import path, include
from rest_framework.routers import DefaultRouter
from rest_framework_simplejwt.views import TokenRefreshView
from . import views

router = DefaultRouter()
router.register("staff", views.StaffViewSet, basename="staff")

urlpatterns = [
    path("login/", views.login_password),
    path("me/", views.me),
    path("token/refresh/", TokenRefreshView.as_view()),
    path("", include(router.urls)),
]
