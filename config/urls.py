from django.contrib import admin
from django.urls import path, include
from drf_spectacular.views import SpectacularAPIView, SpectacularSwaggerView

urlpatterns = [
    path("admin/", admin.site.urls),
    path("api/auth/", include("accounts.urls")),
    path("api/patients/", include("patients.urls")),
    path("api/appointments/", include("appointments.urls")),
    path("api/visits/", include("visits.urls")),
    path("api/vitals/", include("vitals.urls")),
    path("api/nurses/", include("assignments.urls")),
    path("api/billing/", include("billing.urls")),
    path("api/orders/", include("orders.urls")),
    path("api/labs/", include("orders.urls_lab")),
    path("api/radiology/", include("orders.urls_radiology")),
    path("api/dental/", include("orders.urls_dental")),
    path("api/accounts/", include("patient_accounts.urls")),
    path("api/loans/", include("loans.urls")),
    path("api/audit/", include("audit.urls")),
    path("api/schema/", SpectacularAPIView.as_view(), name="schema"),
    path("api/docs/", SpectacularSwaggerView.as_view(url_name="schema"), name="swagger-ui"),
]
