import csv
import io
import logging
from decimal import Decimal, InvalidOperation

from django.db.models import Q
from django.utils.dateparse import parse_datetime

from rest_framework import mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from accounts.enums import Capability
from accounts.permissions import requires
from .enums import BillingStatus, ServiceCategory
from .models import Billing, Payment, Service
from .serializers import (
    AddLineSerializer,
    BillingListSerializer,
    BillingSerializer,
    PaymentCreateSerializer,
    PaymentReadSerializer,
    ServiceSerializer,
    SettleInsuranceSerializer,
)
from .services.invoices import add_line
from .services.payments import pay_billing, settle_insurance

logger = logging.getLogger(__name__)

CanCollectPayment = requires(Capability.COLLECT_PAYMENT)
CanManageCatalog = requires(Capability.MANAGE_CATALOG)


# --- Service Catalog ---
class ServiceViewSet(viewsets.GenericViewSet,
                     mixins.ListModelMixin,
                     mixins.RetrieveModelMixin,
                     mixins.CreateModelMixin,
                     mixins.UpdateModelMixin):
    serializer_class = ServiceSerializer
    permission_classes = [IsAuthenticated]

    def get_permissions(self):
        if self.action in ("create", "update", "partial_update", "import_csv"):
            return [IsAuthenticated(), CanManageCatalog()]
        return super().get_permissions()

    def get_queryset(self):
        q = Service.objects.all().order_by("name")
        if self.request.query_params.get("all") not in ("1", "true"):
            q = q.filter(is_active=True)
        category = self.request.query_params.get("category")
        if category:
            q = q.filter(category=category.upper())
        s = self.request.query_params.get("s")
        if s:
            q = q.filter(Q(name__icontains=s) | Q(code__icontains=s))
        return q

    @action(detail=False, methods=["post"])
    def import_csv(self, request):
        """CSV columns: code,name,category,price"""
        f = request.FILES.get("file")
        if not f:
            return Response({"detail": "file is required", "kind": "validation"}, status=400)

        buf = io.StringIO(f.read().decode("utf-8"))
        reader = csv.DictReader(buf)
        created, updated, errors = 0, 0, []
        for idx, row in enumerate(reader, start=2):
            code = (row.get("code") or "").strip().upper()
            if not code:
                continue
            category = (row.get("category") or ServiceCategory.OTHER).strip().upper()
            if category not in ServiceCategory.values:
                errors.append(f"Row {idx}: unknown category {category}")
                continue
            try:
                price = Decimal((row.get("price") or "0").strip() or "0")
            except InvalidOperation:
                errors.append(f"Row {idx}: invalid price")
                continue
            if not price.is_finite() or price < 0:
                errors.append(f"Row {idx}: price must be zero or more")
                continue
            defaults = {
                "name": (row.get("name") or code).strip(),
                "category": category,
                "price": price,
                "is_active": True,
            }
            _, is_created = Service.objects.update_or_create(code=code, defaults=defaults)
            created += int(is_created)
            updated += int(not is_created)
        logger.info("service catalog import: created=%s updated=%s errors=%s", created, updated, len(errors))
        return Response({"created": created, "updated": updated, "errors": errors})


# --- Billings ---
class BillingViewSet(viewsets.GenericViewSet, mixins.ListModelMixin, mixins.RetrieveModelMixin):
    queryset = Billing.objects.select_related("patient", "visit", "created_by")
    permission_classes = [IsAuthenticated]

    def get_serializer_class(self):
        return BillingListSerializer if self.action in ("list", "unpaid") else BillingSerializer

    def get_queryset(self):
        q = self.queryset
        if self.action == "retrieve":
            q = q.prefetch_related("lines__service", "payments__received_by")

        params = self.request.query_params
        if params.get("status"):
            q = q.filter(status=params["status"].upper())
        if params.get("kind"):
            q = q.filter(kind=params["kind"].upper())
        if params.get("visit"):
            q = q.filter(visit_id=params["visit"])
        if params.get("patient"):
            q = q.filter(patient_id=params["patient"])
        start, end = params.get("start"), params.get("end")
        if start:
            q = q.filter(created_at__gte=parse_datetime(start) or start)
        if end:
            q = q.filter(created_at__lte=parse_datetime(end) or end)
        return q.order_by("-created_at", "-id")

    @action(detail=False, methods=["get"])
    def unpaid(self, request):
        """Billing officer queue: everything not yet settled."""
        q = self.get_queryset().filter(status__in=BillingStatus.unsettled())
        return Response(BillingListSerializer(q, many=True).data)

    @action(detail=True, methods=["post"], permission_classes=[IsAuthenticated, CanCollectPayment])
    def pay(self, request, pk=None):
        s = PaymentCreateSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        payment = pay_billing(billing_id=pk, actor=request.user, **s.validated_data)
        billing = Billing.objects.get(pk=payment.billing_id)
        return Response(
            {"billing": BillingSerializer(billing).data, "payment": PaymentReadSerializer(payment).data},
            status=status.HTTP_201_CREATED,
        )

    @action(detail=True, methods=["post"], url_path="settle-insurance",
            permission_classes=[IsAuthenticated, CanCollectPayment])
    def settle_insurance(self, request, pk=None):
        s = SettleInsuranceSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        billing = settle_insurance(billing_id=pk, actor=request.user, reference=s.validated_data.get("reference", ""))
        return Response(BillingSerializer(billing).data)

    @action(detail=True, methods=["post"], url_path="add-line",
            permission_classes=[IsAuthenticated, CanCollectPayment])
    def add_line(self, request, pk=None):
        s = AddLineSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        add_line(billing_id=pk, actor=request.user, **s.validated_data)
        return Response(BillingSerializer(Billing.objects.get(pk=pk)).data, status=status.HTTP_201_CREATED)

    @action(detail=False, methods=["get"])
    def statuses(self, request):
        return Response([c for c, _ in BillingStatus.choices])


# --- Payments ---
class PaymentViewSet(viewsets.GenericViewSet, mixins.ListModelMixin, mixins.RetrieveModelMixin):
    serializer_class = PaymentReadSerializer
    permission_classes = [IsAuthenticated, CanCollectPayment]

    def get_queryset(self):
        q = Payment.objects.select_related("billing", "patient", "received_by")
        params = self.request.query_params
        if params.get("patient"):
            q = q.filter(patient_id=params["patient"])
        if params.get("method"):
            q = q.filter(method=params["method"].upper())
        if params.get("billing"):
            q = q.filter(billing_id=params["billing"])
        return q.order_by("-received_at", "-id")
