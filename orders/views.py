from django.db.models import Q
from rest_framework import mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from accounts.capabilities import user_can
from accounts.enums import Capability
from accounts.permissions import requires
from common.errors import Forbidden, ValidationFailed
from .enums import OrderStatus, OrderType
from .models import Order, ResultTemplate
from .serializers import (
    OrderBatchSerializer,
    OrderCancelSerializer,
    OrderCreateSerializer,
    OrderSerializer,
    ResultSubmitSerializer,
    ResultTemplateSerializer,
    TemplateCheckSerializer,
)
from .services import cancel_order, create_order, start_order, submit_result
from .templates import template_problems, validate_values

PROCESS_CAPABILITY = {
    OrderType.LAB: Capability.PROCESS_LAB,
    OrderType.RADIOLOGY: Capability.PROCESS_RADIOLOGY,
    OrderType.DENTAL: Capability.PROCESS_DENTAL,
}


class OrderViewSet(viewsets.GenericViewSet, mixins.ListModelMixin, mixins.RetrieveModelMixin):
    """
    Orders of every type. The lab/radiology/dental routes use subclasses
    pinned to one ``order_type``.
    """
    serializer_class = OrderSerializer
    permission_classes = [IsAuthenticated]
    order_type = None

    def get_queryset(self):
        q = Order.objects.select_related("visit", "patient", "service", "template", "batch")
        if self.order_type:
            q = q.filter(order_type=self.order_type)
        params = self.request.query_params
        if params.get("type"):
            q = q.filter(order_type=params["type"].upper())
        if params.get("queue") in ("1", "true"):
            q = q.filter(status__in=OrderStatus.workable())
            return q.order_by("-visit__is_emergency", "created_at", "id")
        if params.get("status"):
            q = q.filter(status=params["status"].upper())
        if params.get("visit"):
            q = q.filter(visit_id=params["visit"])
        if params.get("patient"):
            q = q.filter(patient_id=params["patient"])
        s = params.get("s")
        if s:
            q = q.filter(Q(service__name__icontains=s) | Q(service__code__icontains=s)
                         | Q(patient__id__icontains=s) | Q(visit__visit_uid__icontains=s))
        return q.order_by("-created_at", "-id")

    def _check_can_process(self, order_id):
        order_type = self.order_type or Order.objects.filter(pk=order_id).values_list("order_type", flat=True).first()
        if order_type and not user_can(self.request.user, PROCESS_CAPABILITY[order_type]):
            raise Forbidden(f"Your role does not process {order_type.lower()} orders.")

    def create(self, request, *args, **kwargs):
        if not user_can(request.user, Capability.CREATE_ORDER):
            raise Forbidden("Your role cannot place orders.")
        s = OrderCreateSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        order_type = self.order_type or s.validated_data.get("order_type")
        if not order_type:
            raise ValidationFailed("order_type is required.", errors={"order_type": "required"})
        batch = create_order(
            visit_id=s.validated_data["visit"], order_type=order_type,
            service_ids=s.validated_data["services"], instructions=s.validated_data["instructions"],
            actor=request.user,
        )
        return Response(OrderBatchSerializer(batch).data, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=["post"])
    def start(self, request, pk=None):
        self._check_can_process(pk)
        order = start_order(order_id=pk, actor=request.user, order_type=self.order_type)
        return Response(OrderSerializer(order).data)

    @action(detail=True, methods=["post"])
    def result(self, request, pk=None):
        self._check_can_process(pk)
        s = ResultSubmitSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        order = submit_result(order_id=pk, actor=request.user, order_type=self.order_type, **s.validated_data)
        return Response(OrderSerializer(order).data)

    @action(detail=True, methods=["post"])
    def cancel(self, request, pk=None):
        if not (user_can(request.user, Capability.CREATE_ORDER) or user_can(request.user, Capability.CANCEL_VISIT)):
            raise Forbidden("Your role cannot cancel orders.")
        s = OrderCancelSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        order = cancel_order(order_id=pk, actor=request.user, reason=s.validated_data["reason"],
                             order_type=self.order_type)
        return Response(OrderSerializer(order).data)

    @action(detail=False, methods=["get"])
    def statuses(self, request):
        return Response([c for c, _ in OrderStatus.choices])


class LabOrderViewSet(OrderViewSet):
    order_type = OrderType.LAB


class RadiologyOrderViewSet(OrderViewSet):
    order_type = OrderType.RADIOLOGY


class DentalOrderViewSet(OrderViewSet):
    order_type = OrderType.DENTAL


class ResultTemplateViewSet(viewsets.GenericViewSet,
                            mixins.ListModelMixin,
                            mixins.RetrieveModelMixin,
                            mixins.CreateModelMixin,
                            mixins.UpdateModelMixin):
    serializer_class = ResultTemplateSerializer
    permission_classes = [IsAuthenticated]

    def get_permissions(self):
        if self.action in ("create", "update", "partial_update"):
            return [IsAuthenticated(), requires(Capability.MANAGE_CATALOG)()]
        return super().get_permissions()

    def get_queryset(self):
        q = ResultTemplate.objects.prefetch_related("services").order_by("name")
        params = self.request.query_params
        if params.get("all") not in ("1", "true"):
            q = q.filter(is_active=True)
        if params.get("type"):
            q = q.filter(order_type=params["type"].upper())
        if params.get("service"):
            q = q.filter(services__id=params["service"])
        return q

    @action(detail=True, methods=["post"])
    def validate(self, request, pk=None):
        """Dry run: report errors and warnings without saving anything."""
        template = self.get_object()
        s = TemplateCheckSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        problems = template_problems(template.fields)
        if problems:
            return Response({"ok": False, "errors": {"template": problems}, "warnings": []})
        cleaned, errors, warnings = validate_values(template.fields, s.validated_data["values"])
        return Response({
            "ok": not errors,
            "needs_confirmation": bool(warnings) and not errors,
            "errors": errors,
            "warnings": warnings,
            "values": cleaned,
        })
