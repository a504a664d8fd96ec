from django.utils.dateparse import parse_datetime
from django.db.models import Count
from rest_framework import viewsets, mixins, status
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from accounts.enums import Capability
from accounts.permissions import requires
from common.guards import get_or_404
from patients.models import Patient
from visits.models import Visit
from .models import VitalSign
from .serializers import (
    ContinuousVitalsSerializer,
    TriageVitalsSerializer,
    VitalSignListSerializer,
    VitalSignSerializer,
    VitalSummarySerializer,
)
from .services import record_continuous_vitals, record_triage_vitals

CanRecordVitals = requires(Capability.RECORD_VITALS)

class VitalSignViewSet(viewsets.GenericViewSet,
                       mixins.RetrieveModelMixin,
                       mixins.ListModelMixin):
    queryset = VitalSign.objects.select_related("patient","visit","recorded_by").all()
    permission_classes = [IsAuthenticated]

    def get_serializer_class(self):
        if self.action in ("list","latest"):
            return VitalSignListSerializer
        return VitalSignSerializer

    def get_permissions(self):
        if self.action in ("create","triage"):
            return [IsAuthenticated(), CanRecordVitals()]
        return super().get_permissions()

    def get_queryset(self):
        q = self.queryset
        patient_id = self.request.query_params.get("patient")
        if patient_id:
            q = q.filter(patient_id=patient_id)
        visit_id = self.request.query_params.get("visit")
        if visit_id:
            q = q.filter(visit_id=visit_id)
        kind = self.request.query_params.get("kind")
        if kind:
            q = q.filter(kind=kind.upper())

        start = self.request.query_params.get("start")
        end = self.request.query_params.get("end")
        if start:
            dt = parse_datetime(start) or start  # allow date-only
            q = q.filter(measured_at__gte=dt)
        if end:
            dt = parse_datetime(end) or end
            q = q.filter(measured_at__lte=dt)

        # ?order=asc gives the monitoring chart its time-ordered series
        if self.request.query_params.get("order") == "asc":
            return q.order_by("measured_at", "id")
        return q

    def create(self, request, *args, **kwargs):
        """Monitoring vitals for a patient, optionally tied to a visit."""
        s = ContinuousVitalsSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        data = dict(s.validated_data)
        patient = get_or_404(Patient.objects, "Patient", pk=data.pop("patient"))
        visit_id = data.pop("visit", None)
        visit = get_or_404(Visit.objects, "Visit", pk=visit_id) if visit_id else None
        vital = record_continuous_vitals(patient=patient, visit=visit, data=data, actor=request.user)
        return Response(VitalSignSerializer(vital).data, status=status.HTTP_201_CREATED)

    @action(detail=False, methods=["post"])
    def triage(self, request):
        """Triage vitals; moves the visit to TRIAGED."""
        s = TriageVitalsSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        data = dict(s.validated_data)
        vital = record_triage_vitals(visit_id=data.pop("visit"), data=data, actor=request.user)
        return Response(VitalSignSerializer(vital).data, status=status.HTTP_201_CREATED)

    @action(detail=False, methods=["get"])
    def latest(self, request):
        """
        Latest vital for a specific patient (?patient=ID) or latest per patient in scope.
        """
        q = self.get_queryset()
        pid = request.query_params.get("patient")
        if pid:
            obj = q.filter(patient_id=pid).order_by("-measured_at","-id").first()
            if not obj:
                return Response({"detail":"No vitals", "kind": "not_found"}, status=404)
            return Response(VitalSignListSerializer(obj).data)

        latest_map = {}
        for v in q.order_by("patient_id","-measured_at","-id"):
            if v.patient_id not in latest_map:
                latest_map[v.patient_id] = v
        return Response(VitalSignListSerializer(latest_map.values(), many=True).data)

    @action(detail=False, methods=["get"])
    def summary(self, request):
        """
        Counts by flag in current scope, optional patient filter.
        """
        q = self.get_queryset()
        agg = q.values("overall").annotate(c=Count("id"))
        by = {a["overall"]: a["c"] for a in agg}
        latest = q.order_by("-measured_at","-id").first()
        data = {
            "total": q.count(),
            "green": by.get("GREEN", 0),
            "yellow": by.get("YELLOW", 0),
            "red": by.get("RED", 0),
            "latest_overall": latest.overall if latest else None,
        }
        return Response(VitalSummarySerializer(data).data)
