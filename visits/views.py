from django.db.models import Prefetch, Q
from django.utils.dateparse import parse_datetime
from rest_framework import mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from accounts.enums import Capability
from accounts.permissions import requires
from common.errors import ValidationFailed
from common.guards import get_or_404
from patients.models import Patient
from .enums import VisitStatus
from .models import Visit
from .serializers import (
    VisitCancelSerializer,
    VisitCompleteSerializer,
    VisitListSerializer,
    VisitOpenSerializer,
    VisitSerializer,
    VisitTransitionSerializer,
)
from .services.lifecycle import cancel_visit, complete_visit, open_visit

# named work queues over the stored status
QUEUES = {
    "triage": (VisitStatus.WAITING_FOR_TRIAGE,),
    "assignment": (VisitStatus.TRIAGED,),
    "doctor": (VisitStatus.WAITING_FOR_DOCTOR, VisitStatus.IN_PROGRESS),
    "results": (VisitStatus.AWAITING_RESULTS_REVIEW,),
    "active": VisitStatus.active(),
}


class VisitViewSet(viewsets.GenericViewSet, mixins.ListModelMixin, mixins.RetrieveModelMixin):
    permission_classes = [IsAuthenticated]

    def get_serializer_class(self):
        return VisitListSerializer if self.action == "list" else VisitSerializer

    def get_permissions(self):
        perms = {
            "create": Capability.OPEN_VISIT,
            "start": Capability.CONSULT,
            "cancel": Capability.CANCEL_VISIT,
            "complete": Capability.COMPLETE_VISIT,
        }
        if self.action in perms:
            return [IsAuthenticated(), requires(perms[self.action])()]
        return super().get_permissions()

    def get_queryset(self):
        from assignments.models import Assignment

        q = Visit.objects.select_related("patient").prefetch_related(
            Prefetch("assignments", queryset=Assignment.objects.select_related("staff"))
        )
        params = self.request.query_params

        queue = params.get("queue")
        if queue in QUEUES:
            q = q.filter(status__in=QUEUES[queue])
        status_ = params.get("status")
        if status_:
            q = q.filter(status=status_.upper())
        if params.get("patient"):
            q = q.filter(patient_id=params["patient"])
        if params.get("emergency") in ("1", "true"):
            q = q.filter(is_emergency=True)

        doctor = params.get("doctor")
        if doctor:
            doctor_id = self.request.user.id if doctor == "me" else doctor
            if not str(doctor_id).isdigit():
                raise ValidationFailed("doctor must be a staff id or 'me'.", errors={"doctor": doctor})
            # both conditions on the same assignment row
            q = q.filter(assignments__kind="DOCTOR", assignments__staff_id=int(doctor_id)).distinct()

        s = params.get("s")
        if s:
            q = q.filter(
                Q(visit_uid__icontains=s) | Q(patient__id__icontains=s)
                | Q(patient__first_name__icontains=s) | Q(patient__last_name__icontains=s)
            )
        start, end = params.get("start"), params.get("end")
        if start:
            q = q.filter(created_at__gte=parse_datetime(start) or start)
        if end:
            q = q.filter(created_at__lte=parse_datetime(end) or end)

        # emergencies first within a queue, then oldest first
        if queue in QUEUES:
            return q.order_by("-is_emergency", "created_at", "id")
        return q.order_by("-created_at", "-id")

    def create(self, request, *args, **kwargs):
        """Open a visit for an already registered patient."""
        s = VisitOpenSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        patient = get_or_404(Patient.objects, "Patient", pk=s.validated_data["patient"])
        visit = open_visit(
            patient=patient, actor=request.user,
            is_emergency=s.validated_data["is_emergency"], notes=s.validated_data["notes"],
        )
        return Response(VisitSerializer(visit).data, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=["post"])
    def start(self, request, pk=None):
        """Assigned doctor picks the patient up: WAITING_FOR_DOCTOR -> IN_PROGRESS."""
        from assignments.services import start_consultation

        visit = start_consultation(visit_id=pk, actor=request.user)
        return Response(VisitSerializer(visit).data)

    @action(detail=True, methods=["post"])
    def cancel(self, request, pk=None):
        s = VisitCancelSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        visit = cancel_visit(visit_id=pk, actor=request.user, reason=s.validated_data["reason"])
        return Response(VisitSerializer(visit).data)

    @action(detail=True, methods=["post"])
    def complete(self, request, pk=None):
        s = VisitCompleteSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        visit = complete_visit(visit_id=pk, actor=request.user, **s.validated_data)
        return Response(VisitSerializer(visit).data)

    @action(detail=True, methods=["get"])
    def transitions(self, request, pk=None):
        visit = self.get_object()
        return Response(VisitTransitionSerializer(visit.transitions.select_related("actor"), many=True).data)

    @action(detail=False, methods=["get"])
    def statuses(self, request):
        return Response([c for c, _ in VisitStatus.choices])
