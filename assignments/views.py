from rest_framework import mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from accounts.enums import Capability
from accounts.permissions import requires
from .enums import AssignmentStatus
from .models import Assignment
from .serializers import (
    AssignDoctorSerializer,
    AssignmentSerializer,
    CompleteServiceSerializer,
    NurseServicesSerializer,
)
from .services import assign_doctor, assign_nurse_services, complete_nurse_service


class AssignmentViewSet(viewsets.GenericViewSet, mixins.ListModelMixin, mixins.RetrieveModelMixin):
    """
    Doctor and nurse-service assignments. ``?mine=1`` is the signed-in staff
    member's own task list (open assignments only).
    """
    serializer_class = AssignmentSerializer
    permission_classes = [IsAuthenticated]

    def get_permissions(self):
        perms = {
            "assign_doctor": Capability.ASSIGN_DOCTOR,
            "nurse_services": Capability.ASSIGN_NURSE_SERVICE,
            "complete": Capability.PERFORM_NURSE_SERVICE,
        }
        if self.action in perms:
            return [IsAuthenticated(), requires(perms[self.action])()]
        return super().get_permissions()

    def get_queryset(self):
        q = Assignment.objects.select_related("visit__patient", "staff", "service", "billing")
        params = self.request.query_params
        if params.get("mine") in ("1", "true"):
            q = q.filter(staff=self.request.user, status__in=AssignmentStatus.open())
        if params.get("visit"):
            q = q.filter(visit_id=params["visit"])
        if params.get("kind"):
            q = q.filter(kind=params["kind"].upper())
        if params.get("status"):
            q = q.filter(status=params["status"].upper())
        if params.get("staff"):
            q = q.filter(staff_id=params["staff"])
        return q.order_by("-created_at", "-id")

    @action(detail=False, methods=["post"], url_path="assign-doctor")
    def assign_doctor(self, request):
        s = AssignDoctorSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        a = assign_doctor(visit_id=s.validated_data["visit"], doctor_id=s.validated_data["doctor"],
                          actor=request.user, notes=s.validated_data["notes"])
        return Response(AssignmentSerializer(a).data, status=status.HTTP_201_CREATED)

    @action(detail=False, methods=["post"], url_path="nurse-services")
    def nurse_services(self, request):
        """Per-item results; 201 if everything was assigned, 200 otherwise."""
        s = NurseServicesSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        results = assign_nurse_services(
            visit_id=s.validated_data["visit"],
            service_ids=s.validated_data["services"],
            nurse_id=s.validated_data.get("nurse"),
            actor=request.user,
        )
        all_ok = all(r["ok"] for r in results)
        return Response({"results": results}, status=status.HTTP_201_CREATED if all_ok else status.HTTP_200_OK)

    @action(detail=True, methods=["post"])
    def complete(self, request, pk=None):
        s = CompleteServiceSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        a = complete_nurse_service(assignment_id=pk, actor=request.user, notes=s.validated_data["notes"])
        return Response(AssignmentSerializer(a).data)
