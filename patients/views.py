from django.db.models import Q
from rest_framework import mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from accounts.enums import Capability
from accounts.permissions import requires
from .models import Patient
from .serializers import PatientRegisterSerializer, PatientSerializer
from .services.registration import deactivate_card, register_patient, request_card_activation

CanRegisterPatient = requires(Capability.REGISTER_PATIENT)

class PatientViewSet(viewsets.GenericViewSet,
                     mixins.RetrieveModelMixin,
                     mixins.UpdateModelMixin,
                     mixins.ListModelMixin):
    queryset = Patient.objects.all().order_by("-created_at")
    serializer_class = PatientSerializer
    permission_classes = [IsAuthenticated]

    def get_permissions(self):
        if self.action in ("register","update","partial_update","activate_card","deactivate_card"):
            return [IsAuthenticated(), CanRegisterPatient()]
        return super().get_permissions()

    def get_queryset(self):
        q = self.queryset
        s = self.request.query_params.get("s")
        if s:
            q = q.filter(
                Q(id__icontains=s) | Q(first_name__icontains=s) | Q(last_name__icontains=s) |
                Q(mobile__icontains=s) | Q(email__icontains=s)
            )
        patient_type = self.request.query_params.get("type")
        if patient_type:
            q = q.filter(patient_type=patient_type.upper())
        return q

    @action(detail=False, methods=["post"])
    def register(self, request):
        s = PatientRegisterSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        data = dict(s.validated_data)
        with_visit = data.pop("open_visit")
        emergency = data.pop("emergency")
        patient, visit, card_billing = register_patient(
            data=data, actor=request.user, emergency=emergency, with_visit=with_visit,
        )
        return Response(
            {
                "patient": PatientSerializer(patient).data,
                "visit": {"id": visit.id, "visit_uid": visit.visit_uid, "status": visit.status} if visit else None,
                "card_billing": card_billing.id if card_billing else None,
            },
            status=status.HTTP_201_CREATED,
        )

    @action(detail=True, methods=["post"], url_path="activate-card")
    def activate_card(self, request, pk=None):
        """Bill the card renewal fee; the card turns ACTIVE once it is paid."""
        billing = request_card_activation(
            patient_id=pk, actor=request.user, notes=str(request.data.get("notes") or ""),
        )
        return Response(
            {"billing": billing.id, "total_amount": str(billing.total_amount), "status": billing.status},
            status=status.HTTP_201_CREATED,
        )

    @action(detail=True, methods=["post"], url_path="deactivate-card")
    def deactivate_card(self, request, pk=None):
        patient = deactivate_card(patient_id=pk, actor=request.user)
        return Response(PatientSerializer(patient).data)
