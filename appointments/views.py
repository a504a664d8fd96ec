from django.db.models import Q
from django.utils.dateparse import parse_date
from rest_framework import mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from accounts.enums import Capability, UserRole
from accounts.permissions import requires
from common.errors import ValidationFailed
from common.guards import get_or_404
from patients.models import Patient
from .models import Appointment
from .serializers import AppointmentBookSerializer, AppointmentSerializer, AppointmentUpdateSerializer
from .services import book_appointment, delete_appointment, send_to_doctor, update_appointment


class AppointmentViewSet(viewsets.GenericViewSet, mixins.ListModelMixin, mixins.RetrieveModelMixin):
    """
    Bookings. Clinicians only see their own; front desk sees all and can
    filter by ``doctor`` (an id or ``me``), ``patient``, ``status``,
    ``type``, ``date`` (YYYY-MM-DD) and ``s``.
    """
    serializer_class = AppointmentSerializer
    permission_classes = [IsAuthenticated]

    def get_permissions(self):
        if self.action in ("create", "partial_update", "update", "destroy", "send_to_doctor"):
            return [IsAuthenticated(), requires(Capability.SCHEDULE_APPOINTMENT)()]
        return super().get_permissions()

    def get_queryset(self):
        q = Appointment.objects.select_related("patient", "doctor", "visit")
        user = self.request.user
        params = self.request.query_params

        if user.role in UserRole.clinician_roles():
            q = q.filter(doctor=user)
        elif params.get("doctor"):
            doctor = user.id if params["doctor"] == "me" else params["doctor"]
            if not str(doctor).isdigit():
                raise ValidationFailed("doctor must be a staff id or 'me'.", errors={"doctor": params["doctor"]})
            q = q.filter(doctor_id=int(doctor))

        if params.get("patient"):
            q = q.filter(patient_id=params["patient"])
        if params.get("status"):
            q = q.filter(status=params["status"].upper())
        if params.get("type"):
            q = q.filter(appt_type=params["type"].upper())
        if params.get("date"):
            day = parse_date(params["date"])
            if day is None:
                raise ValidationFailed("date must be YYYY-MM-DD.", errors={"date": params["date"]})
            q = q.filter(start_at__date=day)
        s = params.get("s")
        if s:
            q = q.filter(
                Q(reason__icontains=s) | Q(patient__id__icontains=s)
                | Q(patient__first_name__icontains=s) | Q(patient__last_name__icontains=s)
            )
        return q.order_by("start_at", "id")

    def create(self, request, *args, **kwargs):
        s = AppointmentBookSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        data = dict(s.validated_data)
        patient = get_or_404(Patient.objects, "Patient", pk=data.pop("patient"))
        appt = book_appointment(patient=patient, doctor_id=data.pop("doctor"), actor=request.user, **data)
        return Response(AppointmentSerializer(appt).data, status=status.HTTP_201_CREATED)

    def partial_update(self, request, pk=None):
        s = AppointmentUpdateSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        appt = update_appointment(appointment_id=pk, actor=request.user, **s.validated_data)
        return Response(AppointmentSerializer(appt).data)

    def destroy(self, request, pk=None):
        delete_appointment(appointment_id=pk, actor=request.user)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=True, methods=["post"], url_path="send-to-doctor")
    def send_to_doctor(self, request, pk=None):
        """Patient arrived: open the visit. It still starts in the triage queue."""
        appt, visit = send_to_doctor(appointment_id=pk, actor=request.user)
        return Response(
            {
                "appointment": AppointmentSerializer(appt).data,
                "visit": {"id": visit.id, "visit_uid": visit.visit_uid, "status": visit.status},
            },
            status=status.HTTP_201_CREATED,
        )
