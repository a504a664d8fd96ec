from rest_framework import mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from accounts.enums import Capability
from accounts.permissions import requires
from common.guards import get_or_404
from patients.models import Patient
from .models import AccountRequest, PatientAccount
from .serializers import (
    AccountRequestCreateSerializer,
    AccountRequestSerializer,
    AccountStatusSerializer,
    AccountTransactionSerializer,
    PatientAccountSerializer,
    RejectSerializer,
)
from .services import approve_request, create_request, reject_request, set_account_status

CanReview = requires(Capability.REVIEW_ACCOUNT_REQUEST)


class PatientAccountViewSet(viewsets.GenericViewSet, mixins.ListModelMixin, mixins.RetrieveModelMixin):
    serializer_class = PatientAccountSerializer
    permission_classes = [IsAuthenticated]

    def get_queryset(self):
        q = PatientAccount.objects.select_related("patient")
        params = self.request.query_params
        if params.get("type"):
            q = q.filter(account_type=params["type"].upper())
        if params.get("status"):
            q = q.filter(status=params["status"].upper())
        if params.get("in_debt") in ("1", "true"):
            q = q.filter(debt_owed__gt=0)
        return q.order_by("-created_at", "-id")

    @action(detail=False, methods=["get"], url_path=r"by-patient/(?P<patient_id>[^/]+)")
    def by_patient(self, request, patient_id=None):
        account = get_or_404(self.get_queryset(), "Account", patient_id=patient_id)
        return Response(PatientAccountSerializer(account).data)

    @action(detail=True, methods=["get"])
    def transactions(self, request, pk=None):
        account = self.get_object()
        q = account.transactions.all().order_by("-created_at", "-id")
        return Response(AccountTransactionSerializer(q, many=True).data)

    @action(detail=True, methods=["post"], url_path="status", permission_classes=[IsAuthenticated, CanReview])
    def set_status(self, request, pk=None):
        s = AccountStatusSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        account = set_account_status(account_id=pk, status=s.validated_data["status"], actor=request.user)
        return Response(PatientAccountSerializer(account).data)


class AccountRequestViewSet(viewsets.GenericViewSet,
                            mixins.ListModelMixin,
                            mixins.RetrieveModelMixin,
                            mixins.CreateModelMixin):
    serializer_class = AccountRequestSerializer
    permission_classes = [IsAuthenticated]

    def get_permissions(self):
        if self.action == "create":
            return [IsAuthenticated(), requires(Capability.REQUEST_ACCOUNT_CHANGE)()]
        if self.action in ("approve", "reject"):
            return [IsAuthenticated(), CanReview()]
        return super().get_permissions()

    def get_queryset(self):
        q = AccountRequest.objects.select_related("patient", "requested_by")
        params = self.request.query_params
        if params.get("status"):
            q = q.filter(status=params["status"].upper())
        if params.get("patient"):
            q = q.filter(patient_id=params["patient"])
        if params.get("type"):
            q = q.filter(request_type=params["type"].upper())
        return q.order_by("-created_at", "-id")

    def create(self, request, *args, **kwargs):
        s = AccountRequestCreateSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        data = dict(s.validated_data)
        patient = get_or_404(Patient.objects, "Patient", pk=data.pop("patient"))
        req = create_request(patient=patient, actor=request.user, **data)
        return Response(AccountRequestSerializer(req).data, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=["post"])
    def approve(self, request, pk=None):
        req = approve_request(request_id=pk, actor=request.user)
        return Response(AccountRequestSerializer(req).data)

    @action(detail=True, methods=["post"])
    def reject(self, request, pk=None):
        s = RejectSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        req = reject_request(request_id=pk, actor=request.user, reason=s.validated_data["reason"])
        return Response(AccountRequestSerializer(req).data)
