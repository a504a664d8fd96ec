from rest_framework import mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from accounts.capabilities import user_can
from accounts.enums import Capability
from accounts.permissions import requires
from .enums import LoanStatus
from .models import Loan
from .serializers import LoanRequestSerializer, LoanReviewSerializer, LoanSerializer
from .services import disburse_loan, request_loan, review_loan


class LoanViewSet(viewsets.GenericViewSet, mixins.ListModelMixin, mixins.RetrieveModelMixin):
    """
    Staff loans. Reviewers see every loan; everyone else only their own.
    """
    serializer_class = LoanSerializer
    permission_classes = [IsAuthenticated]

    def get_permissions(self):
        perms = {
            "create": Capability.REQUEST_LOAN,
            "review": Capability.REVIEW_LOAN,
            "disburse": Capability.DISBURSE_LOAN,
            "approved": Capability.DISBURSE_LOAN,
        }
        if self.action in perms:
            return [IsAuthenticated(), requires(perms[self.action])()]
        return super().get_permissions()

    def get_queryset(self):
        q = Loan.objects.select_related("staff")
        user = self.request.user
        if not (user_can(user, Capability.REVIEW_LOAN) or user_can(user, Capability.DISBURSE_LOAN)):
            q = q.filter(staff=user)
        params = self.request.query_params
        if params.get("status"):
            q = q.filter(status=params["status"].upper())
        if params.get("staff"):
            q = q.filter(staff_id=params["staff"])
        return q.order_by("-created_at", "-id")

    def create(self, request, *args, **kwargs):
        s = LoanRequestSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        loan = request_loan(staff=request.user, **s.validated_data)
        return Response(LoanSerializer(loan).data, status=status.HTTP_201_CREATED)

    @action(detail=False, methods=["get"])
    def mine(self, request):
        q = Loan.objects.filter(staff=request.user).order_by("-created_at", "-id")
        return Response(LoanSerializer(q, many=True).data)

    @action(detail=False, methods=["get"])
    def approved(self, request):
        """Awaiting disbursement."""
        q = Loan.objects.select_related("staff").filter(status=LoanStatus.APPROVED).order_by("reviewed_at", "id")
        return Response(LoanSerializer(q, many=True).data)

    @action(detail=True, methods=["post"])
    def review(self, request, pk=None):
        s = LoanReviewSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        loan = review_loan(loan_id=pk, actor=request.user, **s.validated_data)
        return Response(LoanSerializer(loan).data)

    @action(detail=True, methods=["post"])
    def disburse(self, request, pk=None):
        loan = disburse_loan(loan_id=pk, actor=request.user)
        return Response(LoanSerializer(loan).data)
