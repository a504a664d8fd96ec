import logging

from rest_framework import mixins, permissions, status, viewsets
from rest_framework.decorators import action, api_view, permission_classes
from rest_framework.response import Response
from rest_framework_simplejwt.tokens import RefreshToken

from audit.enums import Verb
from audit.services import log_action

from .enums import UserRole
from .models import User
from .permissions import CanManageStaff
from .serializers import LoginSerializer, MeSerializer, StaffCreateSerializer, StaffSerializer

logger = logging.getLogger(__name__)

def _jwt_pair_for(user: User) -> dict:
    refresh = RefreshToken.for_user(user)
    # claims the front end reads without an extra /me round-trip
    for claim, value in (("role", user.role), ("fullname", user.fullname), ("email", user.email)):
        refresh[claim] = value
    return {"access": str(refresh.access_token), "refresh": str(refresh)}

@api_view(["GET"])
@permission_classes([permissions.IsAuthenticated])
def me(request):
    """Current staff member plus the capabilities their role grants."""
    return Response(MeSerializer(request.user).data)

@api_view(["POST"])
@permission_classes([permissions.AllowAny])
def login_password(request):
    s = LoginSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    user = s.validated_data["user"]
    logger.info("login ok for user=%s role=%s", user.id, user.role)
    log_action(obj=user, title="Signed in", actor=user, verb=Verb.LOGIN)
    return Response({"tokens": _jwt_pair_for(user), "user": StaffSerializer(user).data})


class StaffViewSet(viewsets.GenericViewSet,
                   mixins.ListModelMixin,
                   mixins.RetrieveModelMixin,
                   mixins.CreateModelMixin,
                   mixins.UpdateModelMixin):
    """
    Staff directory. Anyone signed in can list doctors/nurses (assignment
    pickers); only admins create or edit staff.
    """
    queryset = User.objects.filter(is_active=True).order_by("first_name", "last_name", "id")
    permission_classes = [permissions.IsAuthenticated]

    def get_serializer_class(self):
        return StaffCreateSerializer if self.action == "create" else StaffSerializer

    def get_permissions(self):
        if self.action in ("create", "update", "partial_update"):
            return [permissions.IsAuthenticated(), CanManageStaff()]
        return super().get_permissions()

    def get_queryset(self):
        q = self.queryset
        role = self.request.query_params.get("role")
        if role:
            q = q.filter(role=role.upper())
        specialty = self.request.query_params.get("specialty")
        if specialty:
            q = q.filter(specialty__icontains=specialty)
        available = self.request.query_params.get("available")
        if available is not None:
            q = q.filter(is_available=available.lower() in ("1", "true", "yes"))
        return q

    def create(self, request, *args, **kwargs):
        s = StaffCreateSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        user = s.save()
        logger.info("staff created id=%s role=%s by=%s", user.id, user.role, request.user.id)
        log_action(obj=user, title=f"Staff account created ({user.role})", actor=request.user, verb=Verb.CREATE)
        return Response(StaffSerializer(user).data, status=status.HTTP_201_CREATED)

    @action(detail=False, methods=["get"])
    def doctors(self, request):
        q = self.get_queryset().filter(role=UserRole.DOCTOR, is_available=True)
        return Response(StaffSerializer(q, many=True).data)

    @action(detail=False, methods=["get"])
    def nurses(self, request):
        q = self.get_queryset().filter(role=UserRole.NURSE, is_available=True)
        return Response(StaffSerializer(q, many=True).data)
