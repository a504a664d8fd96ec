from rest_framework.permissions import BasePermission

from .capabilities import user_can
from .enums import Capability


class HasCapability(BasePermission):
    required_capability: str | None = None
    message = "Your role does not allow this action."

    def has_permission(self, request, view):
        return bool(self.required_capability and user_can(request.user, self.required_capability))


_cache: dict[str, type] = {}


def requires(capability: str) -> type:
    """Permission class for one capability, e.g. ``permission_classes=[requires(Capability.CONSULT)]``."""
    if capability not in _cache:
        name = "Can" + "".join(p.title() for p in str(capability).split("_"))
        _cache[capability] = type(name, (HasCapability,), {"required_capability": capability})
    return _cache[capability]


CanManageStaff = requires(Capability.MANAGE_STAFF)
