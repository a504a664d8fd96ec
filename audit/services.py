from django.contrib.contenttypes.models import ContentType
from .models import AuditLog
from .enums import Verb
from .local import current_request

def _authenticated(user):
    return user if getattr(user, "is_authenticated", False) else None

def log_action(*, obj, title: str, extra: dict | None = None, actor=None, verb: str = Verb.ACTION):
    """
    Record one workflow event against ``obj``. The actor defaults to the
    user of the request being served, if any.
    """
    req = current_request()
    user = _authenticated(actor) or _authenticated(getattr(req, "user", None))
    meta = getattr(req, "META", {}) if req else {}
    return AuditLog.objects.create(
        actor=user,
        actor_email=(user.email if user else ""),
        ip_address=meta.get("REMOTE_ADDR"),
        user_agent=meta.get("HTTP_USER_AGENT"),
        verb=verb,
        message=title[:255],
        target_ct=ContentType.objects.get_for_model(obj.__class__),
        target_id=str(obj.pk),
        extra=extra or {},
    )
