import uuid
from django.conf import settings
from django.db import models
from django.contrib.contenttypes.models import ContentType
from django.contrib.contenttypes.fields import GenericForeignKey

from .enums import Verb

class AuditLog(models.Model):
    """
    Immutable audit event for any object. Written by services, never by views.
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    # who + request context
    actor = models.ForeignKey(settings.AUTH_USER_MODEL, null=True, blank=True, on_delete=models.SET_NULL, related_name="audit_events")
    actor_email = models.CharField(max_length=255, blank=True)       # snapshot, survives user deletion
    ip_address = models.GenericIPAddressField(null=True, blank=True)
    user_agent = models.TextField(blank=True, null=True)

    # what
    verb = models.CharField(max_length=8, choices=Verb.choices)
    message = models.CharField(max_length=255, blank=True)

    # where (target)
    target_ct = models.ForeignKey(ContentType, on_delete=models.CASCADE)
    target_id = models.CharField(max_length=64)                      # str: patients use PAT-... keys
    target = GenericForeignKey("target_ct", "target_id")

    extra = models.JSONField(default=dict, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        indexes = [
            models.Index(fields=["created_at"], name="audit_created_idx"),
            models.Index(fields=["actor", "created_at"], name="audit_actor_created_idx"),
            models.Index(fields=["target_ct", "target_id"], name="audit_target_idx"),
        ]
        ordering = ["-created_at"]

    def __str__(self):
        return f"{self.verb} {self.target_ct.model}#{self.target_id} by {self.actor_id} @ {self.created_at:%Y-%m-%d %H:%M}"
