from django.db import models


class VisitStatus(models.TextChoices):
    WAITING_FOR_TRIAGE      = "WAITING_FOR_TRIAGE", "Waiting for triage"
    TRIAGED                 = "TRIAGED", "Triaged"
    ASSIGNED                = "ASSIGNED", "Assigned"
    WAITING_FOR_DOCTOR      = "WAITING_FOR_DOCTOR", "Waiting for doctor"
    IN_PROGRESS             = "IN_PROGRESS", "In progress"
    AWAITING_RESULTS_REVIEW = "AWAITING_RESULTS_REVIEW", "Awaiting results review"
    COMPLETED               = "COMPLETED", "Completed"
    CANCELLED               = "CANCELLED", "Cancelled"

    @classmethod
    def terminal(cls):
        return (cls.COMPLETED, cls.CANCELLED)

    @classmethod
    def active(cls):
        return tuple(s for s in cls if s not in cls.terminal())

    @classmethod
    def post_triage(cls):
        return (cls.TRIAGED, cls.ASSIGNED, cls.WAITING_FOR_DOCTOR, cls.IN_PROGRESS, cls.AWAITING_RESULTS_REVIEW)


# forward order of the clinical pathway; CANCELLED sits outside it
PATHWAY = (
    VisitStatus.WAITING_FOR_TRIAGE,
    VisitStatus.TRIAGED,
    VisitStatus.ASSIGNED,
    VisitStatus.WAITING_FOR_DOCTOR,
    VisitStatus.IN_PROGRESS,
    VisitStatus.AWAITING_RESULTS_REVIEW,
    VisitStatus.COMPLETED,
)
RANK = {s: i for i, s in enumerate(PATHWAY)}
