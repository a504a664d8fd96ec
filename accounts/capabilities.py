"""
Role -> capability table.

This is the only place that decides which role may perform which workflow
action; permission classes and services both read from here.
"""
from .enums import Capability as C, UserRole as R

ALL_STAFF = frozenset(R.values)

CAPABILITIES: dict[str, frozenset[str]] = {
    C.REGISTER_PATIENT:       frozenset({R.ADMIN, R.RECEPTIONIST, R.BILLING_OFFICER}),
    C.OPEN_VISIT:             frozenset({R.ADMIN, R.RECEPTIONIST, R.BILLING_OFFICER, R.NURSE}),
    C.SCHEDULE_APPOINTMENT:   frozenset({R.ADMIN, R.RECEPTIONIST}),
    C.CANCEL_VISIT:           frozenset({R.ADMIN, R.BILLING_OFFICER}),
    C.RECORD_VITALS:          frozenset({R.NURSE, R.DOCTOR}),
    C.ASSIGN_DOCTOR:          frozenset({R.ADMIN, R.NURSE}),
    C.ASSIGN_NURSE_SERVICE:   frozenset({R.NURSE, R.DOCTOR}),
    C.PERFORM_NURSE_SERVICE:  frozenset({R.NURSE}),
    C.CONSULT:                frozenset({R.DOCTOR, R.DENTIST}),
    C.CREATE_ORDER:           frozenset({R.DOCTOR, R.DENTIST}),
    C.PROCESS_LAB:            frozenset({R.LAB_TECHNICIAN}),
    C.PROCESS_RADIOLOGY:      frozenset({R.RADIOLOGIST}),
    C.PROCESS_DENTAL:         frozenset({R.DENTIST}),
    C.COMPLETE_VISIT:         frozenset({R.DOCTOR, R.DENTIST, R.NURSE}),
    C.COLLECT_PAYMENT:        frozenset({R.BILLING_OFFICER, R.ADMIN}),
    C.MANAGE_CATALOG:         frozenset({R.ADMIN}),
    C.REQUEST_ACCOUNT_CHANGE: frozenset({R.BILLING_OFFICER, R.RECEPTIONIST}),
    C.REVIEW_ACCOUNT_REQUEST: frozenset({R.ADMIN}),
    C.REQUEST_LOAN:           ALL_STAFF,
    C.REVIEW_LOAN:            frozenset({R.ADMIN}),
    C.DISBURSE_LOAN:          frozenset({R.BILLING_OFFICER}),
    C.MANAGE_STAFF:           frozenset({R.ADMIN}),
    C.VIEW_AUDIT:             frozenset({R.ADMIN}),
}


def role_can(role: str | None, capability: str) -> bool:
    if not role:
        return False
    return role in CAPABILITIES.get(capability, frozenset())


def user_can(user, capability: str) -> bool:
    if not user or not getattr(user, "is_authenticated", False) or not user.is_active:
        return False
    return role_can(getattr(user, "role", None), capability)


def capabilities_for(role: str | None) -> list[str]:
    return sorted(c for c, roles in CAPABILITIES.items() if role in roles)
