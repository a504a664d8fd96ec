from decimal import Decimal

import pytest
from rest_framework.test import APIClient

from accounts.enums import UserRole
from accounts.models import User
from billing.enums import ServiceCategory
from billing.models import Service


@pytest.fixture
def make_user(db):
    counter = {"n": 0}

    def _make(role, **extra):
        counter["n"] += 1
        extra.setdefault("first_name", role.title())
        extra.setdefault("last_name", f"User{counter['n']}")
        return User.objects.create_user(
            email=f"{role.lower()}{counter['n']}@clinic.test", password="Cl1nic-pass!", role=role, **extra,
        )
    return _make


@pytest.fixture
def admin(make_user):
    return make_user(UserRole.ADMIN)


@pytest.fixture
def doctor(make_user):
    return make_user(UserRole.DOCTOR)


@pytest.fixture
def nurse(make_user):
    return make_user(UserRole.NURSE)


@pytest.fixture
def cashier(make_user):
    return make_user(UserRole.BILLING_OFFICER)


@pytest.fixture
def lab_tech(make_user):
    return make_user(UserRole.LAB_TECHNICIAN)


@pytest.fixture
def receptionist(make_user):
    return make_user(UserRole.RECEPTIONIST)


@pytest.fixture
def api():
    """``api(user)`` -> APIClient authenticated as ``user``."""
    def _client(user=None):
        client = APIClient()
        if user is not None:
            client.force_authenticate(user=user)
        return client
    return _client


@pytest.fixture
def catalog(db):
    rows = [
        ("CONSULT-GEN", "General Consultation", ServiceCategory.CONSULTATION, "200.00"),
        ("CARD-REG", "Patient Card Registration", ServiceCategory.CARD, "100.00"),
        ("CARD-ACT", "Patient Card Activation", ServiceCategory.CARD, "200.00"),
        ("LAB-CBC", "Complete Blood Count", ServiceCategory.LAB, "250.00"),
        ("LAB-BGL", "Blood Glucose", ServiceCategory.LAB, "80.00"),
        ("RAD-CXR", "Chest X-Ray", ServiceCategory.RADIOLOGY, "400.00"),
        ("NRS-INJ", "Injection", ServiceCategory.NURSE, "50.00"),
        ("NRS-DRESS", "Wound Dressing", ServiceCategory.NURSE, "100.00"),
    ]
    return {
        code: Service.objects.create(code=code, name=name, category=cat, price=Decimal(price))
        for code, name, cat, price in rows
    }


@pytest.fixture
def cbc_template(catalog):
    from orders.enums import OrderType
    from orders.models import ResultTemplate

    t = ResultTemplate.objects.create(
        code="CBC", name="Complete Blood Count", category="Hematology", order_type=OrderType.LAB,
        fields=[
            {"name": "wbc", "label": "WBC", "type": "number", "min": 4, "max": 11, "required": True},
            {"name": "hgb", "label": "Hemoglobin", "type": "number", "min": 12, "max": 17.5, "required": True},
            {"name": "comment", "label": "Comment", "type": "textarea"},
        ],
    )
    t.services.add(catalog["LAB-CBC"])
    return t


@pytest.fixture
def patient(db, receptionist):
    from patients.services.registration import register_patient

    p, _, _ = register_patient(
        data={"first_name": "Abebe", "last_name": "Kebede", "mobile": "+251911000001", "gender": "MALE"},
        actor=receptionist, with_visit=False,
    )
    return p


@pytest.fixture
def visit(patient, receptionist):
    from visits.services.lifecycle import open_visit
    return open_visit(patient=patient, actor=receptionist)


@pytest.fixture
def triaged_visit(visit, nurse):
    from vitals.services import record_triage_vitals
    record_triage_vitals(visit_id=visit.pk, data={"systolic": 120, "diastolic": 80, "temp_c": Decimal("36.8")},
                         actor=nurse)
    visit.refresh_from_db()
    return visit


@pytest.fixture
def consulting_visit(triaged_visit, doctor, nurse, cashier, catalog):
    """Visit with the consultation paid and started: IN_PROGRESS with ``doctor``."""
    from assignments.services import assign_doctor, start_consultation
    from billing.services.payments import pay_billing

    a = assign_doctor(visit_id=triaged_visit.pk, doctor_id=doctor.pk, actor=nurse)
    pay_billing(billing_id=a.billing_id, method="CASH", actor=cashier)
    return start_consultation(visit_id=triaged_visit.pk, actor=doctor)
