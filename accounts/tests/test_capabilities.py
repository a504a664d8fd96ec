import pytest

from accounts.capabilities import CAPABILITIES, capabilities_for, role_can
from accounts.enums import Capability, UserRole
from accounts.models import User

pytestmark = pytest.mark.django_db


def test_every_capability_is_granted_to_someone():
    assert set(CAPABILITIES) == set(Capability.values)
    for cap, roles in CAPABILITIES.items():
        assert roles, cap
        assert roles <= set(UserRole.values), cap


def test_role_can():
    assert role_can(UserRole.BILLING_OFFICER, Capability.COLLECT_PAYMENT)
    assert not role_can(UserRole.NURSE, Capability.COLLECT_PAYMENT)
    assert not role_can(None, Capability.REQUEST_LOAN)
    assert Capability.PROCESS_LAB in capabilities_for(UserRole.LAB_TECHNICIAN)


def test_me_lists_capabilities(api, doctor):
    r = api(doctor).get("/api/auth/me/")
    assert r.status_code == 200
    assert r.data["role"] == UserRole.DOCTOR
    assert Capability.CREATE_ORDER in r.data["capabilities"]
    assert Capability.COLLECT_PAYMENT not in r.data["capabilities"]


def test_anonymous_is_rejected(api):
    assert api().get("/api/visits/").status_code == 401


def test_login_returns_tokens(api, nurse):
    r = api().post("/api/auth/login/", {"email": nurse.email, "password": "Cl1nic-pass!"}, format="json")
    assert r.status_code == 200, r.data
    assert r.data["tokens"]["access"]
    assert r.data["user"]["role"] == UserRole.NURSE


def test_role_checks_on_workflow_endpoints(api, nurse, receptionist, lab_tech, doctor, visit, triaged_visit):
    # nurse cannot take money
    assert api(nurse).post("/api/billing/billings/1/pay/", {"method": "CASH"}, format="json").status_code == 403
    # front desk cannot assign doctors
    r = api(receptionist).post("/api/nurses/assignments/assign-doctor/",
                               {"visit": triaged_visit.id, "doctor": doctor.id}, format="json")
    assert r.status_code == 403
    # lab processes orders but does not place them
    r = api(lab_tech).post("/api/labs/orders/", {"visit": triaged_visit.id, "services": [1]}, format="json")
    assert r.status_code == 403
    assert r.data["kind"] == "forbidden"


def test_only_admin_creates_staff(api, admin, doctor):
    payload = {"email": "new.nurse@clinic.test", "password": "Str0ng-enough!", "first_name": "Hana",
               "last_name": "Girma", "role": UserRole.NURSE}
    assert api(doctor).post("/api/auth/staff/", payload, format="json").status_code == 403

    r = api(admin).post("/api/auth/staff/", payload, format="json")
    assert r.status_code == 201, r.data
    assert User.objects.get(email="new.nurse@clinic.test").check_password("Str0ng-enough!")


def test_doctor_picker_lists_available_doctors(api, nurse, doctor, make_user):
    make_user(UserRole.DOCTOR, is_available=False)
    r = api(nurse).get("/api/auth/staff/doctors/")
    assert [d["id"] for d in r.data] == [doctor.id]
