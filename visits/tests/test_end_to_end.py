"""
Front desk to discharge through the API, with every role doing its own step.
"""
from decimal import Decimal

import pytest
from django.utils import timezone

from billing.models import Billing, Payment
from visits.enums import VisitStatus

pytestmark = pytest.mark.django_db


def test_full_visit(api, receptionist, nurse, doctor, cashier, lab_tech, catalog, cbc_template):
    year = timezone.localdate().year

    # registration
    r = api(receptionist).post("/api/patients/register/", {
        "first_name": "Almaz", "last_name": "Tadesse", "mobile": "+251911222333", "gender": "FEMALE",
    }, format="json")
    assert r.status_code == 201, r.data
    assert r.data["patient"]["id"] == f"PAT-{year}-01"
    visit_id = r.data["visit"]["id"]
    assert r.data["visit"]["status"] == VisitStatus.WAITING_FOR_TRIAGE
    card_billing = r.data["card_billing"]
    assert card_billing is not None

    # card fee activates the card
    r = api(cashier).post(f"/api/billing/billings/{card_billing}/pay/", {"method": "CASH"}, format="json")
    assert r.status_code == 201, r.data
    r = api(receptionist).get(f"/api/patients/PAT-{year}-01/")
    assert r.data["card_status"] == "ACTIVE"

    # triage
    r = api(nurse).post("/api/vitals/triage/", {
        "visit": visit_id, "systolic": 118, "diastolic": 76, "temp_c": "37.9", "chief_complaint": "fever",
    }, format="json")
    assert r.status_code == 201, r.data

    # doctor assignment + consultation payment
    r = api(nurse).post("/api/nurses/assignments/assign-doctor/", {"visit": visit_id, "doctor": doctor.id},
                        format="json")
    assert r.status_code == 201, r.data
    consult = Billing.objects.get(pk=r.data["billing"])
    assert consult.total_amount == Decimal("200.00")

    r = api(cashier).post(f"/api/billing/billings/{consult.id}/pay/", {"method": "CASH", "amount": "200.00"},
                          format="json")
    assert r.status_code == 201, r.data
    assert api(doctor).get(f"/api/visits/{visit_id}/").data["status"] == VisitStatus.WAITING_FOR_DOCTOR

    # doctor orders a CBC; ordering starts the consultation
    r = api(doctor).post("/api/labs/orders/", {"visit": visit_id, "services": [catalog["LAB-CBC"].id]},
                         format="json")
    assert r.status_code == 201, r.data
    order_id = r.data["orders"][0]["id"]
    assert api(doctor).get(f"/api/visits/{visit_id}/").data["status"] == VisitStatus.IN_PROGRESS

    r = api(cashier).post(f"/api/billing/billings/{r.data['billing']}/pay/", {"method": "CASH"}, format="json")
    assert r.status_code == 201

    # lab works the order; out-of-range needs confirmation
    lab = api(lab_tech)
    assert lab.post(f"/api/labs/orders/{order_id}/start/").status_code == 200
    r = lab.post(f"/api/labs/orders/{order_id}/result/", {"values": {"wbc": 14.2, "hgb": 13}}, format="json")
    assert r.status_code == 422
    assert r.data["kind"] == "confirmation_required"
    assert r.data["warnings"]
    r = lab.post(f"/api/labs/orders/{order_id}/result/",
                 {"values": {"wbc": 14.2, "hgb": 13}, "confirm_warnings": True}, format="json")
    assert r.status_code == 200, r.data
    assert r.data["status"] == "COMPLETED"
    assert api(doctor).get(f"/api/visits/{visit_id}/").data["status"] == VisitStatus.AWAITING_RESULTS_REVIEW

    # discharge
    r = api(doctor).post(f"/api/visits/{visit_id}/complete/", {"diagnosis": "Bacterial infection"}, format="json")
    assert r.status_code == 200, r.data
    assert r.data["status"] == VisitStatus.COMPLETED

    statuses = [t["to_status"] for t in r.data["transitions"]]
    assert statuses == [
        VisitStatus.WAITING_FOR_TRIAGE, VisitStatus.TRIAGED, VisitStatus.ASSIGNED,
        VisitStatus.WAITING_FOR_DOCTOR, VisitStatus.IN_PROGRESS, VisitStatus.AWAITING_RESULTS_REVIEW,
        VisitStatus.COMPLETED,
    ]
    assert Payment.objects.filter(patient_id=f"PAT-{year}-01").count() == 3


def test_two_lab_orders_both_resulted(api, receptionist, nurse, doctor, cashier, lab_tech, catalog, cbc_template):
    r = api(receptionist).post("/api/patients/register/", {
        "first_name": "Hanna", "last_name": "Girma", "mobile": "+251911444555",
    }, format="json")
    assert r.status_code == 201, r.data
    visit_id = r.data["visit"]["id"]
    assert api(cashier).post(f"/api/billing/billings/{r.data['card_billing']}/pay/", {"method": "CASH"},
                             format="json").status_code == 201

    assert api(nurse).post("/api/vitals/triage/", {"visit": visit_id, "systolic": 122, "diastolic": 78},
                           format="json").status_code == 201
    r = api(nurse).post("/api/nurses/assignments/assign-doctor/", {"visit": visit_id, "doctor": doctor.id},
                        format="json")
    assert api(cashier).post(f"/api/billing/billings/{r.data['billing']}/pay/", {"method": "CASH"},
                             format="json").status_code == 201

    r = api(doctor).post("/api/labs/orders/", {
        "visit": visit_id, "services": [catalog["LAB-CBC"].id, catalog["LAB-BGL"].id],
    }, format="json")
    assert r.status_code == 201, r.data
    orders = {o["service"]: o["id"] for o in r.data["orders"]}
    assert Billing.objects.get(pk=r.data["billing"]).total_amount == Decimal("330.00")
    assert api(cashier).post(f"/api/billing/billings/{r.data['billing']}/pay/", {"method": "CASH"},
                             format="json").status_code == 201

    lab = api(lab_tech)
    r = lab.post(f"/api/labs/orders/{orders[catalog['LAB-CBC'].id]}/result/",
                 {"values": {"wbc": 7.1, "hgb": 14}}, format="json")
    assert r.status_code == 200, r.data
    # one result still outstanding
    assert api(doctor).get(f"/api/visits/{visit_id}/").data["status"] == VisitStatus.IN_PROGRESS

    r = lab.post(f"/api/labs/orders/{orders[catalog['LAB-BGL'].id]}/result/",
                 {"values": {"findings": "Fasting glucose 92 mg/dL"}}, format="json")
    assert r.status_code == 200, r.data
    assert api(doctor).get(f"/api/visits/{visit_id}/").data["status"] == VisitStatus.AWAITING_RESULTS_REVIEW

    r = api(doctor).post(f"/api/visits/{visit_id}/complete/", {"diagnosis": "Viral fever"}, format="json")
    assert r.status_code == 200, r.data
    r = api(doctor).get("/api/orders/", {"visit": visit_id})
    assert sorted(o["status"] for o in r.data) == ["COMPLETED", "COMPLETED"]
