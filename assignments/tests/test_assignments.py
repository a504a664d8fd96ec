from decimal import Decimal

import pytest

from accounts.enums import UserRole
from assignments.enums import AssignmentKind, AssignmentStatus
from assignments.models import Assignment
from assignments.services import assign_doctor, assign_nurse_services, complete_nurse_service, start_consultation
from billing.enums import BillingKind, BillingStatus
from billing.services.payments import pay_billing
from common.errors import Conflict, Forbidden, PreconditionFailed, ValidationFailed
from visits.enums import VisitStatus
from visits.models import Visit

pytestmark = pytest.mark.django_db


def _status(visit):
    return Visit.objects.values_list("status", flat=True).get(pk=visit.pk)


def test_assign_doctor_bills_at_doctors_fee(triaged_visit, nurse, cashier, make_user, catalog):
    specialist = make_user(UserRole.DOCTOR, consultation_fee=Decimal("350.00"))
    a = assign_doctor(visit_id=triaged_visit.pk, doctor_id=specialist.pk, actor=nurse)

    assert a.kind == AssignmentKind.DOCTOR
    assert a.status == AssignmentStatus.PENDING_PAYMENT
    assert a.billing.kind == BillingKind.CONSULTATION
    assert a.billing.total_amount == Decimal("350.00")
    assert _status(triaged_visit) == VisitStatus.ASSIGNED

    pay_billing(billing_id=a.billing_id, method="CASH", actor=cashier)
    a.refresh_from_db()
    assert a.status == AssignmentStatus.READY
    assert _status(triaged_visit) == VisitStatus.WAITING_FOR_DOCTOR


def test_catalog_price_without_own_fee(triaged_visit, nurse, doctor, catalog):
    a = assign_doctor(visit_id=triaged_visit.pk, doctor_id=doctor.pk, actor=nurse)
    assert a.billing.total_amount == Decimal("200.00")


def test_assign_doctor_checks(visit, nurse, doctor, make_user, catalog):
    with pytest.raises(Conflict):
        assign_doctor(visit_id=visit.pk, doctor_id=doctor.pk, actor=nurse)

    from vitals.services import record_triage_vitals
    record_triage_vitals(visit_id=visit.pk, data={"heart_rate": 80}, actor=nurse)

    with pytest.raises(ValidationFailed):
        assign_doctor(visit_id=visit.pk, doctor_id=nurse.pk, actor=nurse)
    off_duty = make_user(UserRole.DOCTOR, is_available=False)
    with pytest.raises(PreconditionFailed):
        assign_doctor(visit_id=visit.pk, doctor_id=off_duty.pk, actor=nurse)

    assign_doctor(visit_id=visit.pk, doctor_id=doctor.pk, actor=nurse)
    with pytest.raises(Conflict):
        assign_doctor(visit_id=visit.pk, doctor_id=doctor.pk, actor=nurse)


def test_only_assigned_doctor_starts(triaged_visit, nurse, doctor, cashier, make_user, catalog):
    a = assign_doctor(visit_id=triaged_visit.pk, doctor_id=doctor.pk, actor=nurse)
    with pytest.raises(Conflict):
        start_consultation(visit_id=triaged_visit.pk, actor=doctor)  # not paid yet

    pay_billing(billing_id=a.billing_id, method="CASH", actor=cashier)
    with pytest.raises(Forbidden):
        start_consultation(visit_id=triaged_visit.pk, actor=make_user(UserRole.DOCTOR))

    visit = start_consultation(visit_id=triaged_visit.pk, actor=doctor)
    assert visit.status == VisitStatus.IN_PROGRESS
    assert Assignment.objects.get(pk=a.pk).status == AssignmentStatus.ACTIVE


def test_emergency_doctor_is_ready_before_payment(receptionist, nurse, doctor, catalog):
    from patients.services.registration import register_patient
    from vitals.services import record_triage_vitals

    _, visit, _ = register_patient(data={"first_name": "Unknown"}, actor=receptionist, emergency=True)
    record_triage_vitals(visit_id=visit.pk, data={"systolic": 85, "diastolic": 50}, actor=nurse)

    a = assign_doctor(visit_id=visit.pk, doctor_id=doctor.pk, actor=nurse)
    assert a.status == AssignmentStatus.READY
    assert a.billing.status == BillingStatus.EMERGENCY_PENDING
    assert _status(visit) == VisitStatus.WAITING_FOR_DOCTOR


def test_nurse_batch_is_per_item(api, nurse, triaged_visit, catalog):
    r = api(nurse).post("/api/nurses/assignments/nurse-services/", {
        "visit": triaged_visit.id,
        "services": [catalog["NRS-INJ"].id, catalog["LAB-CBC"].id, catalog["NRS-DRESS"].id],
    }, format="json")
    assert r.status_code == 200, r.data
    results = r.data["results"]
    assert [x["ok"] for x in results] == [True, False, True]
    assert results[1]["kind"] == "validation"
    assert Assignment.objects.filter(visit=triaged_visit, kind=AssignmentKind.NURSE_SERVICE).count() == 2
    assert _status(triaged_visit) == VisitStatus.ASSIGNED

    # same service again while the first is open
    r = api(nurse).post("/api/nurses/assignments/nurse-services/",
                        {"visit": triaged_visit.id, "services": [catalog["NRS-INJ"].id]}, format="json")
    assert r.status_code == 200
    assert r.data["results"][0]["ok"] is False


def test_nurse_only_visit_runs_to_completion(triaged_visit, nurse, cashier, catalog):
    from visits.services.lifecycle import complete_visit

    [item] = assign_nurse_services(visit_id=triaged_visit.pk, service_ids=[catalog["NRS-INJ"].id], actor=nurse)
    assert item["ok"]
    assignment = Assignment.objects.get(pk=item["assignment"])
    assert assignment.status == AssignmentStatus.PENDING_PAYMENT

    with pytest.raises(Conflict):
        complete_nurse_service(assignment_id=assignment.pk, actor=nurse)

    pay_billing(billing_id=item["billing"], method="CASH", actor=cashier)
    assert _status(triaged_visit) == VisitStatus.IN_PROGRESS

    done = complete_nurse_service(assignment_id=assignment.pk, actor=nurse, notes="IM, left deltoid")
    assert done.status == AssignmentStatus.COMPLETED
    assert done.notes == "IM, left deltoid"
    assert complete_visit(visit_id=triaged_visit.pk, actor=nurse).status == VisitStatus.COMPLETED


def test_nurse_services_need_triage(visit, nurse, catalog):
    [item] = assign_nurse_services(visit_id=visit.pk, service_ids=[catalog["NRS-INJ"].id], actor=nurse)
    assert item["ok"] is False and item["kind"] == "precondition"


def test_my_task_list(api, nurse, doctor, triaged_visit, catalog):
    assign_doctor(visit_id=triaged_visit.pk, doctor_id=doctor.pk, actor=nurse)
    r = api(doctor).get("/api/nurses/assignments/", {"mine": "1"})
    assert r.status_code == 200
    assert [a["kind"] for a in r.data] == [AssignmentKind.DOCTOR]
    assert api(nurse).get("/api/nurses/assignments/", {"mine": "1"}).data == []


def test_doctor_after_unpaid_nurse_service(triaged_visit, nurse, doctor, cashier, catalog):
    [item] = assign_nurse_services(visit_id=triaged_visit.pk, service_ids=[catalog["NRS-INJ"].id], actor=nurse)
    assert _status(triaged_visit) == VisitStatus.ASSIGNED

    a = assign_doctor(visit_id=triaged_visit.pk, doctor_id=doctor.pk, actor=nurse)
    assert _status(triaged_visit) == VisitStatus.ASSIGNED

    pay_billing(billing_id=item["billing"], method="CASH", actor=cashier)
    assert _status(triaged_visit) == VisitStatus.ASSIGNED  # the doctor path drives the visit now
    pay_billing(billing_id=a.billing_id, method="CASH", actor=cashier)
    assert _status(triaged_visit) == VisitStatus.WAITING_FOR_DOCTOR

    assert start_consultation(visit_id=triaged_visit.pk, actor=doctor).status == VisitStatus.IN_PROGRESS


def test_doctor_joins_visit_already_in_progress(triaged_visit, nurse, doctor, cashier, catalog):
    [item] = assign_nurse_services(visit_id=triaged_visit.pk, service_ids=[catalog["NRS-DRESS"].id], actor=nurse)
    pay_billing(billing_id=item["billing"], method="CASH", actor=cashier)
    assert _status(triaged_visit) == VisitStatus.IN_PROGRESS

    a = assign_doctor(visit_id=triaged_visit.pk, doctor_id=doctor.pk, actor=nurse)
    assert _status(triaged_visit) == VisitStatus.IN_PROGRESS
    with pytest.raises(Conflict):
        start_consultation(visit_id=triaged_visit.pk, actor=doctor)  # consultation unpaid

    pay_billing(billing_id=a.billing_id, method="CASH", actor=cashier)
    visit = start_consultation(visit_id=triaged_visit.pk, actor=doctor)
    assert visit.status == VisitStatus.IN_PROGRESS
    assert Assignment.objects.get(pk=a.pk).status == AssignmentStatus.ACTIVE
    # no status moved backwards or repeated
    assert list(visit.transitions.order_by("id").values_list("to_status", flat=True)) == [
        VisitStatus.WAITING_FOR_TRIAGE, VisitStatus.TRIAGED, VisitStatus.ASSIGNED, VisitStatus.IN_PROGRESS,
    ]

    with pytest.raises(Conflict):
        assign_doctor(visit_id=triaged_visit.pk, doctor_id=doctor.pk, actor=nurse)
