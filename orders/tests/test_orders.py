from decimal import Decimal

import pytest

from billing.enums import BillingStatus
from billing.models import Billing
from billing.services.payments import pay_billing
from common.errors import Conflict, PreconditionFailed, ValidationFailed
from orders.enums import OrderStatus, OrderType
from orders.models import Order
from orders.services import cancel_order, create_order, start_order, submit_result
from visits.enums import VisitStatus
from visits.models import Visit
from visits.services.lifecycle import complete_visit

pytestmark = pytest.mark.django_db


@pytest.fixture
def lab_batch(consulting_visit, doctor, catalog, cbc_template):
    return create_order(visit_id=consulting_visit.pk, order_type=OrderType.LAB, actor=doctor,
                        service_ids=[catalog["LAB-CBC"].id, catalog["LAB-BGL"].id])


def _visit_status(visit):
    return Visit.objects.values_list("status", flat=True).get(pk=visit.pk)


def test_batch_is_billed_once(lab_batch):
    orders = list(lab_batch.orders.order_by("id"))
    assert [o.status for o in orders] == [OrderStatus.UNPAID, OrderStatus.UNPAID]
    assert orders[0].template is not None and orders[1].template is None
    assert lab_batch.billing.total_amount == Decimal("330.00")
    assert lab_batch.billing.lines.count() == 2


def test_payment_unlocks_orders(lab_batch, cashier):
    pay_billing(billing_id=lab_batch.billing_id, method="CASH", actor=cashier)
    assert set(lab_batch.orders.values_list("status", flat=True)) == {OrderStatus.PAID}


def test_unpaid_order_cannot_take_results(lab_batch, lab_tech):
    order = lab_batch.orders.get(service__code="LAB-CBC")
    with pytest.raises(PreconditionFailed):
        submit_result(order_id=order.pk, values={"wbc": 6, "hgb": 14}, actor=lab_tech)
    with pytest.raises(Conflict):
        start_order(order_id=order.pk, actor=lab_tech)


def test_results_move_visit_to_review_once(lab_batch, cashier, lab_tech, doctor, consulting_visit, catalog):
    pay_billing(billing_id=lab_batch.billing_id, method="CASH", actor=cashier)
    cbc = lab_batch.orders.get(service__code="LAB-CBC")
    bgl = lab_batch.orders.get(service__code="LAB-BGL")

    start_order(order_id=cbc.pk, actor=lab_tech)
    submit_result(order_id=cbc.pk, values={"wbc": 6.1, "hgb": 14}, actor=lab_tech)
    assert _visit_status(consulting_visit) == VisitStatus.IN_PROGRESS

    done = submit_result(order_id=bgl.pk, values={"findings": "5.4 mmol/L"}, actor=lab_tech)
    assert done.status == OrderStatus.COMPLETED
    assert done.started_at is not None
    assert _visit_status(consulting_visit) == VisitStatus.AWAITING_RESULTS_REVIEW

    with pytest.raises(Conflict):
        submit_result(order_id=bgl.pk, values={"findings": "again"}, actor=lab_tech)

    # a follow-up order does not send the visit back
    create_order(visit_id=consulting_visit.pk, order_type=OrderType.RADIOLOGY, actor=doctor,
                 service_ids=[catalog["RAD-CXR"].id])
    assert _visit_status(consulting_visit) == VisitStatus.AWAITING_RESULTS_REVIEW


def test_invalid_result_keeps_order_open(lab_batch, cashier, lab_tech):
    pay_billing(billing_id=lab_batch.billing_id, method="CASH", actor=cashier)
    cbc = lab_batch.orders.get(service__code="LAB-CBC")
    with pytest.raises(ValidationFailed) as exc:
        submit_result(order_id=cbc.pk, values={"wbc": "lots"}, actor=lab_tech)
    assert set(exc.value.errors) == {"wbc", "hgb"}
    assert Order.objects.get(pk=cbc.pk).status == OrderStatus.PAID


def test_order_rules(consulting_visit, triaged_visit, doctor, catalog):
    with pytest.raises(ValidationFailed):
        create_order(visit_id=consulting_visit.pk, order_type=OrderType.LAB, actor=doctor,
                     service_ids=[catalog["RAD-CXR"].id])
    with pytest.raises(ValidationFailed):
        create_order(visit_id=consulting_visit.pk, order_type=OrderType.LAB, actor=doctor,
                     service_ids=[catalog["LAB-CBC"].id, catalog["LAB-CBC"].id])

    create_order(visit_id=consulting_visit.pk, order_type=OrderType.LAB, actor=doctor,
                 service_ids=[catalog["LAB-CBC"].id])
    with pytest.raises(ValidationFailed) as exc:
        create_order(visit_id=consulting_visit.pk, order_type=OrderType.LAB, actor=doctor,
                     service_ids=[catalog["LAB-CBC"].id])
    assert exc.value.errors["already_ordered"] == ["LAB-CBC"]


def test_orders_need_triage(visit, doctor, catalog):
    with pytest.raises(PreconditionFailed):
        create_order(visit_id=visit.pk, order_type=OrderType.LAB, actor=doctor,
                     service_ids=[catalog["LAB-CBC"].id])


def test_ordering_starts_a_waiting_consultation(triaged_visit, doctor, nurse, cashier, catalog):
    from assignments.services import assign_doctor

    a = assign_doctor(visit_id=triaged_visit.pk, doctor_id=doctor.pk, actor=nurse)
    pay_billing(billing_id=a.billing_id, method="CASH", actor=cashier)
    assert _visit_status(triaged_visit) == VisitStatus.WAITING_FOR_DOCTOR

    create_order(visit_id=triaged_visit.pk, order_type=OrderType.LAB, actor=doctor,
                 service_ids=[catalog["LAB-BGL"].id])
    assert _visit_status(triaged_visit) == VisitStatus.IN_PROGRESS


def test_cancel_takes_line_off_bill(lab_batch, doctor):
    bgl = lab_batch.orders.get(service__code="LAB-BGL")
    with pytest.raises(ValidationFailed):
        cancel_order(order_id=bgl.pk, actor=doctor, reason="")

    cancelled = cancel_order(order_id=bgl.pk, actor=doctor, reason="duplicate request")
    assert cancelled.status == OrderStatus.CANCELLED
    assert cancelled.billing_line is None
    billing = Billing.objects.get(pk=lab_batch.billing_id)
    assert billing.total_amount == Decimal("250.00")
    assert billing.status == BillingStatus.PENDING


def test_visit_cannot_close_with_open_orders(lab_batch, consulting_visit, doctor):
    with pytest.raises(PreconditionFailed) as exc:
        complete_visit(visit_id=consulting_visit.pk, actor=doctor)
    assert exc.value.errors["pending_orders"] == 2


def test_emergency_orders_skip_payment(make_user, catalog, nurse, receptionist):
    from assignments.services import assign_doctor
    from patients.services.registration import register_patient
    from vitals.services import record_triage_vitals

    er_doctor = make_user("DOCTOR")
    _, visit, card = register_patient(data={"first_name": "Unknown"}, actor=receptionist, emergency=True)
    assert card is None
    record_triage_vitals(visit_id=visit.pk, data={"spo2": 88}, actor=nurse)
    assign_doctor(visit_id=visit.pk, doctor_id=er_doctor.pk, actor=nurse)

    batch = create_order(visit_id=visit.pk, order_type=OrderType.LAB, actor=er_doctor,
                         service_ids=[catalog["LAB-BGL"].id])
    assert batch.billing.status == BillingStatus.EMERGENCY_PENDING
    assert batch.orders.get().status == OrderStatus.QUEUED


def test_result_api(api, lab_batch, cashier, lab_tech, make_user):
    pay_billing(billing_id=lab_batch.billing_id, method="CASH", actor=cashier)
    cbc = lab_batch.orders.get(service__code="LAB-CBC")

    r = api(lab_tech).get("/api/labs/orders/", {"queue": "1"})
    assert r.status_code == 200
    assert {o["id"] for o in r.data} == set(lab_batch.orders.values_list("id", flat=True))

    r = api(lab_tech).post(f"/api/labs/orders/{cbc.id}/result/", {"values": {"wbc": 3, "hgb": 13}}, format="json")
    assert r.status_code == 422
    assert r.data["warnings"] == ["WBC: 3 is below the normal range (4-11)."]
    assert Order.objects.get(pk=cbc.pk).status == OrderStatus.PAID

    radiologist = make_user("RADIOLOGIST")
    r = api(radiologist).post(f"/api/labs/orders/{cbc.id}/result/",
                              {"values": {"wbc": 5, "hgb": 13}}, format="json")
    assert r.status_code == 403

    # a lab order is not reachable on the radiology route
    r = api(radiologist).post(f"/api/radiology/orders/{cbc.id}/start/")
    assert r.status_code == 404


def test_template_dry_run(api, lab_tech, cbc_template):
    r = api(lab_tech).post(f"/api/orders/templates/{cbc_template.id}/validate/",
                           {"values": {"wbc": 12, "hgb": 13}}, format="json")
    assert r.status_code == 200
    assert r.data["ok"] is True and r.data["needs_confirmation"] is True
    assert r.data["values"] == {"wbc": 12, "hgb": 13}


def test_order_writes_lock_the_visit_first(lab_batch, cashier, lab_tech, doctor, consulting_visit, monkeypatch):
    import orders.services

    locked = []
    real_lock = orders.services.lock_visit

    def spy(visit_id):
        locked.append(visit_id)
        return real_lock(visit_id)

    monkeypatch.setattr(orders.services, "lock_visit", spy)
    pay_billing(billing_id=lab_batch.billing_id, method="CASH", actor=cashier)
    cbc = lab_batch.orders.get(service__code="LAB-CBC")
    bgl = lab_batch.orders.get(service__code="LAB-BGL")

    submit_result(order_id=cbc.pk, values={"wbc": 6.1, "hgb": 14}, actor=lab_tech)
    cancel_order(order_id=bgl.pk, actor=doctor, reason="not needed")
    assert locked == [consulting_visit.pk, consulting_visit.pk]
    # the cancel left nothing pending, so the completed CBC is up for review
    assert _visit_status(consulting_visit) == VisitStatus.AWAITING_RESULTS_REVIEW
