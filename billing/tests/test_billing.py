from decimal import Decimal

import pytest

from billing.enums import BillingKind, BillingStatus, PaymentMethod
from billing.models import Billing, Payment
from billing.services.invoices import add_line, create_billing, remove_line
from billing.services.payments import pay_billing, settle_insurance
from common.errors import Conflict, PreconditionFailed, ValidationFailed
from patients.enums import CardStatus

pytestmark = pytest.mark.django_db


@pytest.fixture
def lab_billing(patient, visit, catalog):
    billing, _ = create_billing(patient=patient, visit=visit, kind=BillingKind.LAB,
                                items=[{"service": catalog["LAB-CBC"]}, {"service": catalog["LAB-BGL"], "quantity": 2}])
    return billing


def _lines_sum(billing):
    return sum((l.total_price for l in billing.lines.all()), Decimal("0.00"))


def test_total_follows_lines(lab_billing, catalog):
    assert lab_billing.total_amount == Decimal("410.00")

    line = add_line(billing_id=lab_billing.pk, service=catalog["RAD-CXR"])
    lab_billing.refresh_from_db()
    assert lab_billing.total_amount == Decimal("810.00") == _lines_sum(lab_billing)

    billing = remove_line(line_id=line.pk)
    assert billing.total_amount == Decimal("410.00") == _lines_sum(billing)


def test_removing_last_line_cancels(patient, catalog):
    billing, lines = create_billing(patient=patient, kind=BillingKind.OTHER, items=[{"service": catalog["NRS-INJ"]}])
    billing = remove_line(line_id=lines[0].pk)
    assert billing.status == BillingStatus.CANCELLED
    assert billing.total_amount == Decimal("0.00")


def test_cash_payment(lab_billing, cashier):
    payment = pay_billing(billing_id=lab_billing.pk, method=PaymentMethod.CASH, actor=cashier, amount="410.00")
    lab_billing.refresh_from_db()
    assert lab_billing.status == BillingStatus.PAID
    assert lab_billing.paid_at is not None
    assert payment.amount == Decimal("410.00")
    assert payment.received_by == cashier


def test_second_payment_conflicts(lab_billing, cashier):
    pay_billing(billing_id=lab_billing.pk, method=PaymentMethod.CASH, actor=cashier)
    with pytest.raises(Conflict):
        pay_billing(billing_id=lab_billing.pk, method=PaymentMethod.CASH, actor=cashier)
    assert Payment.objects.filter(billing=lab_billing).count() == 1


def test_paid_billing_is_frozen(lab_billing, cashier, catalog):
    pay_billing(billing_id=lab_billing.pk, method=PaymentMethod.CASH, actor=cashier)
    with pytest.raises(Conflict):
        add_line(billing_id=lab_billing.pk, service=catalog["RAD-CXR"])


def test_amount_must_match_total(lab_billing, cashier):
    with pytest.raises(ValidationFailed) as exc:
        pay_billing(billing_id=lab_billing.pk, method=PaymentMethod.CASH, actor=cashier, amount="400")
    assert exc.value.errors["total_amount"] == "410.00"
    assert Billing.objects.get(pk=lab_billing.pk).status == BillingStatus.PENDING


def test_bank_needs_reference(lab_billing, cashier):
    with pytest.raises(ValidationFailed) as exc:
        pay_billing(billing_id=lab_billing.pk, method=PaymentMethod.BANK, actor=cashier, bank_name="CBE")
    assert "reference" in exc.value.errors


def test_insurance_settles_later(lab_billing, cashier):
    pay_billing(billing_id=lab_billing.pk, method=PaymentMethod.INSURANCE, actor=cashier, insurer="Nyala")
    assert Billing.objects.get(pk=lab_billing.pk).status == BillingStatus.PENDING_INSURANCE

    billing = settle_insurance(billing_id=lab_billing.pk, actor=cashier, reference="CLM-889")
    assert billing.status == BillingStatus.PAID
    assert billing.insurance_settled_at is not None
    with pytest.raises(Conflict):
        settle_insurance(billing_id=lab_billing.pk, actor=cashier)


def test_cancelled_billing_cannot_be_paid(patient, catalog, cashier):
    billing, lines = create_billing(patient=patient, kind=BillingKind.OTHER, items=[{"service": catalog["NRS-INJ"]}])
    remove_line(line_id=lines[0].pk)
    with pytest.raises(PreconditionFailed):
        pay_billing(billing_id=billing.pk, method=PaymentMethod.CASH, actor=cashier)


def test_card_fee_activates_card(receptionist, cashier, catalog):
    from patients.services.registration import register_patient

    p, _, card_billing = register_patient(
        data={"first_name": "Sara", "mobile": "+251911000777"}, actor=receptionist, with_visit=False,
    )
    assert card_billing.kind == BillingKind.CARD
    assert card_billing.total_amount == Decimal("100.00")
    assert p.card_status == CardStatus.INACTIVE

    pay_billing(billing_id=card_billing.pk, method=PaymentMethod.CASH, actor=cashier)
    p.refresh_from_db()
    assert p.card_status == CardStatus.ACTIVE
    assert p.card_expires_at > p.card_activated_at


def test_pay_endpoint(api, cashier, lab_billing):
    r = api(cashier).post(f"/api/billing/billings/{lab_billing.id}/pay/",
                          {"method": "BANK", "reference": "FT-1"}, format="json")
    assert r.status_code == 400
    assert r.data["kind"] == "validation"
    assert "bank_name" in r.data["errors"]

    r = api(cashier).post(f"/api/billing/billings/{lab_billing.id}/pay/",
                          {"method": "BANK", "reference": "FT-1", "bank_name": "CBE"}, format="json")
    assert r.status_code == 201
    assert r.data["billing"]["status"] == BillingStatus.PAID

    r = api(cashier).get("/api/billing/billings/unpaid/")
    assert lab_billing.id not in [b["id"] for b in r.data]


def test_catalog_csv_import_rejects_negative_prices(api, admin, catalog):
    from django.core.files.uploadedfile import SimpleUploadedFile
    from billing.models import Service

    csv_body = (
        "code,name,category,price\n"
        "lab-tsh,Thyroid Stimulating Hormone,LAB,320\n"
        "LAB-BGL,Blood Glucose,LAB,-80\n"
        "RAD-US,Abdominal Ultrasound,RADIOLOGY,NaN\n"
    )
    upload = SimpleUploadedFile("services.csv", csv_body.encode("utf-8"), content_type="text/csv")
    r = api(admin).post("/api/billing/services/import_csv/", {"file": upload}, format="multipart")
    assert r.status_code == 200, r.data
    assert r.data["created"] == 1
    assert r.data["updated"] == 0
    assert r.data["errors"] == ["Row 3: price must be zero or more", "Row 4: price must be zero or more"]
    assert Service.objects.get(code="LAB-TSH").price == Decimal("320")
    assert Service.objects.get(code="LAB-BGL").price == Decimal("80.00")
    assert not Service.objects.filter(code="RAD-US").exists()
