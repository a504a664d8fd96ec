from decimal import Decimal

import pytest

from billing.enums import BillingKind, BillingStatus, PaymentMethod
from billing.models import Billing
from billing.services.invoices import create_billing
from billing.services.payments import pay_billing
from common.errors import Conflict, PreconditionFailed, ValidationFailed
from patient_accounts.enums import AccountStatus, AccountType, RequestStatus, RequestType, TransactionType
from patient_accounts.models import PatientAccount
from patient_accounts.services import (
    approve_request,
    create_request,
    reject_request,
    set_account_status,
)

pytestmark = pytest.mark.django_db


def _open(patient, account_type, amount, *, clerk, admin):
    req = create_request(patient=patient, request_type=RequestType.CREATE_ACCOUNT, account_type=account_type,
                         amount=amount, actor=clerk)
    approve_request(request_id=req.pk, actor=admin)
    return PatientAccount.objects.get(patient=patient)


@pytest.fixture
def advance(patient, cashier, admin):
    return _open(patient, AccountType.ADVANCE, "300", clerk=cashier, admin=admin)


def test_deposit_applies_only_on_approval(advance, patient, cashier, admin):
    assert advance.balance == Decimal("300.00")
    assert advance.transactions.get().type == TransactionType.OPENING

    req = create_request(patient=patient, request_type=RequestType.ADD_DEPOSIT, amount="500", actor=cashier)
    advance.refresh_from_db()
    assert advance.balance == Decimal("300.00")

    approve_request(request_id=req.pk, actor=admin)
    advance.refresh_from_db()
    assert advance.balance == Decimal("800.00")
    assert advance.total_deposited == Decimal("800.00")
    txn = advance.transactions.get(type=TransactionType.DEPOSIT)
    assert (txn.balance_before, txn.balance_after) == (Decimal("300.00"), Decimal("800.00"))

    with pytest.raises(Conflict):
        approve_request(request_id=req.pk, actor=admin)
    advance.refresh_from_db()
    assert advance.balance == Decimal("800.00")


def test_request_rules(advance, patient, cashier):
    with pytest.raises(Conflict):
        create_request(patient=patient, request_type=RequestType.CREATE_ACCOUNT,
                       account_type=AccountType.CREDIT, amount=0, actor=cashier)
    with pytest.raises(ValidationFailed):
        create_request(patient=patient, request_type=RequestType.ADD_CREDIT, amount="100", actor=cashier)
    with pytest.raises(ValidationFailed):
        create_request(patient=patient, request_type=RequestType.ADD_DEPOSIT, amount="0", actor=cashier)


def test_no_account_yet(patient, cashier):
    with pytest.raises(PreconditionFailed):
        create_request(patient=patient, request_type=RequestType.ADD_DEPOSIT, amount="100", actor=cashier)


def test_reject_needs_reason(patient, cashier, admin):
    req = create_request(patient=patient, request_type=RequestType.CREATE_ACCOUNT,
                         account_type=AccountType.ADVANCE, amount="100", actor=cashier)
    with pytest.raises(ValidationFailed):
        reject_request(request_id=req.pk, actor=admin, reason="")
    req = reject_request(request_id=req.pk, actor=admin, reason="ID not verified")
    assert req.status == RequestStatus.REJECTED
    assert not PatientAccount.objects.filter(patient=patient).exists()


def test_account_payment_deducts_balance(advance, patient, visit, cashier, catalog):
    billing, _ = create_billing(patient=patient, visit=visit, kind=BillingKind.LAB,
                                items=[{"service": catalog["LAB-CBC"]}])
    pay_billing(billing_id=billing.pk, method=PaymentMethod.ACCOUNT, actor=cashier)

    advance.refresh_from_db()
    assert advance.balance == Decimal("50.00")
    assert advance.total_used == Decimal("250.00")
    assert advance.transactions.get(type=TransactionType.DEDUCTION).billing_id == billing.pk


def test_insufficient_balance_leaves_billing_unpaid(advance, patient, visit, cashier, catalog):
    billing, _ = create_billing(patient=patient, visit=visit, kind=BillingKind.RADIOLOGY,
                                items=[{"service": catalog["RAD-CXR"]}])
    with pytest.raises(PreconditionFailed):
        pay_billing(billing_id=billing.pk, method=PaymentMethod.ACCOUNT, actor=cashier)
    assert Billing.objects.get(pk=billing.pk).status == BillingStatus.PENDING
    advance.refresh_from_db()
    assert advance.balance == Decimal("300.00")


def test_suspended_account_cannot_pay(advance, patient, cashier, admin, catalog):
    set_account_status(account_id=advance.pk, status=AccountStatus.SUSPENDED, actor=admin)
    billing, _ = create_billing(patient=patient, kind=BillingKind.OTHER, items=[{"service": catalog["NRS-INJ"]}])
    with pytest.raises(PreconditionFailed):
        pay_billing(billing_id=billing.pk, method=PaymentMethod.ACCOUNT, actor=cashier)


def test_credit_account_builds_and_repays_debt(patient, cashier, admin, catalog):
    account = _open(patient, AccountType.CREDIT, "1000", clerk=cashier, admin=admin)
    billing, _ = create_billing(patient=patient, kind=BillingKind.RADIOLOGY, items=[{"service": catalog["RAD-CXR"]}])
    pay_billing(billing_id=billing.pk, method=PaymentMethod.ACCOUNT, actor=cashier)

    account.refresh_from_db()
    assert (account.balance, account.debt_owed) == (Decimal("600.00"), Decimal("400.00"))

    with pytest.raises(ValidationFailed):
        create_request(patient=patient, request_type=RequestType.RETURN_MONEY, amount="500", actor=cashier)

    req = create_request(patient=patient, request_type=RequestType.RETURN_MONEY, amount="400", actor=cashier)
    approve_request(request_id=req.pk, actor=admin)
    account.refresh_from_db()
    assert (account.balance, account.debt_owed) == (Decimal("1000.00"), Decimal("0.00"))
    assert account.total_debt_paid == Decimal("400.00")


def test_request_api(api, patient, receptionist, admin, nurse):
    payload = {"patient": patient.id, "request_type": "CREATE_ACCOUNT", "account_type": "ADVANCE", "amount": "0"}
    assert api(nurse).post("/api/accounts/requests/", payload, format="json").status_code == 403

    r = api(receptionist).post("/api/accounts/requests/", payload, format="json")
    assert r.status_code == 201, r.data
    assert r.data["status"] == RequestStatus.PENDING

    assert api(receptionist).post(f"/api/accounts/requests/{r.data['id']}/approve/").status_code == 403
    r = api(admin).post(f"/api/accounts/requests/{r.data['id']}/approve/")
    assert r.status_code == 200, r.data

    r = api(receptionist).get(f"/api/accounts/by-patient/{patient.id}/")
    assert r.status_code == 200
    assert r.data["balance"] == "0.00"
