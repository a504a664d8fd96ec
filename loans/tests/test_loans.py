from decimal import Decimal

import pytest

from common.errors import Conflict, NotFound, ValidationFailed
from loans.enums import LoanStatus, ReviewAction
from loans.services import disburse_loan, request_loan, review_loan

pytestmark = pytest.mark.django_db


def test_loan_lifecycle(nurse, admin, cashier):
    loan = request_loan(staff=nurse, amount="2000", reason="school fees")
    assert loan.status == LoanStatus.PENDING

    loan = review_loan(loan_id=loan.pk, action=ReviewAction.APPROVE, actor=admin, approved_amount="1500")
    assert loan.status == LoanStatus.APPROVED
    assert loan.approved_amount == Decimal("1500.00")

    loan = disburse_loan(loan_id=loan.pk, actor=cashier)
    assert loan.status == LoanStatus.GIVEN
    assert loan.disbursed_by == cashier

    with pytest.raises(Conflict):
        disburse_loan(loan_id=loan.pk, actor=cashier)


def test_denied_loan_is_never_paid(nurse, admin, cashier):
    loan = request_loan(staff=nurse, amount="500")
    review_loan(loan_id=loan.pk, action=ReviewAction.DENY, actor=admin, notes="over limit")
    with pytest.raises(Conflict):
        disburse_loan(loan_id=loan.pk, actor=cashier)
    with pytest.raises(Conflict):
        review_loan(loan_id=loan.pk, action=ReviewAction.APPROVE, actor=admin)


def test_amounts_must_be_positive(nurse, admin):
    with pytest.raises(ValidationFailed):
        request_loan(staff=nurse, amount="0")
    loan = request_loan(staff=nurse, amount="100")
    with pytest.raises(ValidationFailed):
        review_loan(loan_id=loan.pk, action=ReviewAction.APPROVE, actor=admin, approved_amount="-5")
    with pytest.raises(NotFound):
        review_loan(loan_id=loan.pk + 100, action=ReviewAction.DENY, actor=admin)


def test_loan_api(api, nurse, doctor, admin):
    r = api(nurse).post("/api/loans/", {"amount": "300.00"}, format="json")
    assert r.status_code == 201, r.data
    loan_id = r.data["id"]
    api(doctor).post("/api/loans/", {"amount": "900.00"}, format="json")

    assert [l["id"] for l in api(nurse).get("/api/loans/").data] == [loan_id]
    assert [l["id"] for l in api(nurse).get("/api/loans/mine/").data] == [loan_id]
    assert len(api(admin).get("/api/loans/").data) == 2

    assert api(nurse).post(f"/api/loans/{loan_id}/review/", {"action": "APPROVE"}, format="json").status_code == 403
    r = api(admin).post(f"/api/loans/{loan_id}/review/", {"action": "APPROVE"}, format="json")
    assert r.status_code == 200
    assert r.data["approved_amount"] == "300.00"
