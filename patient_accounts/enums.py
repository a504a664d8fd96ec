from django.db import models

class AccountType(models.TextChoices):
    ADVANCE = "ADVANCE","Advance (prepaid)"
    CREDIT  = "CREDIT","Credit"

class AccountStatus(models.TextChoices):
    VERIFIED  = "VERIFIED","Verified"
    SUSPENDED = "SUSPENDED","Suspended"

class RequestType(models.TextChoices):
    CREATE_ACCOUNT = "CREATE_ACCOUNT","Create account"
    ADD_DEPOSIT    = "ADD_DEPOSIT","Add deposit"
    ADD_CREDIT     = "ADD_CREDIT","Add credit"
    RETURN_MONEY   = "RETURN_MONEY","Debt repayment"

class RequestStatus(models.TextChoices):
    PENDING  = "PENDING","Pending"
    APPROVED = "APPROVED","Approved"
    REJECTED = "REJECTED","Rejected"

class TransactionType(models.TextChoices):
    OPENING        = "OPENING","Opening balance"
    DEPOSIT        = "DEPOSIT","Deposit"
    CREDIT_ADDED   = "CREDIT_ADDED","Credit added"
    DEDUCTION      = "DEDUCTION","Deduction"
    DEBT_REPAYMENT = "DEBT_REPAYMENT","Debt repayment"
