from django.db import models

class UserRole(models.TextChoices):
    ADMIN           = "ADMIN", "Admin"
    DOCTOR          = "DOCTOR", "Doctor"
    NURSE           = "NURSE", "Nurse"
    BILLING_OFFICER = "BILLING_OFFICER", "Billing Officer"
    LAB_TECHNICIAN  = "LAB_TECHNICIAN", "Lab Technician"
    RADIOLOGIST     = "RADIOLOGIST", "Radiologist"
    DENTIST         = "DENTIST", "Dentist"
    RECEPTIONIST    = "RECEPTIONIST", "Receptionist"

    @classmethod
    def clinician_roles(cls):
        return {cls.DOCTOR, cls.DENTIST}


class Capability(models.TextChoices):
    REGISTER_PATIENT       = "REGISTER_PATIENT", "Register patients"
    OPEN_VISIT             = "OPEN_VISIT", "Open visits"
    SCHEDULE_APPOINTMENT   = "SCHEDULE_APPOINTMENT", "Book and manage appointments"
    CANCEL_VISIT           = "CANCEL_VISIT", "Cancel visits"
    RECORD_VITALS          = "RECORD_VITALS", "Record vitals"
    ASSIGN_DOCTOR          = "ASSIGN_DOCTOR", "Assign doctors"
    ASSIGN_NURSE_SERVICE   = "ASSIGN_NURSE_SERVICE", "Assign nurse services"
    PERFORM_NURSE_SERVICE  = "PERFORM_NURSE_SERVICE", "Perform nurse services"
    CONSULT                = "CONSULT", "Run consultations"
    CREATE_ORDER           = "CREATE_ORDER", "Create orders"
    PROCESS_LAB            = "PROCESS_LAB", "Process lab orders"
    PROCESS_RADIOLOGY      = "PROCESS_RADIOLOGY", "Process radiology orders"
    PROCESS_DENTAL         = "PROCESS_DENTAL", "Process dental orders"
    COMPLETE_VISIT         = "COMPLETE_VISIT", "Complete visits"
    COLLECT_PAYMENT        = "COLLECT_PAYMENT", "Collect payments"
    MANAGE_CATALOG         = "MANAGE_CATALOG", "Manage service catalog and templates"
    REQUEST_ACCOUNT_CHANGE = "REQUEST_ACCOUNT_CHANGE", "Request patient account changes"
    REVIEW_ACCOUNT_REQUEST = "REVIEW_ACCOUNT_REQUEST", "Approve or reject account requests"
    REQUEST_LOAN           = "REQUEST_LOAN", "Request staff loans"
    REVIEW_LOAN            = "REVIEW_LOAN", "Approve or deny loans"
    DISBURSE_LOAN          = "DISBURSE_LOAN", "Disburse loans"
    MANAGE_STAFF           = "MANAGE_STAFF", "Manage staff"
    VIEW_AUDIT             = "VIEW_AUDIT", "View audit log"
