import datetime

import pytest
from django.utils import timezone

from accounts.enums import UserRole
from appointments.enums import ApptStatus
from appointments.models import Appointment
from appointments.services import book_appointment, delete_appointment, send_to_doctor, update_appointment
from common.errors import Conflict, PreconditionFailed, ValidationFailed
from patients.services.registration import activate_card, register_patient
from visits.enums import VisitStatus
from visits.models import Visit
from visits.services.lifecycle import cancel_visit, open_visit

pytestmark = pytest.mark.django_db


@pytest.fixture
def tomorrow_9am():
    day = timezone.localdate() + datetime.timedelta(days=1)
    return timezone.make_aware(datetime.datetime.combine(day, datetime.time(9, 0)))


@pytest.fixture
def carded_patient(patient):
    activate_card(patient_id=patient.pk)
    patient.refresh_from_db()
    return patient


@pytest.fixture
def booking(carded_patient, doctor, receptionist, tomorrow_9am):
    return book_appointment(patient=carded_patient, doctor_id=doctor.pk, start_at=tomorrow_9am,
                            actor=receptionist, reason="Follow-up on blood pressure")


def test_booking_needs_an_active_card(patient, doctor, receptionist, tomorrow_9am):
    with pytest.raises(PreconditionFailed) as exc:
        book_appointment(patient=patient, doctor_id=doctor.pk, start_at=tomorrow_9am, actor=receptionist)
    assert exc.value.errors["card_status"] == "INACTIVE"


def test_booking_needs_a_clinician(carded_patient, nurse, receptionist, tomorrow_9am):
    with pytest.raises(ValidationFailed):
        book_appointment(patient=carded_patient, doctor_id=nurse.pk, start_at=tomorrow_9am, actor=receptionist)


def test_slots_are_spaced(booking, carded_patient, doctor, make_user, receptionist, tomorrow_9am):
    assert booking.status == ApptStatus.SCHEDULED
    with pytest.raises(Conflict):
        book_appointment(patient=carded_patient, doctor_id=doctor.pk, actor=receptionist,
                         start_at=tomorrow_9am + datetime.timedelta(minutes=20))

    later = book_appointment(patient=carded_patient, doctor_id=doctor.pk, actor=receptionist,
                             start_at=tomorrow_9am + datetime.timedelta(minutes=25))
    assert later.pk != booking.pk
    # another doctor's diary is separate
    book_appointment(patient=carded_patient, doctor_id=make_user(UserRole.DOCTOR).pk, start_at=tomorrow_9am,
                     actor=receptionist)

    # a cancelled booking frees its slot
    update_appointment(appointment_id=booking.pk, actor=receptionist, status=ApptStatus.CANCELLED)
    book_appointment(patient=carded_patient, doctor_id=doctor.pk, actor=receptionist,
                     start_at=tomorrow_9am + datetime.timedelta(minutes=5))


def test_manual_status_moves(booking, receptionist, tomorrow_9am):
    with pytest.raises(ValidationFailed):
        update_appointment(appointment_id=booking.pk, actor=receptionist, status=ApptStatus.COMPLETED)

    moved = update_appointment(appointment_id=booking.pk, actor=receptionist, status=ApptStatus.ARRIVED,
                               start_at=tomorrow_9am + datetime.timedelta(hours=1), notes="came early")
    assert moved.status == ApptStatus.ARRIVED
    assert moved.notes == "came early"

    update_appointment(appointment_id=booking.pk, actor=receptionist, status=ApptStatus.NO_SHOW)
    with pytest.raises(Conflict):
        update_appointment(appointment_id=booking.pk, actor=receptionist, notes="too late")


def test_send_to_doctor_opens_visit(booking, carded_patient, receptionist, doctor, admin):
    appt, visit = send_to_doctor(appointment_id=booking.pk, actor=receptionist)
    assert appt.status == ApptStatus.IN_PROGRESS
    assert appt.visit_id == visit.pk
    assert visit.status == VisitStatus.WAITING_FOR_TRIAGE
    assert doctor.fullname in visit.notes

    with pytest.raises(Conflict):
        send_to_doctor(appointment_id=booking.pk, actor=receptionist)
    with pytest.raises(Conflict):
        delete_appointment(appointment_id=booking.pk, actor=receptionist)

    # the appointment follows its visit
    cancel_visit(visit_id=visit.pk, actor=admin, reason="patient left")
    assert Appointment.objects.get(pk=booking.pk).status == ApptStatus.CANCELLED


def test_send_to_doctor_respects_active_visit(booking, carded_patient, receptionist):
    open_visit(patient=carded_patient, actor=receptionist)
    with pytest.raises(Conflict):
        send_to_doctor(appointment_id=booking.pk, actor=receptionist)
    assert Appointment.objects.get(pk=booking.pk).status == ApptStatus.SCHEDULED
    assert Visit.objects.filter(patient=carded_patient).count() == 1


def test_completed_visit_completes_appointment(booking, receptionist, nurse, doctor, cashier, catalog):
    from assignments.services import assign_doctor, start_consultation
    from billing.services.payments import pay_billing
    from visits.services.lifecycle import complete_visit
    from vitals.services import record_triage_vitals

    _, visit = send_to_doctor(appointment_id=booking.pk, actor=receptionist)
    record_triage_vitals(visit_id=visit.pk, data={"systolic": 150, "diastolic": 92}, actor=nurse)
    a = assign_doctor(visit_id=visit.pk, doctor_id=doctor.pk, actor=nurse)
    pay_billing(billing_id=a.billing_id, method="CASH", actor=cashier)
    start_consultation(visit_id=visit.pk, actor=doctor)
    complete_visit(visit_id=visit.pk, actor=doctor, diagnosis="Stage 1 hypertension")

    assert Appointment.objects.get(pk=booking.pk).status == ApptStatus.COMPLETED


def test_appointment_api(api, carded_patient, receptionist, doctor, nurse, make_user, tomorrow_9am):
    payload = {"patient": carded_patient.pk, "doctor": doctor.pk, "start_at": tomorrow_9am.isoformat(),
               "appt_type": "FOLLOW_UP"}
    assert api(nurse).post("/api/appointments/", payload, format="json").status_code == 403

    r = api(receptionist).post("/api/appointments/", payload, format="json")
    assert r.status_code == 201, r.data
    appt_id = r.data["id"]
    assert r.data["doctor_name"] == doctor.fullname
    assert r.data["visit_uid"] is None

    r = api(receptionist).post("/api/appointments/", payload, format="json")
    assert r.status_code == 409
    assert r.data["kind"] == "conflict"

    # a doctor only sees their own diary
    other = make_user(UserRole.DOCTOR)
    assert [a["id"] for a in api(doctor).get("/api/appointments/").data] == [appt_id]
    assert api(other).get("/api/appointments/").data == []
    day = tomorrow_9am.date().isoformat()
    assert len(api(receptionist).get("/api/appointments/", {"doctor": doctor.pk, "date": day}).data) == 1
    assert api(receptionist).get("/api/appointments/", {"date": "next week"}).status_code == 400

    r = api(receptionist).patch(f"/api/appointments/{appt_id}/", {"status": "ARRIVED"}, format="json")
    assert r.status_code == 200, r.data
    assert r.data["status"] == ApptStatus.ARRIVED

    r = api(receptionist).post(f"/api/appointments/{appt_id}/send-to-doctor/")
    assert r.status_code == 201, r.data
    assert r.data["visit"]["status"] == VisitStatus.WAITING_FOR_TRIAGE
    assert r.data["appointment"]["visit_uid"] == r.data["visit"]["visit_uid"]


def test_delete_unsent_appointment(api, booking, receptionist):
    assert api(receptionist).delete(f"/api/appointments/{booking.pk}/").status_code == 204
    assert not Appointment.objects.filter(pk=booking.pk).exists()


def test_emergency_patient_cannot_book(receptionist, doctor, tomorrow_9am):
    patient, _, _ = register_patient(data={"first_name": "Unknown"}, actor=receptionist, emergency=True)
    with pytest.raises(PreconditionFailed):
        book_appointment(patient=patient, doctor_id=doctor.pk, start_at=tomorrow_9am, actor=receptionist)
