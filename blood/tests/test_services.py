from datetime import date, datetime, time, timedelta

from django.test import TestCase
from django.utils import timezone

from blood.eligibility import EligibilityAnswers
from blood.models import DonationRequest, Appointment
from blood.services import (
    DonationFlowError,
    cancel_appointment_by_donor,
    reject_request,
    schedule_appointment,
    submit_donation_request,
    update_appointment_status,
)
from communication.models import Notification
from hospitals.tests.helpers import make_user, make_hospital, make_campaign

HEALTHY = EligibilityAnswers(age=30, weight=70)


class SubmitDonationRequestTests(TestCase):
    def setUp(self):
        self.admin = make_user("hadmin", role="ADMIN")
        self.hospital = make_hospital(admin=self.admin)
        self.donor = make_user("donor")

    def test_eligible_donor_gets_pending_request_with_snapshot(self):
        answers = EligibilityAnswers(age=30, weight=45, has_traveled=False)
        with self.captureOnCommitCallbacks(execute=True):
            result, req = submit_donation_request(self.donor, self.hospital, answers, "O+")

        self.assertTrue(result.eligible)
        req.refresh_from_db()
        self.assertEqual(req.status, "pending")
        self.assertEqual(req.donation_type, "direct")
        self.assertEqual(req.eligibility_score, 70)
        self.assertTrue(req.is_eligible)
        self.assertEqual(req.weight, 45)
        self.assertEqual(req.eligibility_result.score, result.score)
        self.assertTrue(Notification.objects.filter(user=self.admin, category="DONATION").exists())

    def test_stored_snapshot_rebuilds_the_result(self):
        answers = EligibilityAnswers(age=30, weight=45, takes_medication=False)
        result, req = submit_donation_request(self.donor, self.hospital, answers, "O+")
        req.refresh_from_db()
        self.assertEqual(req.eligibility_reasons, ["Weight under 50 kg"])
        self.assertEqual(req.eligibility_result, result)

    def test_ineligible_donor_is_not_persisted(self):
        with self.captureOnCommitCallbacks(execute=True):
            result, req = submit_donation_request(
                self.donor, self.hospital, EligibilityAnswers(age=17, weight=70), "O+",
            )
        self.assertFalse(result.eligible)
        self.assertIsNone(req)
        self.assertFalse(DonationRequest.objects.exists())
        self.assertFalse(Notification.objects.exists())

    def test_campaign_request_uses_campaign_hospital(self):
        camp = make_campaign(self.hospital)
        other = make_hospital(name="Other")
        _, req = submit_donation_request(self.donor, other, HEALTHY, "A+", campaign=camp)
        self.assertEqual(req.hospital, self.hospital)
        self.assertEqual(req.campaign, camp)
        self.assertEqual(req.donation_type, "campaign")

    def test_completed_campaign_refuses_requests(self):
        now = timezone.now()
        camp = make_campaign(self.hospital, start=now - timedelta(days=3), end=now - timedelta(days=1))
        with self.assertRaises(DonationFlowError):
            submit_donation_request(self.donor, self.hospital, HEALTHY, "A+", campaign=camp)

    def test_full_campaign_refuses_requests(self):
        camp = make_campaign(self.hospital, max_donors=1, current_donors=1)
        with self.assertRaises(DonationFlowError):
            submit_donation_request(self.donor, self.hospital, HEALTHY, "A+", campaign=camp)

    def test_snapshot_is_not_recomputed(self):
        last = timezone.localdate() - timedelta(days=100)
        _, req = submit_donation_request(
            self.donor, self.hospital, EligibilityAnswers(age=30, weight=70, last_donation_date=last), "O+",
        )
        req.refresh_from_db()
        self.assertEqual(req.last_donation_date, last)
        self.assertEqual(req.eligibility_score, 100)


class AppointmentFlowTests(TestCase):
    def setUp(self):
        self.admin = make_user("hadmin", role="ADMIN")
        self.hospital = make_hospital(admin=self.admin)
        self.donor = make_user("donor")
        self.camp = make_campaign(self.hospital, max_donors=1)
        _, self.req = submit_donation_request(self.donor, self.hospital, HEALTHY, "O+", campaign=self.camp)
        self.when = timezone.localdate() + timedelta(days=3)

    def _schedule(self, req=None):
        return schedule_appointment(req or self.req, self.when, time(10, 30))

    def test_schedule_approves_request_and_takes_a_spot(self):
        with self.captureOnCommitCallbacks(execute=True):
            appt = self._schedule()

        self.req.refresh_from_db()
        self.camp.refresh_from_db()
        self.assertEqual(self.req.status, "approved")
        self.assertEqual(self.req.scheduled_date, appt.starts_at)
        self.assertEqual(self.camp.current_donors, 1)
        self.assertEqual(appt.location_address, self.hospital.address)
        self.assertTrue(Notification.objects.filter(user=self.donor, category="APPOINTMENT").exists())

    def test_schedule_twice_is_refused(self):
        self._schedule()
        with self.assertRaises(DonationFlowError):
            self._schedule()

    def test_full_campaign_rolls_back(self):
        other = make_user("other")
        _, second = submit_donation_request(other, self.hospital, HEALTHY, "O+")
        second.campaign = self.camp
        second.save()
        self._schedule()

        with self.assertRaises(DonationFlowError):
            self._schedule(second)
        second.refresh_from_db()
        self.assertEqual(second.status, "pending")
        self.assertFalse(Appointment.objects.filter(donation_request=second).exists())

    def test_reject_only_pending(self):
        with self.captureOnCommitCallbacks(execute=True):
            req = reject_request(self.req, "  ")
        self.assertEqual(req.status, "rejected")
        self.assertEqual(req.rejection_reason, "Rejected by hospital.")
        self.assertTrue(Notification.objects.filter(user=self.donor, level="DANGER").exists())
        with self.assertRaises(DonationFlowError):
            reject_request(self.req, "again")

    def test_complete_marks_request_completed(self):
        appt = self._schedule()
        update_appointment_status(appt, "confirm")
        update_appointment_status(appt, "complete")
        self.req.refresh_from_db()
        appt.refresh_from_db()
        self.assertEqual(appt.status, "completed")
        self.assertEqual(self.req.status, "completed")

    def test_closed_appointment_cannot_move(self):
        appt = self._schedule()
        update_appointment_status(appt, "no_show")
        with self.assertRaises(DonationFlowError):
            update_appointment_status(appt, "complete")

    def test_unknown_action(self):
        appt = self._schedule()
        with self.assertRaises(DonationFlowError):
            update_appointment_status(appt, "teleport")

    def test_cancel_then_reschedule(self):
        appt = self._schedule()
        update_appointment_status(appt, "cancel")

        self.req.refresh_from_db()
        self.assertEqual(self.req.status, "pending")
        self.assertIsNone(self.req.scheduled_date)

        again = schedule_appointment(self.req, self.when + timedelta(days=1), time(14, 0))
        self.req.refresh_from_db()
        self.camp.refresh_from_db()
        self.assertEqual(self.req.status, "approved")
        self.assertEqual(self.camp.current_donors, 1)
        self.assertEqual(
            list(self.req.appointments.order_by("id").values_list("status", flat=True)),
            ["cancelled", "scheduled"],
        )
        self.assertNotEqual(again.pk, appt.pk)

    def test_no_show_returns_request_to_queue(self):
        appt = self._schedule()
        update_appointment_status(appt, "no_show")
        self.req.refresh_from_db()
        self.camp.refresh_from_db()
        self.assertEqual(self.req.status, "pending")
        self.assertEqual(self.camp.current_donors, 0)
        self._schedule()

    def test_cancel_frees_campaign_spot(self):
        appt = self._schedule()
        update_appointment_status(appt, "cancel")
        self.camp.refresh_from_db()
        self.assertEqual(self.camp.current_donors, 0)

    def test_donor_cancel(self):
        appt = self._schedule()
        with self.captureOnCommitCallbacks(execute=True):
            cancel_appointment_by_donor(appt, self.donor)
        appt.refresh_from_db()
        self.assertEqual(appt.status, "cancelled")
        self.assertTrue(Notification.objects.filter(user=self.admin, title="Appointment cancelled by donor").exists())

    def test_donor_cannot_cancel_someone_elses_appointment(self):
        appt = self._schedule()
        with self.assertRaises(DonationFlowError):
            cancel_appointment_by_donor(appt, make_user("intruder"))

    def test_donor_cannot_cancel_past_appointment(self):
        appt = self._schedule()
        later = appt.starts_at + timedelta(minutes=1)
        with self.assertRaises(DonationFlowError):
            cancel_appointment_by_donor(appt, self.donor, now=later)


class AppointmentModelTests(TestCase):
    def test_starts_at_is_aware(self):
        appt = Appointment(appointment_date=date(2024, 6, 1), appointment_time=time(9, 0))
        self.assertTrue(timezone.is_aware(appt.starts_at))
        self.assertEqual(timezone.localtime(appt.starts_at).replace(tzinfo=None), datetime(2024, 6, 1, 9, 0))
