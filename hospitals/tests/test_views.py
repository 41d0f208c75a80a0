from datetime import timedelta

from django.test import TestCase
from django.urls import reverse
from django.utils import timezone

from blood.models import BloodBag, DonationRequest, Appointment
from communication.models import Notification
from hospitals.models import Hospital, HospitalMembership, BloodCampaign
from .helpers import make_user, make_hospital, make_campaign


class RegistrationTests(TestCase):
    def test_register_creates_pending_hospital_and_inactive_admin(self):
        superadmin = make_user("root", role="SUPER_ADMIN")
        user = make_user("founder", city="Douala")
        self.client.force_login(user)

        with self.captureOnCommitCallbacks() as callbacks:
            r = self.client.post(reverse("hospital_register"), {"name": "Bethesda", "address": "5 Rue"})
        self.assertFalse(Notification.objects.exists())
        for callback in callbacks:
            callback()
        self.assertRedirects(r, reverse("hospital_pending"))

        hospital = Hospital.objects.get(name="Bethesda")
        self.assertEqual(hospital.status, "PENDING")
        self.assertEqual(hospital.city, "Douala")
        m = HospitalMembership.objects.get(hospital=hospital)
        self.assertEqual(m.role, "ADMIN")
        self.assertFalse(m.is_active)
        self.assertTrue(Notification.objects.filter(user=superadmin).exists())

    def test_pending_member_has_no_portal(self):
        user = make_user("founder")
        hospital = make_hospital(status="PENDING")
        HospitalMembership.objects.create(hospital=hospital, user=user, role="ADMIN", is_active=False)
        self.client.force_login(user)

        self.assertRedirects(self.client.get(reverse("institutions_home")), reverse("hospital_pending"))
        self.assertRedirects(self.client.get(reverse("hospital_portal")), reverse("home"))


class PortalTestCase(TestCase):
    def setUp(self):
        self.admin = make_user("hadmin", role="ADMIN")
        self.hospital = make_hospital(admin=self.admin)
        self.client.force_login(self.admin)


class PortalAccessTests(PortalTestCase):
    def test_portal_renders(self):
        r = self.client.get(reverse("hospital_portal"))
        self.assertEqual(r.status_code, 200)
        self.assertEqual(r.context["hospital"], self.hospital)
        self.assertEqual(len(r.context["stock"]), 8)

    def test_staff_cannot_manage_campaigns(self):
        staff = make_user("nurse")
        HospitalMembership.objects.create(hospital=self.hospital, user=staff, role="STAFF", is_active=True)
        self.client.force_login(staff)
        self.assertEqual(self.client.get(reverse("hospital_campaign_list")).status_code, 200)
        self.assertRedirects(self.client.get(reverse("hospital_campaign_create")), reverse("home"))

    def test_anonymous_goes_to_login(self):
        self.client.logout()
        self.assertRedirects(self.client.get(reverse("hospital_portal")), reverse("login"))

    def test_add_member_by_email(self):
        user = make_user("newbie")
        r = self.client.post(reverse("hospital_members"), {"identifier": "NEWBIE@example.com", "role": "ADMIN"})
        self.assertRedirects(r, reverse("hospital_members"))
        m = HospitalMembership.objects.get(user=user)
        self.assertTrue(m.is_active)
        user.refresh_from_db()
        self.assertEqual(user.role, "ADMIN")


class CampaignManagementTests(PortalTestCase):
    def test_create_sets_hospital_and_resolved_status(self):
        now = timezone.localtime()
        r = self.client.post(reverse("hospital_campaign_create"), {
            "title": "Walk-in day",
            "address": "Main hall",
            "target_blood_types": ["A+"],
            "start_date": (now - timedelta(hours=1)).strftime("%Y-%m-%dT%H:%M"),
            "end_date": (now + timedelta(hours=5)).strftime("%Y-%m-%dT%H:%M"),
            "max_donors": 10,
        })
        self.assertRedirects(r, reverse("hospital_campaign_list"))
        camp = BloodCampaign.objects.get()
        self.assertEqual(camp.hospital, self.hospital)
        self.assertEqual(camp.created_by, self.admin)
        self.assertEqual(camp.status, "active")
        self.assertEqual(camp.contact_name, self.hospital.name)

    def test_cannot_edit_other_hospitals_campaign(self):
        other = make_campaign(make_hospital(name="Rival"))
        r = self.client.get(reverse("hospital_campaign_edit", args=[other.id]))
        self.assertEqual(r.status_code, 404)

    def test_delete_requires_post(self):
        camp = make_campaign(self.hospital)
        self.assertEqual(self.client.get(reverse("hospital_campaign_delete", args=[camp.id])).status_code, 405)
        self.client.post(reverse("hospital_campaign_delete", args=[camp.id]))
        self.assertFalse(BloodCampaign.objects.exists())


class StockViewTests(PortalTestCase):
    def test_add_bag_with_default_dates(self):
        r = self.client.post(reverse("hospital_bag_add"), {"blood_type": "AB+", "volume_ml": 450})
        self.assertRedirects(r, reverse("hospital_stock"))
        bag = BloodBag.objects.get()
        self.assertEqual(bag.hospital, self.hospital)
        self.assertEqual(bag.collection_date, timezone.localdate())
        self.assertEqual((bag.expiry_date - bag.collection_date).days, 42)

    def test_bulk_remove(self):
        for _ in range(3):
            BloodBag.objects.create(hospital=self.hospital, blood_type="O+")
        BloodBag.objects.create(hospital=self.hospital, blood_type="A-")

        self.client.post(reverse("hospital_bag_bulk_remove"), {"count_Opos": 2, "count_Aneg": 1})
        self.assertEqual(BloodBag.objects.filter(blood_type="O+").count(), 1)
        self.assertFalse(BloodBag.objects.filter(blood_type="A-").exists())

    def test_bulk_remove_more_than_available_removes_nothing(self):
        BloodBag.objects.create(hospital=self.hospital, blood_type="O+")
        self.client.post(reverse("hospital_bag_bulk_remove"), {"count_Opos": 2})
        self.assertEqual(BloodBag.objects.count(), 1)

    def test_stock_page(self):
        r = self.client.get(reverse("hospital_stock"))
        self.assertEqual(r.status_code, 200)
        self.assertIn("count_Bneg", r.context["bulk_form"].fields)


class RequestHandlingTests(PortalTestCase):
    def setUp(self):
        super().setUp()
        self.donor = make_user("donor")
        self.req = DonationRequest.objects.create(
            donor=self.donor, hospital=self.hospital, blood_type="O+",
            age=30, weight=70, eligibility_score=100, is_eligible=True,
        )

    def test_request_list_defaults_to_pending(self):
        r = self.client.get(reverse("hospital_request_list"))
        self.assertEqual(list(r.context["items"]), [self.req])

    def test_schedule(self):
        day = timezone.localdate() + timedelta(days=2)
        r = self.client.post(reverse("hospital_request_schedule", args=[self.req.id]), {
            "appointment_date": day.isoformat(),
            "appointment_time": "09:15",
            "duration_minutes": 30,
        })
        self.assertRedirects(r, reverse("hospital_appointment_list"))
        appt = Appointment.objects.get()
        self.assertEqual(appt.appointment_date, day)
        self.req.refresh_from_db()
        self.assertEqual(self.req.status, "approved")

    def test_schedule_in_the_past_is_refused(self):
        day = timezone.localdate() - timedelta(days=1)
        r = self.client.post(reverse("hospital_request_schedule", args=[self.req.id]), {
            "appointment_date": day.isoformat(),
            "appointment_time": "09:15",
            "duration_minutes": 30,
        })
        self.assertEqual(r.status_code, 200)
        self.assertIn("appointment_date", r.context["form"].errors)
        self.assertFalse(Appointment.objects.exists())

    def test_reject(self):
        self.client.post(reverse("hospital_request_reject", args=[self.req.id]), {"reason": "Low iron"})
        self.req.refresh_from_db()
        self.assertEqual(self.req.status, "rejected")
        self.assertEqual(self.req.rejection_reason, "Low iron")

    def test_appointment_update(self):
        appt = Appointment.objects.create(
            donation_request=self.req, donor=self.donor, hospital=self.hospital,
            appointment_date=timezone.localdate(), appointment_time="10:00",
        )
        self.client.post(reverse("hospital_appointment_update", args=[appt.id]), {"action": "complete"})
        appt.refresh_from_db()
        self.req.refresh_from_db()
        self.assertEqual(appt.status, "completed")
        self.assertEqual(self.req.status, "completed")

    def test_other_hospital_request_is_404(self):
        other = DonationRequest.objects.create(
            donor=self.donor, hospital=make_hospital(name="Rival"), blood_type="O+",
            age=30, weight=70, eligibility_score=100, is_eligible=True,
        )
        r = self.client.post(reverse("hospital_request_reject", args=[other.id]))
        self.assertEqual(r.status_code, 404)
