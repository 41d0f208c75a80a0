from datetime import date, datetime, timedelta, timezone as dt_timezone

from django.core.management import call_command
from django.test import SimpleTestCase, TestCase, override_settings

from blood.inventory import (
    _month_start,
    available_counts,
    expire_bags,
    hospital_stats,
    remove_available_bags,
    stock_level,
    stock_summary,
)
from blood.models import BloodBag, DonationRequest
from hospitals.tests.helpers import make_user, make_hospital, make_campaign

TODAY = date(2024, 6, 15)


def add_bags(hospital, blood_type, n, expiry=None, status="available"):
    bags = []
    for i in range(n):
        bags.append(BloodBag.objects.create(
            hospital=hospital,
            blood_type=blood_type,
            collection_date=TODAY - timedelta(days=1),
            expiry_date=expiry or TODAY + timedelta(days=10 + i),
            status=status,
        ))
    return bags


class StockLevelTests(SimpleTestCase):
    def test_thresholds(self):
        self.assertEqual(stock_level(0), "critical")
        self.assertEqual(stock_level(1), "low")
        self.assertEqual(stock_level(2), "low")
        self.assertEqual(stock_level(3), "medium")
        self.assertEqual(stock_level(5), "medium")
        self.assertEqual(stock_level(6), "high")

    def test_month_start_wraps_years(self):
        self.assertEqual(_month_start(date(2024, 2, 10), 3), date(2023, 11, 1))
        self.assertEqual(_month_start(date(2024, 12, 31), -1), date(2025, 1, 1))
        self.assertEqual(_month_start(date(2024, 6, 15), 0), date(2024, 6, 1))


class InventoryTests(TestCase):
    def setUp(self):
        self.hospital = make_hospital()

    def test_serial_numbers_are_generated_and_unique(self):
        a, b = add_bags(self.hospital, "O+", 2)
        self.assertTrue(a.serial_number.startswith("O+-"))
        self.assertNotEqual(a.serial_number, b.serial_number)

    def test_available_counts_ignore_other_statuses(self):
        add_bags(self.hospital, "A+", 3)
        add_bags(self.hospital, "A+", 2, status="used")
        add_bags(make_hospital(name="Elsewhere"), "A+", 4)
        counts = available_counts(self.hospital)
        self.assertEqual(counts["A+"], 3)
        self.assertEqual(counts["O-"], 0)
        self.assertEqual(len(counts), 8)

    def test_stock_summary(self):
        add_bags(self.hospital, "B+", 1)
        add_bags(self.hospital, "O+", 3)
        rows = {r["blood_type"]: r for r in stock_summary(self.hospital)}
        self.assertEqual(rows["O+"]["percentage"], 75)
        self.assertEqual(rows["O+"]["level"], "medium")
        self.assertEqual(rows["B+"]["level"], "low")
        self.assertEqual(rows["AB-"]["level"], "critical")

    def test_remove_soonest_expiry_first(self):
        bags = add_bags(self.hospital, "O-", 3)
        removed = remove_available_bags(self.hospital, "O-", 2)
        self.assertEqual(removed, 2)
        self.assertEqual(list(BloodBag.objects.values_list("pk", flat=True)), [bags[2].pk])

    def test_remove_more_than_available(self):
        add_bags(self.hospital, "O-", 1)
        self.assertEqual(remove_available_bags(self.hospital, "O-", 5), 1)
        self.assertEqual(remove_available_bags(self.hospital, "O-", 0), 0)

    def test_expire_bags(self):
        add_bags(self.hospital, "A-", 2, expiry=TODAY - timedelta(days=1))
        add_bags(self.hospital, "A-", 1, expiry=TODAY)
        self.assertEqual(expire_bags(today=TODAY), 2)
        self.assertEqual(BloodBag.objects.filter(status="expired").count(), 2)
        self.assertEqual(expire_bags(today=TODAY), 0)

    def test_expire_command(self):
        add_bags(self.hospital, "A-", 1, expiry=date(2000, 1, 1))
        call_command("expire_blood_bags", verbosity=0)
        self.assertEqual(BloodBag.objects.get().status, "expired")


@override_settings(LD_CRITICAL_STOCK_THRESHOLD=2)
class HospitalStatsTests(TestCase):
    def test_stats(self):
        now = datetime(2024, 6, 15, 12, 0, tzinfo=dt_timezone.utc)
        hospital = make_hospital()
        donor = make_user("donor")
        add_bags(hospital, "O+", 3)
        add_bags(hospital, "A+", 1, expiry=TODAY - timedelta(days=2))
        make_campaign(hospital, start=now - timedelta(hours=1), end=now + timedelta(hours=1))
        make_campaign(hospital, start=now + timedelta(days=1), end=now + timedelta(days=2))

        for status, created in [
            ("pending", now),
            ("completed", now - timedelta(days=40)),
            ("completed", now - timedelta(days=1)),
        ]:
            DonationRequest.objects.create(
                donor=donor, hospital=hospital, blood_type="O+",
                age=30, weight=70, eligibility_score=100, is_eligible=True,
                status=status, created_at=created,
            )

        stats = hospital_stats(hospital, now=now)

        self.assertEqual(stats["total_bags"], 4)
        self.assertEqual(stats["available_bags"], 4)
        self.assertEqual(stats["expired_bags"], 1)
        self.assertNotIn("O+", stats["critical_types"])
        self.assertIn("A+", stats["critical_types"])
        self.assertEqual(stats["active_campaigns"], 1)
        self.assertEqual(stats["pending_donations"], 1)
        self.assertEqual(stats["completed_donations"], 2)

        monthly = stats["monthly_donations"]
        self.assertEqual(len(monthly), 6)
        self.assertEqual(monthly[-1], {"month": "Jun 2024", "count": 1})
        self.assertEqual(monthly[-2], {"month": "May 2024", "count": 1})
        self.assertEqual(monthly[0]["month"], "Jan 2024")
