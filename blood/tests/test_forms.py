from datetime import datetime, timezone as dt_timezone
from unittest import mock

from django.test import TestCase

from blood.forms import AppointmentForm

NOW = datetime(2030, 5, 1, 15, 0, tzinfo=dt_timezone.utc)


def appointment_data(**overrides):
    data = {"appointment_date": "2030-05-01", "appointment_time": "15:30", "duration_minutes": 30}
    data.update(overrides)
    return data


@mock.patch("django.utils.timezone.now", return_value=NOW)
class AppointmentFormTests(TestCase):
    def test_later_today_is_accepted(self, _now):
        form = AppointmentForm(appointment_data())
        self.assertTrue(form.is_valid(), form.errors)

    def test_current_minute_is_accepted(self, _now):
        form = AppointmentForm(appointment_data(appointment_time="15:00"))
        self.assertTrue(form.is_valid(), form.errors)

    def test_earlier_today_is_refused(self, _now):
        form = AppointmentForm(appointment_data(appointment_time="14:30"))
        self.assertFalse(form.is_valid())
        self.assertIn("appointment_time", form.errors)

    def test_early_time_on_a_later_day_is_accepted(self, _now):
        form = AppointmentForm(appointment_data(appointment_date="2030-05-02", appointment_time="08:00"))
        self.assertTrue(form.is_valid(), form.errors)

    def test_past_day_is_refused(self, _now):
        form = AppointmentForm(appointment_data(appointment_date="2030-04-30"))
        self.assertFalse(form.is_valid())
        self.assertIn("appointment_date", form.errors)
