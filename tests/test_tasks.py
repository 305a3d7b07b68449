"""Tests for Celery tasks with Twilio mocked"""

import pytest
from datetime import date, time, timedelta
from unittest.mock import MagicMock

from twilio.base.exceptions import TwilioRestException

from app.config import settings
from app.jobs import tasks
from app.models.reservation import ReservationStatus
from app.services import reservation_service


@pytest.fixture
def twilio_configured(monkeypatch):
    monkeypatch.setattr(settings, "twilio_account_sid", "AC00000000000000000000000000000000")
    monkeypatch.setattr(settings, "twilio_auth_token", "token")
    monkeypatch.setattr(settings, "twilio_phone_number", "+15550000000")


@pytest.fixture
def twilio_mock(monkeypatch):
    client = MagicMock()
    client.messages.create.return_value = MagicMock(sid="SM123")
    monkeypatch.setattr(tasks, "TwilioClient", MagicMock(return_value=client))
    return client


def test_send_sms_skipped_without_twilio(twilio_mock):
    assert tasks.send_sms("+15551112222", "Hello") is False
    twilio_mock.messages.create.assert_not_called()


def test_send_sms(twilio_configured, twilio_mock):
    assert tasks.send_sms("+15551112222", "Hello") is True
    twilio_mock.messages.create.assert_called_once_with(
        body="Hello",
        from_="+15550000000",
        to="+15551112222",
    )


def test_send_sms_twilio_error(twilio_configured, twilio_mock):
    twilio_mock.messages.create.side_effect = TwilioRestException(400, "/Messages", "Invalid number")
    assert tasks.send_sms("+1555", "Hello") is False


async def confirmed_for_tomorrow(db, restaurant, table, customer, staff, at_time=time(19, 0)):
    reservation = await reservation_service.create_reservation(
        db,
        customer,
        restaurant_id=restaurant.id,
        table_id=table.id,
        reservation_date=date.today() + timedelta(days=1),
        reservation_time=at_time,
        guest_count=2,
    )
    return await reservation_service.update_status(db, reservation.id, ReservationStatus.CONFIRMED, staff)


@pytest.mark.asyncio
async def test_reminders_sent_once(
    test_db, test_restaurant, test_tables, test_customer, test_staff, twilio_configured, twilio_mock
):
    reservation = await confirmed_for_tomorrow(test_db, test_restaurant, test_tables[0], test_customer, test_staff)

    sent = await tasks.send_due_reminders(test_db, date.today() + timedelta(days=1))
    assert sent == 1
    twilio_mock.messages.create.assert_called_once()
    assert twilio_mock.messages.create.call_args.kwargs["to"] == test_customer.phone
    assert "Test Restaurant" in twilio_mock.messages.create.call_args.kwargs["body"]

    await test_db.refresh(reservation)
    assert reservation.reminder_sent_at is not None

    assert await tasks.send_due_reminders(test_db, date.today() + timedelta(days=1)) == 0


@pytest.mark.asyncio
async def test_reminders_skip_pending(
    test_db, test_restaurant, test_tables, test_customer, twilio_configured, twilio_mock
):
    await reservation_service.create_reservation(
        test_db,
        test_customer,
        restaurant_id=test_restaurant.id,
        table_id=test_tables[0].id,
        reservation_date=date.today() + timedelta(days=1),
        reservation_time=time(13, 0),
        guest_count=2,
    )

    assert await tasks.send_due_reminders(test_db, date.today() + timedelta(days=1)) == 0
    twilio_mock.messages.create.assert_not_called()


@pytest.mark.asyncio
async def test_reminders_not_stamped_without_twilio(
    test_db, test_restaurant, test_tables, test_customer, test_staff, twilio_mock
):
    reservation = await confirmed_for_tomorrow(test_db, test_restaurant, test_tables[0], test_customer, test_staff)

    assert await tasks.send_due_reminders(test_db, date.today() + timedelta(days=1)) == 0
    await test_db.refresh(reservation)
    assert reservation.reminder_sent_at is None


def test_beat_schedule_registers_reminders():
    from app.jobs.celery_app import celery_app

    schedule = celery_app.conf.beat_schedule["send-reservation-reminders"]
    assert schedule["task"] == "send_reservation_reminders"
    assert schedule["schedule"] == 3600.0
