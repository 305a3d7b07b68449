"""Background job tasks"""

from datetime import date, datetime, timedelta
from typing import Optional
import asyncio

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from twilio.base.exceptions import TwilioRestException
from twilio.rest import Client as TwilioClient
import structlog

from app.jobs.celery_app import celery_app
from app.config import settings

logger = structlog.get_logger()


def run_async(coro):
    """Helper to run async functions in sync context"""
    return asyncio.run(coro)


def twilio_client() -> TwilioClient:
    return TwilioClient(settings.twilio_account_sid, settings.twilio_auth_token)


def deliver_sms(to: str, body: str, client: Optional[TwilioClient] = None) -> bool:
    """Send one SMS through Twilio. Returns False when Twilio is not configured."""
    if not settings.sms_configured:
        logger.info("Twilio not configured, skipping SMS", to=to[-4:])
        return False

    client = client or twilio_client()
    message = client.messages.create(
        body=body,
        from_=settings.twilio_phone_number,
        to=to,
    )
    logger.info("SMS sent", to=to[-4:], sid=message.sid)
    return True


@celery_app.task(name="send_sms")
def send_sms(to: str, body: str):
    """Send an SMS queued by the API"""
    try:
        return deliver_sms(to, body)
    except TwilioRestException as e:
        logger.error("Failed to send SMS", to=to[-4:], error=str(e))
        return False


async def send_due_reminders(db: AsyncSession, target_date: date) -> int:
    """Remind customers of confirmed reservations on target_date.

    Each reservation is reminded once; ``reminder_sent_at`` is stamped only
    after Twilio accepted the message.
    """
    from app.models.reservation import Reservation, ReservationStatus
    from app.models.restaurant import Restaurant
    from app.models.user import User
    from app.services.notification_service import reminder_message

    result = await db.execute(
        select(Reservation).where(
            Reservation.reservation_date == target_date,
            Reservation.status == ReservationStatus.CONFIRMED.value,
            Reservation.reminder_sent_at.is_(None),
        )
    )
    reservations = result.scalars().all()
    if not reservations or not settings.sms_configured:
        return 0

    client = twilio_client()
    sent = 0

    for reservation in reservations:
        customer = await db.get(User, reservation.customer_id)
        if customer is None or not customer.phone:
            continue

        restaurant = await db.get(Restaurant, reservation.restaurant_id)
        try:
            deliver_sms(customer.phone, reminder_message(restaurant.name, reservation), client)
        except TwilioRestException as e:
            logger.error(
                "Failed to send reservation reminder",
                reservation_id=str(reservation.id),
                error=str(e),
            )
            continue

        reservation.reminder_sent_at = datetime.utcnow()
        await db.commit()
        sent += 1

        logger.info(
            "Sent reservation reminder",
            reservation_id=str(reservation.id),
        )

    return sent


@celery_app.task(name="send_reservation_reminders")
def send_reservation_reminders():
    """Send reminders for tomorrow's confirmed reservations"""
    logger.info("Sending reservation reminders")

    async def _send_reminders():
        from app.database import SessionLocal

        async with SessionLocal() as db:
            return await send_due_reminders(db, date.today() + timedelta(days=1))

    return run_async(_send_reminders())
