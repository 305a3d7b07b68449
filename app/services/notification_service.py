"""
SMS notifications for reservations and the waitlist.

Messages are queued on the Celery worker; a failure to queue is logged and
never fails the request that triggered it.
"""
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from app.config import settings
from app.models.restaurant import Restaurant, StaffContact
from app.models.reservation import Reservation
from app.models.table import Table
from app.models.user import User
from app.models.waitlist import WaitlistEntry

logger = structlog.get_logger()


def reservation_confirmation_message(restaurant_name: str, reservation: Reservation) -> str:
    message = f"Your reservation at {restaurant_name} has been received! "
    message += f"{reservation.guest_count} guests on "
    message += f"{reservation.reservation_date.strftime('%A, %B %d')} at "
    message += f"{reservation.reservation_time.strftime('%I:%M %p')}. "
    message += f"Code: {reservation.code}."
    if reservation.deposit_amount_cents:
        message += f" A deposit of ${reservation.deposit_amount_cents / 100:.2f} is required to confirm."
    return message


def staff_new_reservation_message(reservation: Reservation, customer_name: Optional[str], table_number) -> str:
    message = f"New reservation! {customer_name or 'Guest'}, "
    message += f"{reservation.guest_count} guests, table {table_number}. "
    message += f"{reservation.reservation_date.strftime('%a %m/%d')} "
    message += f"{reservation.reservation_time.strftime('%I:%M %p')}"
    return message


def waitlist_ready_message(restaurant_name: str, entry: WaitlistEntry) -> str:
    return f"Hi {entry.name}, your table at {restaurant_name} is ready! Please come to the host stand."


def reminder_message(restaurant_name: str, reservation: Reservation) -> str:
    message = f"Reminder: Your reservation at {restaurant_name} is tomorrow! "
    message += f"{reservation.guest_count} guests at "
    message += f"{reservation.reservation_time.strftime('%I:%M %p')}. "
    message += "See you soon!"
    return message


def enqueue_sms(to: Optional[str], body: str, **context) -> bool:
    """Queue an SMS on the worker. Returns True when queued."""
    if not settings.notifications_enabled or not to:
        return False

    try:
        from app.jobs.tasks import send_sms

        send_sms.delay(to, body)
        return True
    except Exception as e:
        logger.error("Failed to queue SMS", to=to[-4:], error=str(e), **context)
        return False


async def notify_reservation_created(db: AsyncSession, reservation: Reservation) -> None:
    """Confirmation to the customer and a heads-up to staff contacts"""
    if not settings.notifications_enabled:
        return

    restaurant = await db.get(Restaurant, reservation.restaurant_id)
    customer = await db.get(User, reservation.customer_id)
    restaurant_name = restaurant.name if restaurant else "the restaurant"

    if customer is not None:
        enqueue_sms(
            customer.phone,
            reservation_confirmation_message(restaurant_name, reservation),
            reservation_id=str(reservation.id),
        )

    result = await db.execute(
        select(StaffContact).where(
            StaffContact.restaurant_id == reservation.restaurant_id,
            StaffContact.notify_on_reservation == True,
            StaffContact.is_active == True,
        )
    )
    staff_contacts = result.scalars().all()

    table = await db.get(Table, reservation.table_id)
    table_number = table.number if table is not None else "?"
    message = staff_new_reservation_message(
        reservation, customer.full_name if customer else None, table_number
    )
    for contact in staff_contacts:
        enqueue_sms(contact.phone, message, contact=contact.name)


async def notify_waitlist_ready(db: AsyncSession, entry: WaitlistEntry) -> None:
    if not settings.notifications_enabled:
        return

    restaurant = await db.get(Restaurant, entry.restaurant_id)
    restaurant_name = restaurant.name if restaurant else "the restaurant"
    enqueue_sms(entry.phone, waitlist_ready_message(restaurant_name, entry), entry_id=str(entry.id))
