"""
Periodic member and admin notifications.

Each check is safe to run more than once a day: a member reminder is only
sent if the same title has not already been sent to that member today.
"""
import threading
from datetime import date, datetime, time, timedelta

from loguru import logger
from sqlalchemy import extract
from smart_library import db
from smart_library.models.booking import Booking, BookingStatus, AdvanceBooking, AdvanceBookingStatus
from smart_library.models.notification import Notification
from smart_library.models.user import User
from smart_library.services.bookings import release_seat
from smart_library.services.notifications import send_notification, send_admin_notification

EXPIRY_REMINDER_DAYS = range(1, 16)
ADVANCE_REMINDER_DAYS = (1, 3, 7, 15)


def _already_sent_today(user_id, title, today):
    start = datetime.combine(today, time.min)
    return db.session.query(Notification.id).filter(
        Notification.user_id == user_id,
        Notification.title == title,
        Notification.created_at >= start
    ).first() is not None


def _plural(days):
    return f"{days} Day{'s' if days > 1 else ''}"


def check_birthday_notifications(today=None):
    today = today or date.today()
    users = User.query.filter(
        extract('month', User.dob) == today.month,
        extract('day', User.dob) == today.day,
        User.is_blocked.is_(False)
    ).all()

    sent = 0
    title = 'Happy Birthday!'
    for user in users:
        if _already_sent_today(user.id, title, today):
            continue
        send_notification(user.id, title,
                          'Wishing you a wonderful birthday! Enjoy your special day at Smart Library.',
                          type='general')
        send_admin_notification('Member Birthday Today', f"Today is {user.name}'s birthday ({user.email})",
                                type='general', related_id=user.id)
        sent += 1

    if sent:
        logger.info('Sent {} birthday notifications', sent)
    return sent


def expiry_urgency(days_left):
    """(label, priority, notify_admin) for a plan ending in days_left days"""
    if 1 <= days_left <= 3:
        return 'URGENT', 'high', True
    if 4 <= days_left <= 7:
        return 'HIGH', 'high', True
    return 'MEDIUM', 'medium', False


def check_expiry_notifications(today=None):
    today = today or date.today()
    bookings = Booking.query.filter(
        Booking.status == BookingStatus.ACTIVE,
        Booking.end_date >= today + timedelta(days=min(EXPIRY_REMINDER_DAYS)),
        Booking.end_date <= today + timedelta(days=max(EXPIRY_REMINDER_DAYS))
    ).all()

    sent = 0
    for booking in bookings:
        days_left = (booking.end_date - today).days
        urgency, priority, notify_admin = expiry_urgency(days_left)
        title = f'Plan Expiring in {_plural(days_left)}'
        if _already_sent_today(booking.user_id, title, today):
            continue

        expires_on = booking.end_date.strftime('%d/%m/%Y')
        send_notification(
            booking.user_id, title,
            f'Your {booking.plan.name} for Seat {booking.seat.seat_number} will expire on {expires_on}. '
            f'Renew now to avoid interruption!',
            type='reminder', priority=priority
        )
        if notify_admin:
            send_admin_notification(
                f'{urgency}: Plan Expiring in {_plural(days_left)}',
                f'{booking.user.name} ({booking.user.email}) - {booking.plan.name}, '
                f'Seat {booking.seat.seat_number} expires on {expires_on}',
                type='plan', related_id=booking.id
            )
        sent += 1

    if sent:
        logger.info('Sent {} expiry reminder notifications', sent)
    return sent


def check_advance_booking_reminders(today=None):
    today = today or date.today()
    targets = [today + timedelta(days=days) for days in ADVANCE_REMINDER_DAYS]
    bookings = AdvanceBooking.query.filter(
        AdvanceBooking.booking_status == AdvanceBookingStatus.SCHEDULED,
        AdvanceBooking.start_date.in_(targets)
    ).all()

    sent = 0
    for booking in bookings:
        days = (booking.start_date - today).days
        title = f'Advance Booking Reminder ({_plural(days)})'
        if _already_sent_today(booking.user_id, title, today):
            continue

        starts_on = booking.start_date.strftime('%d/%m/%Y')
        send_notification(
            booking.user_id, title,
            f'Your advance booking for {booking.plan.name} - Seat {booking.seat.seat_number} '
            f'starts in {days} day{"s" if days > 1 else ""} ({starts_on}). Please be ready!',
            type='reminder'
        )
        send_admin_notification(
            f'Advance Booking in {_plural(days)}',
            f'{booking.user.name} ({booking.user.email}) has an advance booking for {booking.plan.name} '
            f'- Seat {booking.seat.seat_number} on {starts_on}',
            type='booking', related_id=booking.id
        )
        sent += 1

    if sent:
        logger.info('Sent {} advance booking reminders', sent)
    return sent


def check_expired_bookings(today=None):
    """Expire active bookings whose end date has passed and free their seats"""
    today = today or date.today()
    bookings = Booking.query.filter(
        Booking.status == BookingStatus.ACTIVE,
        Booking.end_date < today
    ).all()

    for booking in bookings:
        booking.status = BookingStatus.EXPIRED
        release_seat(booking.seat, exclude_booking_id=booking.id)
    db.session.commit()

    for booking in bookings:
        send_notification(
            booking.user_id, 'Plan Expired',
            f'Your {booking.plan.name} for Seat {booking.seat.seat_number} has expired. Renew now to continue!',
            type='reminder'
        )
        send_admin_notification(
            'Booking Expired',
            f'{booking.user.name} ({booking.user.email}) - {booking.plan.name}, '
            f'Seat {booking.seat.seat_number} expired on {booking.end_date.strftime("%d/%m/%Y")}',
            type='plan', related_id=booking.id
        )

    if bookings:
        logger.info('Processed {} expired bookings', len(bookings))
    return len(bookings)


CHECKS = (
    ('birthdays', check_birthday_notifications),
    ('expiry_reminders', check_expiry_notifications),
    ('advance_reminders', check_advance_booking_reminders),
    ('expired_bookings', check_expired_bookings),
)


def run_scheduled_notifications(today=None):
    """Run every check once; a failing check is logged and the rest still run"""
    logger.info('Running scheduled notifications check')
    results = {}
    for name, check in CHECKS:
        try:
            results[name] = check(today)
        except Exception:
            db.session.rollback()
            logger.exception('Scheduled check {} failed', name)
            results[name] = None
    logger.info('Scheduled notifications check completed: {}', results)
    return results


def run_forever(app, interval_seconds=3600, stop_event=None):
    """Run the checks now and then every interval until stop_event is set"""
    stop_event = stop_event or threading.Event()
    logger.info('Notification scheduler started (every {} seconds)', interval_seconds)
    while not stop_event.is_set():
        with app.app_context():
            run_scheduled_notifications()
            db.session.remove()
        stop_event.wait(interval_seconds)
    logger.info('Notification scheduler stopped')
