import threading
from datetime import date, timedelta

from smart_library import db
from smart_library.models.booking import AdvanceBooking, Booking, BookingStatus
from smart_library.models.notification import AdminNotification, Notification, NotificationPriority
from smart_library.models.seat import Seat, SeatStatus
from smart_library.services import scheduler
from smart_library.services.scheduler import (check_advance_booking_reminders, check_birthday_notifications,
                                              check_expired_bookings, check_expiry_notifications,
                                              expiry_urgency, run_scheduled_notifications)

from conftest import make_booking


class TestExpiryUrgency:
    def test_buckets(self):
        assert expiry_urgency(1) == ('URGENT', 'high', True)
        assert expiry_urgency(3) == ('URGENT', 'high', True)
        assert expiry_urgency(4) == ('HIGH', 'high', True)
        assert expiry_urgency(7) == ('HIGH', 'high', True)
        assert expiry_urgency(8) == ('MEDIUM', 'medium', False)


class TestChecks:
    def test_birthday_sent_once_per_day(self, app, user):
        today = date.today()
        user.dob = date(1996, today.month, today.day)
        db.session.commit()

        assert check_birthday_notifications() == 1
        assert check_birthday_notifications() == 0
        assert Notification.query.filter_by(title='Happy Birthday!').count() == 1
        assert AdminNotification.query.filter_by(title='Member Birthday Today').count() == 1

    def test_blocked_members_get_no_birthday_wishes(self, app, user):
        today = date.today()
        user.dob = date(1996, today.month, today.day)
        user.is_blocked = True
        db.session.commit()

        assert check_birthday_notifications() == 0

    def test_expiry_reminder_priority(self, app, user, plan, seat):
        make_booking(user, plan, seat, start_date=date.today() - timedelta(days=28))

        assert check_expiry_notifications() == 1

        notification = Notification.query.one()
        assert notification.title == 'Plan Expiring in 2 Days'
        assert notification.priority == NotificationPriority.HIGH
        assert AdminNotification.query.one().title == 'URGENT: Plan Expiring in 2 Days'

    def test_distant_expiry_not_reminded(self, app, booking):
        assert check_expiry_notifications() == 0

    def test_advance_booking_reminder(self, app, user, plan, seat):
        start = date.today() + timedelta(days=3)
        db.session.add(AdvanceBooking(user_id=user.id, seat_id=seat.id, plan_id=plan.id, start_date=start,
                                      end_date=start + timedelta(days=30), amount=1000))
        db.session.commit()

        assert check_advance_booking_reminders() == 1
        assert Notification.query.one().title == 'Advance Booking Reminder (3 Days)'

    def test_expired_bookings_free_seats(self, app, user, plan, seat):
        booking = make_booking(user, plan, seat, start_date=date.today() - timedelta(days=31))

        assert check_expired_bookings() == 1

        assert db.session.get(Booking, booking.id).status == BookingStatus.EXPIRED
        assert db.session.get(Seat, seat.id).seat_status == SeatStatus.AVAILABLE
        assert Notification.query.filter_by(title='Plan Expired').count() == 1

    def test_booking_ending_today_is_kept(self, app, user, plan, seat):
        booking = make_booking(user, plan, seat, start_date=date.today() - timedelta(days=30))

        assert check_expired_bookings() == 0
        assert db.session.get(Booking, booking.id).status == BookingStatus.ACTIVE


class TestRunner:
    def test_failing_check_does_not_stop_the_rest(self, app, monkeypatch):
        def broken(today=None):
            raise RuntimeError('boom')

        monkeypatch.setattr(scheduler, 'CHECKS', (('broken', broken),
                                                  ('expired_bookings', check_expired_bookings)))

        results = run_scheduled_notifications()

        assert results == {'broken': None, 'expired_bookings': 0}

    def test_run_forever_stops_on_event(self, app, monkeypatch):
        stop_event = threading.Event()
        calls = []

        def fake_run():
            calls.append(1)
            stop_event.set()

        monkeypatch.setattr(scheduler, 'run_scheduled_notifications', fake_run)

        scheduler.run_forever(app, interval_seconds=0, stop_event=stop_event)

        assert calls == [1]

    def test_cli_runs_once(self, runner, monkeypatch):
        monkeypatch.setattr(scheduler, 'run_scheduled_notifications', lambda: {'birthdays': 0})

        result = runner.invoke(args=['run-notifications'])

        assert result.exit_code == 0
        assert 'birthdays: 0' in result.output
