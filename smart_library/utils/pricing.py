"""
Money arithmetic shared by the API and the client.

All amounts are floats rounded to two decimals, matching what the
models serialise.
"""
import math
from datetime import datetime, time, timedelta

DEFAULT_GST_PERCENTAGE = 18.0
SECONDS_PER_DAY = 86400

# (minimum days until start, refund percentage), checked in order
REFUND_TIERS = (
    (7, 100),
    (3, 50),
)


def calculate_end_date(start_date, duration_days):
    """Date the plan runs out for a booking starting on start_date"""
    return start_date + timedelta(days=int(duration_days))


def calculate_discount(amount, discount_type, discount_value, max_discount=None):
    """
    Discount for a purchase of `amount`.

    Percentage discounts are capped at `max_discount` when one is set. The
    discount never exceeds the amount itself.
    """
    amount = float(amount)
    if discount_type == 'flat':
        discount = float(discount_value)
    elif discount_type == 'percentage':
        discount = amount * float(discount_value) / 100
        if max_discount and discount > float(max_discount):
            discount = float(max_discount)
    else:
        discount = 0.0

    return round(max(0.0, min(discount, amount)), 2)


def calculate_gst(amount, gst_percentage=DEFAULT_GST_PERCENTAGE):
    return round(float(amount) * float(gst_percentage) / 100, 2)


def calculate_checkout_totals(price, discount=0.0, gst_percentage=DEFAULT_GST_PERCENTAGE):
    """
    Price breakdown for a plan purchase: GST is charged on the plan price and
    the coupon discount comes off the taxed total, floored at zero.
    """
    price = round(float(price), 2)
    gst_amount = calculate_gst(price, gst_percentage)
    final_amount = round(max(0.0, price + gst_amount - float(discount or 0)), 2)
    return {
        'total_amount': price,
        'gst_amount': gst_amount,
        'discount_amount': round(float(discount or 0), 2),
        'final_amount': final_amount
    }


def days_until(start_date, now=None):
    """
    Whole days from now until midnight at the start of start_date, rounded
    down. Any time after midnight counts one day fewer than the calendar
    difference; a plain date for `now` is taken as its midnight.
    """
    if isinstance(start_date, str):
        start_date = datetime.strptime(start_date[:10], '%Y-%m-%d').date()
    elif isinstance(start_date, datetime):
        start_date = start_date.date()
    now = now or datetime.now()
    if not isinstance(now, datetime):
        now = datetime.combine(now, time.min)
    remaining = datetime.combine(start_date, time.min) - now
    return math.floor(remaining.total_seconds() / SECONDS_PER_DAY)


def refund_percentage(days_until_start):
    for min_days, percentage in REFUND_TIERS:
        if days_until_start >= min_days:
            return percentage
    return 0


def calculate_expected_refund(amount, start_date, now=None):
    """
    Refund a member can expect for cancelling a booking.

    100% at seven or more days before the start date, 50% at three to six
    days, nothing below three days.
    """
    percentage = refund_percentage(days_until(start_date, now))
    return {
        'percentage': percentage,
        'amount': round(float(amount or 0) * percentage / 100, 2)
    }
