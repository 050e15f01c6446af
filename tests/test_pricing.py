from datetime import date, datetime, timedelta

import pytest

from smart_library.routes.refund_requests import expected_refund_amount
from smart_library.models.payment import RefundRequestType
from smart_library.utils.pricing import (
    calculate_checkout_totals,
    calculate_discount,
    calculate_end_date,
    calculate_expected_refund,
    days_until,
    refund_percentage
)

TODAY = date(2026, 3, 10)
MORNING = datetime(2026, 3, 10, 9, 30)


class TestRefundPercentage:
    @pytest.mark.parametrize('days, expected', [
        (30, 100), (7, 100), (6, 50), (3, 50), (2, 0), (0, 0), (-4, 0)
    ])
    def test_tiers(self, days, expected):
        assert refund_percentage(days) == expected

    def test_expected_refund_from_start_date(self):
        assert calculate_expected_refund(1180, TODAY + timedelta(days=8), MORNING) == {
            'percentage': 100, 'amount': 1180.0
        }
        assert calculate_expected_refund(1180, TODAY + timedelta(days=5), MORNING) == {
            'percentage': 50, 'amount': 590.0
        }
        assert calculate_expected_refund(1180, TODAY + timedelta(days=3), MORNING)['amount'] == 0.0

    def test_boundary_days_after_midnight_round_down(self):
        assert days_until(TODAY + timedelta(days=7), MORNING) == 6
        assert calculate_expected_refund(100, TODAY + timedelta(days=7), MORNING)['percentage'] == 50
        assert calculate_expected_refund(100, TODAY + timedelta(days=3), MORNING)['percentage'] == 0

    def test_at_midnight_counts_whole_days(self):
        midnight = datetime(2026, 3, 10)
        assert days_until(TODAY + timedelta(days=7), midnight) == 7
        assert calculate_expected_refund(100, TODAY + timedelta(days=7), midnight)['percentage'] == 100

    def test_past_start_is_negative(self):
        assert days_until(TODAY - timedelta(days=1), MORNING) == -2

    def test_accepts_iso_strings(self):
        assert days_until('2026-03-17', TODAY) == 7
        assert days_until('2026-03-17T00:00:00', TODAY) == 7

    def test_non_cancellation_requests_expect_full_amount(self):
        start = TODAY + timedelta(days=1)
        assert expected_refund_amount(RefundRequestType.SERVICE_ISSUE, 1180, start, TODAY) == 1180.0
        assert expected_refund_amount(RefundRequestType.CANCELLATION, 1180, start, TODAY) == 0.0


class TestCheckoutTotals:
    def test_gst_on_price(self):
        assert calculate_checkout_totals(1000) == {
            'total_amount': 1000.0,
            'gst_amount': 180.0,
            'discount_amount': 0.0,
            'final_amount': 1180.0
        }

    def test_discount_comes_off_taxed_total(self):
        assert calculate_checkout_totals(1000, 100)['final_amount'] == 1080.0

    def test_final_amount_never_negative(self):
        assert calculate_checkout_totals(100, 500)['final_amount'] == 0.0

    def test_custom_gst(self):
        assert calculate_checkout_totals(999, gst_percentage=5)['gst_amount'] == 49.95


class TestDiscount:
    def test_flat(self):
        assert calculate_discount(500, 'flat', 100) == 100.0

    def test_flat_capped_at_amount(self):
        assert calculate_discount(50, 'flat', 100) == 50.0

    def test_percentage_with_cap(self):
        assert calculate_discount(1000, 'percentage', 20) == 200.0
        assert calculate_discount(1000, 'percentage', 20, max_discount=150) == 150.0

    def test_unknown_type(self):
        assert calculate_discount(1000, 'bogo', 20) == 0.0


def test_end_date():
    assert calculate_end_date(TODAY, 30) == date(2026, 4, 9)
