"""
Plan checkout as the member sees it: price, GST, coupon discount and
payment from the wallet or a gateway.
"""
from loguru import logger

from smart_library.client.api import ApiError
from smart_library.utils.helpers import generate_transaction_id
from smart_library.utils.pricing import DEFAULT_GST_PERCENTAGE, calculate_checkout_totals

WALLET = 'wallet'
WALLET_PATH = '/wallet'


class InsufficientWalletBalance(ApiError):
    def __init__(self, balance, required, booking=None):
        super().__init__(f'Insufficient wallet balance. Required: ₹{required:.2f}, Available: ₹{balance:.2f}')
        self.balance = balance
        self.required = required
        self.booking = booking


class Checkout:
    def __init__(self, api, plan, navigate=None, gst_percentage=DEFAULT_GST_PERCENTAGE):
        self.api = api
        self.plan = plan
        self.navigate = navigate
        self.gst_percentage = gst_percentage
        self.coupon = None

    @property
    def price(self):
        return round(float(self.plan['price']), 2)

    @property
    def discount(self):
        return float(self.coupon['discount_amount']) if self.coupon else 0.0

    @property
    def totals(self):
        return calculate_checkout_totals(self.price, self.discount, self.gst_percentage)

    def apply_coupon(self, code):
        """Validate a coupon against the plan price; raises ApiError when it is rejected"""
        data = self.api.validate_coupon(code.strip().upper(), self.price)
        self.coupon = data['coupon']
        return self.coupon

    def remove_coupon(self):
        self.coupon = None

    def pay(self, seat_id, start_date=None, payment_method=WALLET):
        """
        Book the seat and pay for it.

        Wallet payments check the balance first: when it falls short nothing
        is booked, the member is sent to the wallet page and
        InsufficientWalletBalance is raised. The booked amount comes from the
        server, which may apply a different GST rate, so the balance is
        checked again before paying; a pending booking that still cannot be
        paid is attached to the error and holds no seat.
        """
        if payment_method == WALLET:
            self._require_balance(self.totals['final_amount'])

        booking_data = {'plan_id': self.plan['id'], 'seat_id': seat_id}
        if start_date:
            booking_data['start_date'] = str(start_date)
        if self.coupon:
            booking_data['coupon_code'] = self.coupon['code']
        booking = self.api.create_booking(booking_data)

        if payment_method == WALLET and float(booking['amount']) != self.totals['final_amount']:
            self._require_balance(float(booking['amount']), booking)

        transaction_id = generate_transaction_id()
        payment = self.api.process_payment({
            'booking_id': booking['booking_id'],
            'amount': booking['amount'],
            'payment_gateway': payment_method,
            'payment_response': {'transaction_id': transaction_id}
        })
        logger.info('Booking {} paid via {} ({})', booking['booking_id'], payment_method, transaction_id)

        return {'booking': booking, 'payment': payment, 'transaction_id': transaction_id}

    def _require_balance(self, required, booking=None):
        balance = float(self.api.get_wallet()['balance'])
        if balance < required:
            if self.navigate:
                self.navigate(WALLET_PATH)
            raise InsufficientWalletBalance(balance, required, booking)
