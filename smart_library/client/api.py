"""
HTTP client for the Smart Library REST API.

One httpx session per client. Every request carries the stored bearer
token, successful responses are unwrapped from the `{success, message,
data}` envelope, and a 401 forgets the stored credentials and sends the
caller to the login screen.
"""
import os

import httpx
from loguru import logger

from smart_library.client.token_store import TokenStore

DEFAULT_API_URL = os.getenv('SMART_LIBRARY_API_URL', 'http://localhost:5000/api')
DEFAULT_ERROR_MESSAGE = 'An error occurred'
LOGIN_PATH = '/login'


class ApiError(Exception):
    """A failed API call, carrying the server's message when it sent one"""

    def __init__(self, message, status=None, errors=None):
        super().__init__(message)
        self.message = message
        self.status = status
        self.errors = errors

    def __repr__(self):
        return f'ApiError({self.message!r}, status={self.status})'


class ApiClient:
    def __init__(self, base_url=DEFAULT_API_URL, token_store=None, on_unauthorized=None, timeout=30.0,
                 transport=None):
        self.token_store = token_store if token_store is not None else TokenStore()
        self.on_unauthorized = on_unauthorized
        self._http = httpx.Client(
            base_url=base_url.rstrip('/'),
            timeout=timeout,
            transport=transport,
            headers={'Accept': 'application/json'},
            event_hooks={'request': [self._inject_token]}
        )

    def close(self):
        self._http.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()

    def _inject_token(self, request):
        token = self.token_store.token
        if token:
            request.headers['Authorization'] = f'Bearer {token}'

    def set_auth_token(self, token):
        if token:
            self.token_store.set('token', token)
        else:
            self.token_store.remove('token')

    # Transport

    def request(self, method, path, **kwargs):
        try:
            response = self._http.request(method, path, **kwargs)
        except httpx.HTTPError as e:
            logger.warning('{} {} failed: {}', method, path, e)
            raise ApiError(str(e) or DEFAULT_ERROR_MESSAGE) from e

        if response.is_error:
            self._raise_for_response(response)
        return self._unwrap(response)

    @staticmethod
    def _body(response):
        try:
            return response.json()
        except ValueError:
            return None

    def _unwrap(self, response):
        body = self._body(response)
        if body is None:
            return response.text
        if isinstance(body, dict) and body.get('data') is not None:
            return body['data']
        return body

    def _raise_for_response(self, response):
        body = self._body(response)
        message = None
        errors = None
        if isinstance(body, dict):
            message = body.get('message')
            errors = body.get('errors')
        message = message or response.reason_phrase or DEFAULT_ERROR_MESSAGE

        if response.status_code == 401:
            self.token_store.clear()
            if self.on_unauthorized:
                self.on_unauthorized(LOGIN_PATH)

        raise ApiError(message, response.status_code, errors)

    def get(self, path, params=None):
        return self.request('GET', path, params=params)

    def post(self, path, data=None, files=None, params=None):
        if files:
            return self.request('POST', path, data=data, files=files, params=params)
        return self.request('POST', path, json=data, params=params)

    def put(self, path, data=None, files=None):
        if files:
            return self.request('PUT', path, data=data, files=files)
        return self.request('PUT', path, json=data)

    def patch(self, path, data=None):
        return self.request('PATCH', path, json=data)

    def delete(self, path, params=None):
        return self.request('DELETE', path, params=params)

    # Auth

    def login(self, identifier, password):
        return self.post('/auth/login', {'identifier': identifier, 'password': password})

    def signup(self, user_data):
        return self.post('/auth/signup', user_data)

    def admin_login(self, email, password):
        return self.post('/auth/admin/login', {'email': email, 'password': password})

    def forgot_password(self, email):
        return self.post('/auth/forgot-password', {'email': email})

    def reset_password(self, token, new_password):
        return self.post('/auth/reset-password', {'token': token, 'newPassword': new_password})

    def change_password(self, current_password, new_password):
        return self.post('/auth/change-password',
                         {'currentPassword': current_password, 'newPassword': new_password})

    # User

    def get_profile(self):
        return self.get('/user/profile')

    def update_profile(self, data, files=None):
        return self.put('/user/profile', data, files=files)

    def get_notifications(self):
        return self.get('/user/notifications')

    def mark_notification_read(self, notification_id):
        return self.put(f'/user/notifications/{notification_id}/read')

    # Plans

    def get_plans(self):
        return self.get('/plans')

    def get_plan(self, plan_id):
        return self.get(f'/plans/{plan_id}')

    def create_plan(self, data):
        return self.post('/plans', data)

    def update_plan(self, plan_id, data):
        return self.put(f'/plans/{plan_id}', data)

    def delete_plan(self, plan_id):
        return self.delete(f'/plans/{plan_id}')

    # Seats

    def get_seats(self, params=None):
        return self.get('/seats', params=params)

    def create_seat(self, data):
        return self.post('/seats', data)

    def update_seat(self, seat_id, data):
        return self.put(f'/seats/{seat_id}', data)

    def delete_seat(self, seat_id):
        return self.delete(f'/seats/{seat_id}')

    # Bookings and payments

    def get_bookings(self):
        return self.get('/bookings')

    def create_booking(self, data):
        return self.post('/bookings', data)

    def process_payment(self, data):
        return self.post('/payments/process', data)

    def get_payments(self):
        return self.get('/payments')

    def process_refund(self, payment_id, data=None):
        return self.post(f'/payments/{payment_id}/refund', data or {})

    # Coupons

    def validate_coupon(self, code, amount):
        return self.post('/coupons/validate', {'code': code, 'amount': amount})

    def get_coupons(self):
        return self.get('/coupons')

    def create_coupon(self, data):
        return self.post('/coupons', data)

    def update_coupon(self, coupon_id, data):
        return self.put(f'/coupons/{coupon_id}', data)

    def delete_coupon(self, coupon_id):
        return self.delete(f'/coupons/{coupon_id}')

    # Wallet

    def get_wallet(self):
        return self.get('/wallet')

    def recharge_wallet(self, amount, payment_method, transaction_id=None):
        return self.post('/wallet/recharge', {'amount': amount, 'payment_method': payment_method,
                                              'transaction_id': transaction_id})

    # Facilities

    def get_facilities(self):
        return self.get('/facilities')

    def create_facility(self, data, files=None):
        return self.post('/facilities', data, files=files)

    def update_facility(self, facility_id, data, files=None):
        return self.put(f'/facilities/{facility_id}', data, files=files)

    def delete_facility(self, facility_id):
        return self.delete(f'/facilities/{facility_id}')

    # Banners

    def get_banners(self):
        return self.get('/banners')

    def get_all_banners(self):
        return self.get('/banners/admin/all')

    def create_banner(self, data):
        return self.post('/banners', data)

    def update_banner(self, banner_id, data):
        return self.put(f'/banners/{banner_id}', data)

    def delete_banner(self, banner_id):
        return self.delete(f'/banners/{banner_id}')

    # Notices

    def get_notices(self):
        return self.get('/notices')

    def get_all_notices(self):
        return self.get('/notices/admin')

    def create_notice(self, data):
        return self.post('/notices', data)

    def update_notice(self, notice_id, data):
        return self.put(f'/notices/{notice_id}', data)

    def delete_notice(self, notice_id):
        return self.delete(f'/notices/{notice_id}')

    # Gallery

    def get_gallery(self, category=None):
        return self.get('/gallery', params={'category': category} if category else None)

    def upload_gallery_image(self, image, data=None):
        """`image` is an httpx file tuple such as ('photo.jpg', fileobj, 'image/jpeg')"""
        return self.post('/gallery/upload', data or {}, files={'image': image})

    def upload_gallery_images(self, images, category=None):
        files = [('images', image) for image in images]
        return self.post('/gallery/upload-multiple', {'category': category} if category else {}, files=files)

    def update_gallery_image(self, image_id, data):
        return self.put(f'/gallery/{image_id}', data)

    def delete_gallery_image(self, image_id):
        return self.delete(f'/gallery/{image_id}')

    # Support

    def create_ticket(self, data):
        return self.post('/support/tickets', data)

    def get_tickets(self):
        return self.get('/support/tickets')

    def get_ticket_messages(self, ticket_id):
        return self.get(f'/support/tickets/{ticket_id}/messages')

    def send_message(self, ticket_id, message):
        return self.post(f'/support/tickets/{ticket_id}/messages', {'message': message})

    def get_admin_tickets(self):
        return self.get('/support/admin/tickets')

    def update_ticket_status(self, ticket_id, status):
        return self.put(f'/support/admin/tickets/{ticket_id}/status', {'status': status})

    def reply_to_ticket(self, ticket_id, message):
        return self.post(f'/support/admin/tickets/{ticket_id}/reply', {'message': message})

    # Offers

    def get_offers(self):
        return self.get('/offers')

    def get_offer_by_code(self, code):
        return self.get(f'/offers/code/{code}')

    def get_all_offers(self):
        return self.get('/offers/admin/all')

    def create_offer(self, data):
        return self.post('/offers', data)

    def update_offer(self, offer_id, data):
        return self.put(f'/offers/{offer_id}', data)

    def delete_offer(self, offer_id):
        return self.delete(f'/offers/{offer_id}')

    # Advance bookings

    def get_advance_bookings(self):
        return self.get('/advance-bookings/my-bookings')

    def create_advance_booking(self, data):
        return self.post('/advance-bookings', data)

    def cancel_advance_booking(self, advance_booking_id):
        return self.put(f'/advance-bookings/{advance_booking_id}/cancel')

    def get_all_advance_bookings(self):
        return self.get('/advance-bookings/admin/all')

    def update_advance_booking_status(self, advance_booking_id, data):
        return self.put(f'/advance-bookings/admin/{advance_booking_id}/status', data)

    def delete_advance_booking(self, advance_booking_id):
        return self.delete(f'/advance-bookings/admin/{advance_booking_id}')

    # Admin: dashboard, members, reports

    def get_dashboard(self):
        return self.get('/admin/dashboard')

    def get_members(self, params=None):
        return self.get('/admin/members', params=params)

    def block_member(self, user_id, is_blocked):
        return self.put(f'/admin/members/{user_id}/block', {'is_blocked': is_blocked})

    def get_reports(self, period='month'):
        return self.get('/admin/reports', params={'period': period})

    # Admin: expenses and gateway settings

    def get_expenses(self, params=None):
        return self.get('/admin/expenses', params=params)

    def create_expense(self, data):
        return self.post('/admin/expenses', data)

    def update_expense(self, expense_id, data):
        return self.put(f'/admin/expenses/{expense_id}', data)

    def delete_expense(self, expense_id):
        return self.delete(f'/admin/expenses/{expense_id}')

    def get_gateway_settings(self):
        return self.get('/admin/gateway-settings')

    def save_gateway_settings(self, data):
        return self.post('/admin/gateway-settings', data)

    # Admin: notifications

    def send_notification(self, data):
        return self.post('/notifications', data)

    def get_all_notifications(self):
        return self.get('/notifications')

    def get_admin_notifications(self):
        return self.get('/admin/admin-notifications')

    def get_admin_unread_count(self):
        return self.get('/admin/admin-notifications/unread-count')

    def mark_admin_notification_read(self, notification_id):
        return self.put(f'/admin/admin-notifications/{notification_id}/read')

    def mark_all_admin_notifications_read(self):
        return self.put('/admin/admin-notifications/mark-all-read')

    def delete_admin_notification(self, notification_id):
        return self.delete(f'/admin/admin-notifications/{notification_id}')

    # Admin: refunds

    def get_refunds(self, params=None):
        return self.get('/admin/refunds', params=params)

    def get_refund(self, refund_id):
        return self.get(f'/admin/refunds/{refund_id}')

    def get_refund_stats(self):
        return self.get('/admin/refunds/stats/summary')

    def process_refund_manual(self, data):
        return self.post('/admin/refunds/process', data)

    def process_auto_refund(self, booking_id):
        return self.post(f'/admin/refunds/auto-refund/{booking_id}')

    def get_user_refund_requests(self, params=None):
        return self.get('/admin/refunds/user-requests', params=params)

    def get_user_refund_request_stats(self):
        return self.get('/admin/refunds/user-requests/stats')

    def review_refund_request(self, request_id, data):
        return self.put(f'/admin/refunds/user-requests/{request_id}/review', data)

    # Admin: user control

    def get_user_wallet(self, user_id):
        return self.get(f'/admin/user-control/{user_id}/wallet')

    def credit_user_wallet(self, user_id, data):
        return self.post(f'/admin/user-control/{user_id}/wallet/credit', data)

    def debit_user_wallet(self, user_id, data):
        return self.post(f'/admin/user-control/{user_id}/wallet/debit', data)

    def get_user_bookings(self, user_id):
        return self.get(f'/admin/user-control/{user_id}/bookings')

    def extend_booking(self, user_id, booking_id, data):
        return self.post(f'/admin/user-control/{user_id}/bookings/{booking_id}/extend', data)

    def change_booking_seat(self, user_id, booking_id, data):
        return self.post(f'/admin/user-control/{user_id}/bookings/{booking_id}/change-seat', data)

    def cancel_booking(self, user_id, booking_id, data=None):
        return self.post(f'/admin/user-control/{user_id}/bookings/{booking_id}/cancel', data or {})

    # Admin: impersonation

    def impersonate_user(self, user_id):
        return self.post(f'/admin/impersonation/impersonate/{user_id}')

    def exit_impersonation(self, session_id):
        return self.post(f'/admin/impersonation/exit-impersonation/{session_id}')

    def get_active_sessions(self):
        return self.get('/admin/impersonation/active-sessions')

    def get_session_history(self, params=None):
        return self.get('/admin/impersonation/session-history', params=params)

    def log_impersonation_action(self, session_id, action_type, action_details=None):
        return self.post('/admin/impersonation/log-action', {'session_id': session_id, 'action_type': action_type,
                                                             'action_details': action_details})

    def verify_impersonation(self):
        return self.get('/admin/impersonation/verify-impersonation')

    # Admin: audit logs

    def get_audit_logs(self, params=None):
        return self.get('/admin/audit-logs', params=params)

    def get_audit_stats(self, params=None):
        return self.get('/admin/audit-logs/stats', params=params)

    def get_audit_log(self, log_id):
        return self.get(f'/admin/audit-logs/{log_id}')

    def export_audit_logs(self, params=None):
        """CSV text of the matching log entries"""
        return self.get('/admin/audit-logs/export/csv', params=params)

    # Member refund requests

    def create_refund_request(self, data):
        return self.post('/user-refund-requests', data)

    def get_my_refund_requests(self, params=None):
        return self.get('/user-refund-requests', params=params)

    def get_refund_request_details(self, request_id):
        return self.get(f'/user-refund-requests/{request_id}')

    def cancel_refund_request(self, request_id):
        return self.delete(f'/user-refund-requests/{request_id}')
