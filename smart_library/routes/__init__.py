from smart_library.routes.auth import auth_bp
from smart_library.routes.users import users_bp
from smart_library.routes.plans import plans_bp
from smart_library.routes.seats import seats_bp
from smart_library.routes.bookings import bookings_bp
from smart_library.routes.payments import payments_bp
from smart_library.routes.wallet import wallet_bp
from smart_library.routes.coupons import coupons_bp
from smart_library.routes.offers import offers_bp
from smart_library.routes.advance_bookings import advance_bookings_bp
from smart_library.routes.banners import banners_bp
from smart_library.routes.facilities import facilities_bp
from smart_library.routes.notices import notices_bp
from smart_library.routes.gallery import gallery_bp
from smart_library.routes.notifications import notifications_bp
from smart_library.routes.support import support_bp
from smart_library.routes.refund_requests import refund_requests_bp
from smart_library.routes.admin import admin_bp
from smart_library.routes.admin_notifications import admin_notifications_bp
from smart_library.routes.reports import reports_bp
from smart_library.routes.expenses import expenses_bp
from smart_library.routes.gateway import gateway_bp
from smart_library.routes.refunds import refunds_bp
from smart_library.routes.user_control import user_control_bp
from smart_library.routes.impersonation import impersonation_bp
from smart_library.routes.audit_logs import audit_logs_bp

BLUEPRINTS = (
    # Member and public API
    (auth_bp, '/api/auth'),
    (users_bp, '/api/user'),
    (plans_bp, '/api/plans'),
    (seats_bp, '/api/seats'),
    (bookings_bp, '/api/bookings'),
    (payments_bp, '/api/payments'),
    (wallet_bp, '/api/wallet'),
    (coupons_bp, '/api/coupons'),
    (offers_bp, '/api/offers'),
    (advance_bookings_bp, '/api/advance-bookings'),
    (banners_bp, '/api/banners'),
    (facilities_bp, '/api/facilities'),
    (notices_bp, '/api/notices'),
    (gallery_bp, '/api/gallery'),
    (notifications_bp, '/api/notifications'),
    (support_bp, '/api/support'),
    (refund_requests_bp, '/api/user-refund-requests'),

    # Back office
    (admin_bp, '/api/admin'),
    (admin_notifications_bp, '/api/admin/admin-notifications'),
    (reports_bp, '/api/admin/reports'),
    (expenses_bp, '/api/admin/expenses'),
    (gateway_bp, '/api/admin/gateway-settings'),
    (refunds_bp, '/api/admin/refunds'),
    (user_control_bp, '/api/admin/user-control'),
    (impersonation_bp, '/api/admin/impersonation'),
    (audit_logs_bp, '/api/admin/audit-logs'),
)


def register_blueprints(app):
    for blueprint, url_prefix in BLUEPRINTS:
        app.register_blueprint(blueprint, url_prefix=url_prefix)


__all__ = [
    'auth_bp', 'users_bp', 'plans_bp', 'seats_bp', 'bookings_bp', 'payments_bp', 'wallet_bp', 'coupons_bp',
    'offers_bp', 'advance_bookings_bp', 'banners_bp', 'facilities_bp', 'notices_bp', 'gallery_bp',
    'notifications_bp', 'support_bp', 'refund_requests_bp', 'admin_bp', 'admin_notifications_bp', 'reports_bp',
    'expenses_bp', 'gateway_bp', 'refunds_bp', 'user_control_bp', 'impersonation_bp', 'audit_logs_bp',
    'register_blueprints'
]
