from smart_library.models.user import User, Admin, AdminRole, Gender, PasswordResetToken
from smart_library.models.wallet import WalletTransaction, TransactionType, ReferenceType
from smart_library.models.plan import Plan
from smart_library.models.seat import Seat, SeatStatus
from smart_library.models.booking import (Booking, BookingStatus, AdvanceBooking, AdvanceBookingStatus,
                                          AdvancePaymentStatus, BookingModification)
from smart_library.models.payment import (Payment, PaymentStatus, PaymentRefundStatus, Refund, RefundType,
                                          RefundMethod, RefundStatus, RefundRequest, RefundRequestType,
                                          RefundRequestStatus)
from smart_library.models.promotion import Coupon, Offer, DiscountType
from smart_library.models.content import Banner, Facility, Notice, GalleryImage
from smart_library.models.notification import (Notification, NotificationType, NotificationPriority,
                                               AdminNotification)
from smart_library.models.support import SupportTicket, SupportMessage, TicketStatus, TicketPriority, SenderType
from smart_library.models.audit import AdminActionLog, ImpersonationSession
from smart_library.models.finance import Expense, GatewaySettings

__all__ = [
    'User', 'Admin', 'AdminRole', 'Gender', 'PasswordResetToken',
    'WalletTransaction', 'TransactionType', 'ReferenceType',
    'Plan', 'Seat', 'SeatStatus',
    'Booking', 'BookingStatus', 'AdvanceBooking', 'AdvanceBookingStatus', 'AdvancePaymentStatus',
    'BookingModification',
    'Payment', 'PaymentStatus', 'PaymentRefundStatus', 'Refund', 'RefundType', 'RefundMethod',
    'RefundStatus', 'RefundRequest', 'RefundRequestType', 'RefundRequestStatus',
    'Coupon', 'Offer', 'DiscountType',
    'Banner', 'Facility', 'Notice', 'GalleryImage',
    'Notification', 'NotificationType', 'NotificationPriority', 'AdminNotification',
    'SupportTicket', 'SupportMessage', 'TicketStatus', 'TicketPriority', 'SenderType',
    'AdminActionLog', 'ImpersonationSession',
    'Expense', 'GatewaySettings'
]
