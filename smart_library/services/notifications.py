"""
Notification senders.

Senders commit on their own and never raise: callers invoke them after the
business transaction has been committed, and a failed notification is
logged and rolled back without affecting it.
"""
from loguru import logger
from smart_library import db
from smart_library.models.notification import (Notification, NotificationType, NotificationPriority,
                                               AdminNotification)


def _commit_or_log(what):
    try:
        db.session.commit()
        return True
    except Exception:
        db.session.rollback()
        logger.exception('Failed to send {}', what)
        return False


def send_notification(user_id, title, message, type='general', priority='medium'):
    """Notify a single member"""
    notification = Notification(
        user_id=user_id,
        title=title,
        message=message,
        type=NotificationType(type),
        priority=NotificationPriority(priority),
        send_to_all=False
    )
    db.session.add(notification)
    if _commit_or_log(f'notification to user {user_id}'):
        logger.debug('Notification sent to user {}: {}', user_id, title)
        return notification
    return None


def broadcast_notification(title, message, type='general', priority='medium'):
    """Notify every member at once"""
    notification = Notification(
        user_id=None,
        title=title,
        message=message,
        type=NotificationType(type),
        priority=NotificationPriority(priority),
        send_to_all=True
    )
    db.session.add(notification)
    if _commit_or_log('broadcast notification'):
        logger.debug('Broadcast notification sent: {}', title)
        return notification
    return None


def send_admin_notification(title, message, type='general', related_id=None):
    notification = AdminNotification(
        title=title,
        message=message,
        type=type,
        related_id=related_id
    )
    db.session.add(notification)
    if _commit_or_log('admin notification'):
        logger.debug('Admin notification sent: {}', title)
        return notification
    return None
