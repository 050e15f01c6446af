from datetime import datetime
from flask import Blueprint, request
from flask_jwt_extended import jwt_required
from loguru import logger
from smart_library import db
from smart_library.models.support import SupportTicket, SupportMessage, TicketStatus, TicketPriority, SenderType
from smart_library.services.notifications import send_notification, send_admin_notification
from smart_library.utils.decorators import user_required, admin_required, get_current_user, get_current_admin
from smart_library.utils.helpers import generate_ticket_number
from smart_library.utils.responses import success_response, error_response
from smart_library.utils.validators import validate_required_fields

support_bp = Blueprint('support', __name__)


@support_bp.route('/tickets', methods=['POST'])
@user_required
def create_ticket():
    """
    Open a support ticket
    ---
    Request body:
    {
        "subject": "string",
        "category": "string (optional)",
        "priority": "low|medium|high (optional)",
        "message": "string (optional first message)"
    }
    """
    try:
        user = get_current_user()
        data = request.get_json(silent=True) or {}

        is_valid, message = validate_required_fields(data, ['subject'])
        if not is_valid:
            return error_response(message, 400)

        try:
            priority = TicketPriority(data.get('priority') or 'medium')
        except ValueError:
            return error_response('Invalid priority', 400)

        ticket = SupportTicket(
            ticket_number=generate_ticket_number(),
            user_id=user.id,
            subject=data['subject'].strip(),
            category=data.get('category') or 'general',
            priority=priority
        )
        db.session.add(ticket)
        db.session.flush()

        if data.get('message'):
            db.session.add(SupportMessage(
                ticket_id=ticket.id,
                sender_type=SenderType.USER,
                sender_id=user.id,
                message=data['message']
            ))

        db.session.commit()
        logger.info('Support ticket {} opened by user {}', ticket.ticket_number, user.id)

        send_admin_notification(
            'New Support Ticket',
            f'{user.name} opened ticket {ticket.ticket_number}: {ticket.subject}',
            type='support', related_id=ticket.id
        )

        return success_response({'id': ticket.id, 'ticket_number': ticket.ticket_number},
                                'Ticket created successfully', 201)

    except Exception:
        db.session.rollback()
        logger.exception('Error creating ticket')
        return error_response('Error creating ticket', 500)


@support_bp.route('/tickets', methods=['GET'])
@user_required
def get_tickets():
    user = get_current_user()
    tickets = SupportTicket.query.filter_by(user_id=user.id) \
        .order_by(SupportTicket.created_at.desc(), SupportTicket.id.desc()).all()
    return success_response({'tickets': [ticket.to_dict() for ticket in tickets]})


@support_bp.route('/tickets/<int:ticket_id>/messages', methods=['GET'])
@user_required
def get_ticket_messages(ticket_id):
    user = get_current_user()
    ticket = SupportTicket.query.filter_by(id=ticket_id, user_id=user.id).first()
    if not ticket:
        return error_response('Ticket not found', 404)

    return success_response({
        'ticket': ticket.to_dict(),
        'messages': [message.to_dict() for message in ticket.messages]
    })


@support_bp.route('/tickets/<int:ticket_id>/messages', methods=['POST'])
@user_required
def send_message(ticket_id):
    user = get_current_user()
    ticket = SupportTicket.query.filter_by(id=ticket_id, user_id=user.id).first()
    if not ticket:
        return error_response('Ticket not found', 404)

    data = request.get_json(silent=True) or {}
    if not (data.get('message') or '').strip():
        return error_response('Message is required', 400)

    if ticket.status == TicketStatus.CLOSED:
        return error_response('Ticket is closed', 400)

    message = SupportMessage(ticket_id=ticket.id, sender_type=SenderType.USER, sender_id=user.id,
                             message=data['message'])
    db.session.add(message)
    db.session.commit()

    send_admin_notification(
        'New Support Message',
        f'{user.name} replied on ticket {ticket.ticket_number}',
        type='support', related_id=ticket.id
    )

    return success_response({'id': message.id}, 'Message sent successfully', 201)


@support_bp.route('/admin/tickets', methods=['GET'])
@jwt_required()
@admin_required
def get_admin_tickets():
    tickets = SupportTicket.query.order_by(SupportTicket.created_at.desc(), SupportTicket.id.desc()).all()
    return success_response({'tickets': [ticket.to_dict(include_user=True) for ticket in tickets]})


@support_bp.route('/admin/tickets/<int:ticket_id>/status', methods=['PUT'])
@jwt_required()
@admin_required
def update_ticket_status(ticket_id):
    ticket = db.session.get(SupportTicket, ticket_id)
    if not ticket:
        return error_response('Ticket not found', 404)

    data = request.get_json(silent=True) or {}
    try:
        status = TicketStatus(data.get('status'))
    except ValueError:
        return error_response('Invalid status', 400)

    ticket.status = status
    if status in (TicketStatus.RESOLVED, TicketStatus.CLOSED):
        ticket.resolved_at = datetime.utcnow()
    db.session.commit()

    send_notification(
        ticket.user_id, 'Support Ticket Updated',
        f'Your ticket {ticket.ticket_number} is now {status.value.replace("_", " ")}.',
        type='support'
    )
    return success_response(None, 'Ticket status updated successfully')


@support_bp.route('/admin/tickets/<int:ticket_id>/reply', methods=['POST'])
@jwt_required()
@admin_required
def reply_to_ticket(ticket_id):
    admin = get_current_admin()
    ticket = db.session.get(SupportTicket, ticket_id)
    if not ticket:
        return error_response('Ticket not found', 404)

    data = request.get_json(silent=True) or {}
    if not (data.get('message') or '').strip():
        return error_response('Message is required', 400)

    db.session.add(SupportMessage(ticket_id=ticket.id, sender_type=SenderType.ADMIN, sender_id=admin.id,
                                  message=data['message']))
    if ticket.status == TicketStatus.OPEN:
        ticket.status = TicketStatus.IN_PROGRESS
    db.session.commit()

    send_notification(
        ticket.user_id, 'Support Reply',
        f'Admin replied to your ticket {ticket.ticket_number}',
        type='support'
    )
    return success_response(None, 'Reply sent successfully', 201)
