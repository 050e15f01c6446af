from flask import Blueprint, request
from flask_jwt_extended import jwt_required
from loguru import logger
from smart_library import db
from smart_library.models.finance import Expense
from smart_library.utils.decorators import admin_required, get_current_admin
from smart_library.utils.responses import success_response, error_response
from smart_library.utils.validators import validate_required_fields, validate_positive_amount, validate_date

expenses_bp = Blueprint('expenses', __name__)


def _apply_expense_fields(expense, data):
    """Copy editable fields onto an expense; returns an error message or None"""
    if 'title' in data:
        if not (data['title'] or '').strip():
            return 'title cannot be empty'
        expense.title = data['title'].strip()
    if 'category' in data:
        expense.category = data['category'] or 'general'
    if 'amount' in data:
        amount, message = validate_positive_amount(data['amount'])
        if amount is None:
            return message
        expense.amount = amount
    if data.get('expense_date'):
        expense_date, message = validate_date(data['expense_date'], 'expense_date')
        if expense_date is None:
            return message
        expense.expense_date = expense_date
    if 'payment_method' in data:
        expense.payment_method = data['payment_method']
    if 'notes' in data:
        expense.notes = data['notes']
    return None


@expenses_bp.route('/', methods=['GET'])
@jwt_required()
@admin_required
def get_expenses():
    """Expenses, newest first. Optional `category` filter."""
    query = Expense.query
    if request.args.get('category'):
        query = query.filter_by(category=request.args['category'])
    expenses = query.order_by(Expense.expense_date.desc(), Expense.id.desc()).all()
    total = round(sum(float(e.amount) for e in expenses), 2)
    return success_response({'expenses': [e.to_dict() for e in expenses], 'total': total})


@expenses_bp.route('/', methods=['POST'])
@jwt_required()
@admin_required
def create_expense():
    try:
        data = request.get_json(silent=True) or {}

        is_valid, message = validate_required_fields(data, ['title', 'amount'])
        if not is_valid:
            return error_response(message, 400)

        expense = Expense(created_by=get_current_admin().id)
        message = _apply_expense_fields(expense, data)
        if message:
            return error_response(message, 400)

        db.session.add(expense)
        db.session.commit()
        logger.info('Expense {} recorded: {} {}', expense.id, expense.title, expense.amount)

        return success_response({'expense': expense.to_dict()}, 'Expense added successfully', 201)

    except Exception:
        db.session.rollback()
        logger.exception('Error creating expense')
        return error_response('Error creating expense', 500)


@expenses_bp.route('/<int:expense_id>', methods=['PUT'])
@jwt_required()
@admin_required
def update_expense(expense_id):
    expense = db.session.get(Expense, expense_id)
    if not expense:
        return error_response('Expense not found', 404)

    message = _apply_expense_fields(expense, request.get_json(silent=True) or {})
    if message:
        db.session.rollback()
        return error_response(message, 400)

    db.session.commit()
    return success_response({'expense': expense.to_dict()}, 'Expense updated successfully')


@expenses_bp.route('/<int:expense_id>', methods=['DELETE'])
@jwt_required()
@admin_required
def delete_expense(expense_id):
    expense = db.session.get(Expense, expense_id)
    if not expense:
        return error_response('Expense not found', 404)

    db.session.delete(expense)
    db.session.commit()
    return success_response(None, 'Expense deleted successfully')
