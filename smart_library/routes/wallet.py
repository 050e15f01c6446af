from flask import Blueprint, request
from loguru import logger
from smart_library import db
from smart_library.models.wallet import WalletTransaction
from smart_library.services.wallet import credit_wallet
from smart_library.utils.decorators import user_required, get_current_user
from smart_library.utils.errors import APIError
from smart_library.utils.responses import success_response, error_response
from smart_library.utils.validators import validate_positive_amount

wallet_bp = Blueprint('wallet', __name__)


@wallet_bp.route('/', methods=['GET'])
@user_required
def get_wallet():
    """Balance and the 50 most recent transactions"""
    user = get_current_user()
    transactions = WalletTransaction.query.filter_by(user_id=user.id) \
        .order_by(WalletTransaction.created_at.desc(), WalletTransaction.id.desc()).limit(50).all()

    return success_response({
        'balance': float(user.wallet_balance or 0),
        'transactions': [transaction.to_dict() for transaction in transactions]
    })


@wallet_bp.route('/recharge', methods=['POST'])
@user_required
def recharge_wallet():
    """
    Add money to the wallet
    ---
    Request body:
    {
        "amount": float,
        "payment_method": "string",
        "transaction_id": "string (optional)"
    }
    """
    try:
        user = get_current_user()
        data = request.get_json(silent=True) or {}

        amount, message = validate_positive_amount(data.get('amount'))
        if amount is None:
            return error_response(message, 400)

        method = data.get('payment_method') or 'online'
        description = f'Wallet recharge via {method}'
        if data.get('transaction_id'):
            description += f" ({data['transaction_id']})"

        transaction = credit_wallet(user, amount, 'recharge', description=description)
        db.session.commit()

        return success_response({
            'balance': float(transaction.balance_after),
            'message': 'Wallet recharged successfully'
        }, 'Money added to wallet successfully', 201)

    except APIError:
        raise
    except Exception:
        db.session.rollback()
        logger.exception('Error recharging wallet')
        return error_response('Error adding money to wallet', 500)
