"""Wallet ledger: every balance change writes a WalletTransaction."""
from loguru import logger
from smart_library import db
from smart_library.models.user import User
from smart_library.models.wallet import WalletTransaction, TransactionType, ReferenceType
from smart_library.utils.errors import APIError, InsufficientBalanceError


def _apply(user, amount, transaction_type, reference_type, description, reference_id):
    amount = round(float(amount), 2)
    if amount <= 0:
        raise APIError('Amount must be greater than 0')

    # Re-read the row so concurrent movements serialise on databases that lock
    user = db.session.get(User, user.id, with_for_update=True, populate_existing=True)
    balance_before = round(float(user.wallet_balance or 0), 2)

    if transaction_type == TransactionType.DEBIT:
        if amount > balance_before:
            raise InsufficientBalanceError(balance_before, amount)
        balance_after = round(balance_before - amount, 2)
    else:
        balance_after = round(balance_before + amount, 2)

    user.wallet_balance = balance_after
    transaction = WalletTransaction(
        user_id=user.id,
        transaction_type=transaction_type,
        amount=amount,
        balance_before=balance_before,
        balance_after=balance_after,
        description=description,
        reference_type=ReferenceType(reference_type),
        reference_id=reference_id
    )
    db.session.add(transaction)
    logger.info('Wallet {} of {} for user {} ({} -> {})',
                transaction_type.value, amount, user.id, balance_before, balance_after)
    return transaction


def credit_wallet(user, amount, reference_type, description=None, reference_id=None):
    """Add money to a member's wallet. The caller commits."""
    return _apply(user, amount, TransactionType.CREDIT, reference_type, description, reference_id)


def debit_wallet(user, amount, reference_type, description=None, reference_id=None):
    """
    Take money from a member's wallet. The caller commits.

    Raises InsufficientBalanceError when the balance does not cover the amount.
    """
    return _apply(user, amount, TransactionType.DEBIT, reference_type, description, reference_id)
