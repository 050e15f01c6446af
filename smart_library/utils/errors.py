class APIError(Exception):
    """Domain error carrying the HTTP status it should be reported with"""
    status_code = 400

    def __init__(self, message, status_code=None, errors=None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        self.errors = errors


class NotFoundError(APIError):
    status_code = 404


class ForbiddenError(APIError):
    status_code = 403


class ConflictError(APIError):
    status_code = 409


class InsufficientBalanceError(APIError):
    """Raised when a wallet debit would take the balance below zero"""

    def __init__(self, available, required):
        super().__init__(
            f'Insufficient wallet balance. Available: ₹{available:.2f}, Required: ₹{required:.2f}'
        )
        self.available = available
        self.required = required
