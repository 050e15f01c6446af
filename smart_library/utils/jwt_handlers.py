from flask import jsonify


def _unauthorized(message):
    return jsonify({'success': False, 'message': message}), 401


def register_jwt_handlers(jwt):
    """Register JWT error handlers"""

    @jwt.expired_token_loader
    def expired_token_callback(jwt_header, jwt_payload):
        """Handler for expired tokens"""
        if jwt_payload.get('type') == 'impersonation':
            return _unauthorized('Impersonation session has expired. Please start a new session.')
        return _unauthorized('Token has expired. Please login again.')

    @jwt.invalid_token_loader
    def invalid_token_callback(error):
        """Handler for invalid tokens"""
        return _unauthorized('Not authorized, token failed')

    @jwt.unauthorized_loader
    def missing_token_callback(error):
        """Handler for missing tokens"""
        return _unauthorized('Not authorized, no token')

    @jwt.revoked_token_loader
    def revoked_token_callback(jwt_header, jwt_payload):
        return _unauthorized('This token has been revoked. Please login again.')

    @jwt.token_verification_failed_loader
    def token_verification_failed_callback(jwt_header, jwt_payload):
        return _unauthorized('Token verification failed')
