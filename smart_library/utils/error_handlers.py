from loguru import logger
from werkzeug.exceptions import HTTPException
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from smart_library import db
from smart_library.utils.errors import APIError
from smart_library.utils.responses import error_response


def register_error_handlers(app):
    """Register error handlers for the application"""

    @app.errorhandler(APIError)
    def handle_api_error(error):
        db.session.rollback()
        return error_response(error.message, error.status_code, error.errors)

    @app.errorhandler(400)
    def bad_request(error):
        return error_response('Bad request', 400)

    @app.errorhandler(403)
    def forbidden(error):
        return error_response('Insufficient permissions', 403)

    @app.errorhandler(404)
    def not_found(error):
        return error_response('Route not found', 404)

    @app.errorhandler(405)
    def method_not_allowed(error):
        return error_response('Method not allowed', 405)

    @app.errorhandler(413)
    def payload_too_large(error):
        return error_response('File size too large. Maximum size is 5MB', 413)

    @app.errorhandler(500)
    def internal_server_error(error):
        return error_response('Internal Server Error', 500)

    @app.errorhandler(IntegrityError)
    def handle_integrity_error(error):
        db.session.rollback()
        logger.warning('Integrity error: {}', error.orig)
        return error_response('Duplicate entry or constraint violation', 409)

    @app.errorhandler(SQLAlchemyError)
    def handle_db_error(error):
        db.session.rollback()
        logger.exception('Database error')
        return error_response('An error occurred with the database', 500)

    @app.errorhandler(Exception)
    def handle_unexpected_error(error):
        if isinstance(error, HTTPException):
            return error
        logger.exception('Unhandled error')
        return error_response('Internal Server Error', 500)
