from flask import jsonify


def success_response(data=None, message='Success', status_code=200):
    """Wrap a payload in the {success, message, data} envelope"""
    return jsonify({
        'success': True,
        'message': message,
        'data': data
    }), status_code


def error_response(message='An error occurred', status_code=500, errors=None):
    body = {
        'success': False,
        'message': message
    }
    if errors:
        body['errors'] = errors
    return jsonify(body), status_code
