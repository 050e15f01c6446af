from flask import current_app
from flask_jwt_extended import create_access_token


def generate_token(identity, token_type='user', expires_delta=None, **claims):
    """Access token whose `type` claim says which audience it is for"""
    additional_claims = {'type': token_type}
    additional_claims.update(claims)
    return create_access_token(
        identity=str(identity),
        additional_claims=additional_claims,
        expires_delta=expires_delta if expires_delta is not None else current_app.config['JWT_ACCESS_TOKEN_EXPIRES']
    )


def generate_impersonation_token(user_id, admin_id):
    return generate_token(
        user_id,
        'impersonation',
        expires_delta=current_app.config['IMPERSONATION_TOKEN_EXPIRES'],
        admin_id=admin_id
    )
