from flask import Blueprint, request
from flask_jwt_extended import jwt_required
from smart_library import db
from smart_library.models.finance import GatewaySettings
from smart_library.services.audit import log_admin_action
from smart_library.utils.decorators import admin_required, get_current_admin
from smart_library.utils.helpers import parse_bool
from smart_library.utils.responses import success_response, error_response

gateway_bp = Blueprint('gateway', __name__)

TEXT_FIELDS = ('gateway_name', 'api_key', 'api_secret', 'merchant_id', 'webhook_secret', 'currency')
NUMERIC_FIELDS = ('gst_percentage', 'service_charge')
FLAG_FIELDS = ('is_test_mode', 'is_active')


@gateway_bp.route('/', methods=['GET'])
@jwt_required()
@admin_required
def get_settings():
    settings = GatewaySettings.current()
    if not settings:
        return success_response({'settings': dict(GatewaySettings.DEFAULTS)})
    return success_response({'settings': settings.to_dict()})


@gateway_bp.route('/', methods=['POST'])
@jwt_required()
@admin_required
def save_settings():
    """Create or update the gateway settings row"""
    data = request.get_json(silent=True) or {}

    settings = GatewaySettings.current()
    created = settings is None
    if created:
        settings = GatewaySettings(**GatewaySettings.DEFAULTS)
        db.session.add(settings)

    for field in TEXT_FIELDS:
        if field in data:
            setattr(settings, field, data[field])
    for field in NUMERIC_FIELDS:
        if field in data:
            try:
                value = float(data[field])
            except (TypeError, ValueError):
                db.session.rollback()
                return error_response(f'{field} must be a number', 400)
            if value < 0:
                db.session.rollback()
                return error_response(f'{field} cannot be negative', 400)
            setattr(settings, field, value)
    for field in FLAG_FIELDS:
        if field in data:
            setattr(settings, field, parse_bool(data[field]))

    log_admin_action(get_current_admin().id, 'gateway_settings_updated',
                     details={'fields': sorted(k for k in data if k not in ('api_key', 'api_secret',
                                                                             'webhook_secret'))})
    db.session.commit()

    return success_response({'settings': settings.to_dict()}, 'Gateway settings saved successfully',
                            201 if created else 200)
