from flask import Blueprint, current_app, jsonify, request

from . import __version__

health_bp = Blueprint('health', __name__)


@health_bp.route('/health')
def health_check():
    """Liveness check; add ?deep=1 to list sheets through the API"""
    payload = {
        'status': 'ok',
        'message': 'Service is running',
        'version': __version__,
    }
    if request.args.get('deep'):
        listing = current_app.extensions['feeflow'].client.list_sheets()
        payload['sheets'] = 'reachable' if listing.success else 'unreachable'
        if not listing.success:
            payload['status'] = 'degraded'
            payload['message'] = listing.message
            return jsonify(payload), 503
    return jsonify(payload)
