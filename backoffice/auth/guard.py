from flask import jsonify, redirect, request, url_for
from flask_login import current_user


def wants_json():
    if request.is_json or request.path.startswith(('/api/', '/realtime/', '/storage/')):
        return True
    best = request.accept_mimetypes.best_match(['application/json', 'text/html'])
    return best == 'application/json'


def require_admin(blueprint):
    """Register one authentication check for every view of ``blueprint``"""

    @blueprint.before_request
    def check_session():
        if current_user.is_authenticated:
            return None
        if wants_json():
            return jsonify({'error': 'Authentication required'}), 401
        return redirect(url_for('auth.login', next=request.path))

    return blueprint
