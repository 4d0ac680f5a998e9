from flask import Blueprint, current_app, jsonify, redirect, request, url_for
from flask_login import login_user, logout_user, current_user
from ..models.admin import AdminUser
import logging

logger = logging.getLogger(__name__)
auth_bp = Blueprint('auth', __name__)

REMEMBER_MAX_AGE = 60 * 60 * 24 * 365


def _credentials_from_request():
    if request.is_json:
        body = request.get_json(silent=True) or {}
        remember = body.get('remember') in (True, 'true', 'on', '1')
        return body.get('email'), body.get('password'), remember
    remember = request.form.get('remember') in ('true', 'on', '1')
    return request.form.get('email'), request.form.get('password'), remember


def _safe_next(default):
    next_page = request.args.get('next')
    if not next_page or not next_page.startswith('/') or next_page.startswith('//'):
        return default
    return next_page


@auth_bp.route('/login', methods=['GET', 'POST'])
def login():
    cookie_name = current_app.config['REMEMBER_EMAIL_COOKIE']
    dashboard_url = url_for('dashboard.index')

    if current_user.is_authenticated:
        if request.method == 'POST' and request.is_json:
            return jsonify({'authenticated': True, 'redirect': dashboard_url})
        return redirect(dashboard_url)

    if request.method == 'GET':
        remembered = request.cookies.get(cookie_name)
        return jsonify({
            'authenticated': False,
            'remembered_email': remembered,
            'remember': bool(remembered),
        })

    email, password, remember = _credentials_from_request()
    email = (email or '').strip()
    if not email or not password:
        return jsonify({'error': 'Please enter both email and password'}), 400

    verifier = current_app.extensions['credentials']
    if not verifier.verify(email, password):
        logger.warning("Rejected back-office login attempt")
        return jsonify({'error': current_app.config['INVALID_CREDENTIALS_MESSAGE']}), 401

    login_user(AdminUser())
    logger.info("Admin logged in")

    next_page = _safe_next(dashboard_url)
    if request.is_json:
        response = jsonify({'authenticated': True, 'redirect': next_page})
    else:
        response = redirect(next_page)

    if remember:
        response.set_cookie(cookie_name, email, max_age=REMEMBER_MAX_AGE, httponly=True, samesite='Lax')
    else:
        response.delete_cookie(cookie_name)
    return response


@auth_bp.route('/session')
def session_state():
    if current_user.is_authenticated:
        return jsonify({'state': 'Authenticated'})
    return jsonify({'state': 'Anonymous'})


@auth_bp.route('/logout', methods=['GET', 'POST'])
def logout():
    logout_user()
    if request.is_json or request.method == 'POST':
        return jsonify({'state': 'Anonymous'})
    return redirect(url_for('auth.login'))
