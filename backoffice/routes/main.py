from flask import Blueprint, redirect, url_for, jsonify
from flask_login import current_user
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
import logging
from .. import db

logger = logging.getLogger(__name__)

main_bp = Blueprint('main', __name__)

@main_bp.route('/')
def index():
    """Send admins to the dashboard and everyone else to the login gate"""
    if current_user.is_authenticated:
        return redirect(url_for('dashboard.index'))
    return redirect(url_for('auth.login'))

@main_bp.route('/health')
def health():
    status = {'status': 'ok', 'database': 'connected'}
    try:
        db.session.execute(text('SELECT 1'))
    except SQLAlchemyError as e:
        logger.error(f"Health check could not reach the database: {str(e)}")
        status.update(status='degraded', database='unavailable')
        return jsonify(status), 503
    return jsonify(status)
