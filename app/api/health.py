import time
from datetime import datetime

from flask import Blueprint, jsonify
from sqlalchemy import text

from app.extensions import db

bp = Blueprint('health', __name__)

SERVICE_NAME = 'ai-saas-api'
SERVICE_VERSION = '1.0.0'

_started_at = time.monotonic()


@bp.route('/health', methods=['GET'])
def health():
    return jsonify({
        "status": "ok",
        "timestamp": datetime.utcnow().isoformat() + 'Z',
        "service": SERVICE_NAME,
        "version": SERVICE_VERSION,
        "uptime": time.monotonic() - _started_at,
    }), 200


@bp.route('/ready', methods=['GET'])
def ready():
    """Ready once the database answers."""
    db.session.execute(text('SELECT 1'))
    return jsonify({"status": "ready", "timestamp": datetime.utcnow().isoformat() + 'Z'}), 200


@bp.route('/live', methods=['GET'])
def live():
    return jsonify({"status": "alive", "timestamp": datetime.utcnow().isoformat() + 'Z'}), 200
