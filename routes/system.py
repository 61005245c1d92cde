"""
System routes - health checks, configuration, index reset
"""

import io
import sqlite3
import logging
from flask import Blueprint, jsonify, current_app

from reset_database import ResetRequest, file_stages, run_reset
from utils import EnumerationError, find_matches

logger = logging.getLogger(__name__)

system_bp = Blueprint('system', __name__)


def _config():
    return current_app.config['GALLERY']


@system_bp.route('/api/health', methods=['GET'])
def health_check():
    """Check system health and index statistics"""
    try:
        stats = _config().db.get_stats()
    except sqlite3.Error as e:
        logger.error(f"Error reading database stats: {e}")
        return jsonify({'status': 'error', 'database': 'unavailable', 'error': str(e)}), 503

    return jsonify({
        'status': 'ok',
        'database': 'connected',
        'stats': stats
    })


@system_bp.route('/api/config', methods=['GET'])
def get_config():
    """Get current configuration"""
    return jsonify(_config().public_dict())


@system_bp.route('/api/system/reset/preview', methods=['GET'])
def preview_reset():
    """Count what each file stage of a reset would remove"""
    stages = []

    for stage in file_stages(_config()):
        entry = {'name': stage.name, 'subject': stage.subject}

        try:
            entry['count'] = len(find_matches(stage.root, stage.pattern))
        except EnumerationError as e:
            entry['error'] = str(e)

        stages.append(entry)

    return jsonify({'stages': stages})


@system_bp.route('/api/system/reset', methods=['POST'])
def reset_index():
    """Delete and recreate the index database without asking (like --yes)"""
    config = _config()

    if not config.allow_system_reset:
        return jsonify({'error': 'System reset is disabled, set ALLOW_SYSTEM_RESET to enable it'}), 403

    try:
        # Progress markers stay out of the server output
        results = run_reset(config, ResetRequest(assume_yes=True), out=io.StringIO())
    except sqlite3.Error as e:
        logger.error(f"reset: {e}")
        return jsonify({'error': f'Database reset failed: {e}'}), 500

    return jsonify({
        'success': True,
        'stages': {name: result.to_dict() for name, result in results.items()}
    })
