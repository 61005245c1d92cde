"""
Gallery Maintenance - Flask Application
Small REST API exposing index health, configured paths, and the reset tooling

All routes are organized into Blueprints in the routes/ folder.
"""

import logging
from flask import Flask, jsonify

from shared import Config
from routes import system_bp

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def create_app(config: Config = None) -> Flask:
    """Build the Flask app around an initialized gallery configuration"""
    if config is None:
        config = Config.from_env()
        config.init()

    app = Flask(__name__)
    app.config['GALLERY'] = config

    # Register all blueprints
    app.register_blueprint(system_bp)

    # ============ ERROR HANDLERS ============

    @app.errorhandler(404)
    def not_found(error):
        return jsonify({'error': 'Not found'}), 404

    @app.errorhandler(500)
    def internal_error(error):
        return jsonify({'error': 'Internal server error'}), 500

    return app


# ============ MAIN ============

if __name__ == '__main__':
    app = create_app()
    config = app.config['GALLERY']

    print(f"""
Gallery Maintenance API

Database:  {config.database_path}
Cache:     {config.cache_path}
Sidecars:  {config.sidecar_path}
Albums:    {config.albums_path}

Open: http://localhost:5000/api/health
    """)

    app.run(
        host='127.0.0.1',
        port=5000,
        debug=False
    )
