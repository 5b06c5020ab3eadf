import logging

from flask import Flask, jsonify
from werkzeug.exceptions import HTTPException

from Staffluent.app.config import Config
from Staffluent.app.logging_config import setup_logging

logger = logging.getLogger(__name__)


def create_app(config_overrides=None):
    """
    Application Factory Pattern to initialize the Flask App
    """
    app = Flask(__name__)
    app.config.from_object(Config)
    if config_overrides:
        app.config.update(config_overrides)

    setup_logging(app.config['LOG_LEVEL'])

    # Imports are done here to avoid circular import errors
    from Staffluent.app.routes.business_chatbot import chatbot_bp
    from Staffluent.app.routes.knowledge_base import knowledge_bp

    app.register_blueprint(chatbot_bp)
    app.register_blueprint(knowledge_bp)

    @app.errorhandler(HTTPException)
    def handle_http_error(e):
        return jsonify({'status': 'error', 'message': e.description}), e.code

    @app.errorhandler(Exception)
    def handle_unexpected_error(e):
        logger.exception("Unhandled error: %s", e)
        return jsonify({'status': 'error', 'message': 'Internal server error'}), 500

    return app
