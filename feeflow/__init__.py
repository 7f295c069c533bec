"""
FeeFlow: school fee data kept in a Google Sheets spreadsheet
"""
from flask import Flask
from werkzeug.middleware.proxy_fix import ProxyFix

from .app_logger import setup_logging
from .config import get_config

__version__ = '1.0.0'


def create_app(config_name=None, services=None, **overrides):
    """Application factory.

    ``services`` lets tests hand in repositories built on fakes; otherwise
    they are built from configuration, which fails fast on missing
    credentials.
    """
    config_class = get_config(config_name)
    app = Flask(__name__)
    app.config.from_object(config_class)
    app.config.update(overrides)
    config_class.init_app(app)

    if app.config.get('PROXY_FIX'):
        # Behind one reverse proxy that sets X-Forwarded-For and -Proto
        app.wsgi_app = ProxyFix(app.wsgi_app, x_for=1, x_proto=1)

    logger = setup_logging(app.config.get('LOG_LEVEL'))

    if services is None:
        from .services import Services
        services = Services.from_settings(app.config)
    app.extensions['feeflow'] = services

    from .security import init_security
    init_security(app)

    from .health import health_bp
    from .api import api_bp
    app.register_blueprint(health_bp)
    app.register_blueprint(api_bp, url_prefix='/api')

    from .cli import register_commands
    register_commands(app)

    logger.info('FeeFlow started for spreadsheet %s', app.config.get('GOOGLE_SHEET_ID'))
    return app
