"""
Configuration for the FeeFlow sheet-backed data layer
"""
import os

from dotenv import load_dotenv

from .errors import ConfigurationError

# Load environment variables from .env file
load_dotenv()


def _env_bool(name, default=False):
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in ('1', 'true', 'yes', 'on')


class Config:
    # Flask
    DEBUG = False
    TESTING = False
    JSON_SORT_KEYS = False

    # Remote store
    SHEETS_SCOPES = ['https://www.googleapis.com/auth/spreadsheets']
    SHEETS_DEFAULT_RANGE = 'A1:Z1000'
    SHEETS_EXPORT_HOST = 'https://docs.google.com'
    SHEETS_TIMEOUT = 30
    SHEETS_MAX_ATTEMPTS = 3
    SHEETS_BACKOFF_SECONDS = 2
    SMS_TEMPLATE_TTL = 300  # 5 minutes

    # SMS gateway
    FROG_API_BASE_URL = 'https://frogapi.wigal.com.gh/api/v3'
    FROG_SENDER_ID = 'CHARIOT EDU'

    @staticmethod
    def init_app(app):
        env = os.environ
        app.config.setdefault('SECRET_KEY', env.get('SECRET_KEY', os.urandom(24)))
        app.config.setdefault(
            'GOOGLE_SHEET_ID',
            env.get('GOOGLE_SHEET_ID') or env.get('NEXT_PUBLIC_SPREADSHEET_ID'),
        )
        app.config.setdefault('GOOGLE_SERVICE_ACCOUNT_EMAIL', env.get('GOOGLE_SERVICE_ACCOUNT_EMAIL'))
        app.config.setdefault('GOOGLE_PRIVATE_KEY', env.get('GOOGLE_PRIVATE_KEY'))
        app.config.setdefault('GOOGLE_SERVICE_ACCOUNT_FILE', env.get('GOOGLE_SERVICE_ACCOUNT_FILE'))
        app.config.setdefault('FROG_API_KEY', env.get('FROG_API_KEY'))
        app.config.setdefault('FROG_USERNAME', env.get('FROG_USERNAME'))

        for key, cast in (('SHEETS_TIMEOUT', float), ('SHEETS_MAX_ATTEMPTS', int),
                          ('SHEETS_BACKOFF_SECONDS', float), ('SMS_TEMPLATE_TTL', float)):
            if env.get(key):
                try:
                    app.config[key] = cast(env[key])
                except ValueError:
                    raise ConfigurationError(f"{key} must be a number, got {env[key]!r}")

        for key in ('SHEETS_EXPORT_HOST', 'FROG_API_BASE_URL', 'FROG_SENDER_ID'):
            if env.get(key):
                app.config[key] = env[key]


class DevelopmentConfig(Config):
    DEBUG = True


class ProductionConfig(Config):
    PREFERRED_URL_SCHEME = 'https'

    @staticmethod
    def init_app(app):
        Config.init_app(app)
        app.config['PROXY_FIX'] = _env_bool('PROXY_FIX', True)


class TestingConfig(Config):
    TESTING = True
    SHEETS_BACKOFF_SECONDS = 0
    GOOGLE_SHEET_ID = 'test-sheet'

    @staticmethod
    def init_app(app):
        pass


config_by_name = {
    'development': DevelopmentConfig,
    'production': ProductionConfig,
    'testing': TestingConfig,
}


def get_config(name=None):
    name = name or os.environ.get('FLASK_ENV') or 'production'
    return config_by_name.get(name, ProductionConfig)


def require_spreadsheet_id(config):
    """Return the spreadsheet id from a config mapping or fail loudly"""
    spreadsheet_id = config.get('GOOGLE_SHEET_ID')
    if not spreadsheet_id:
        raise ConfigurationError(
            'GOOGLE_SHEET_ID is not set; the spreadsheet id is required to start'
        )
    return spreadsheet_id
