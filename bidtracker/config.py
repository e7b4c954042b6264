import os
from datetime import timedelta
from dotenv import load_dotenv

load_dotenv()

DEFAULT_JOB_STATUSES = ['In Progress', 'Submitted', 'Won', 'Lost', 'On Hold', 'Cancelled']


def _env_list(name, default):
    value = os.environ.get(name)
    if not value:
        return list(default)
    return [item.strip() for item in value.split(',') if item.strip()]


class Config:
    """Base configuration shared by all environments"""

    # Security Configuration
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'dev-secret-key-change-in-production'

    @staticmethod
    def get_database_url():
        """Get the local store database URL string"""
        database_url = os.environ.get('DATABASE_URL')

        if database_url:
            # Ensure we're using postgresql:// not postgres://
            if database_url.startswith('postgres://'):
                database_url = database_url.replace('postgres://', 'postgresql://', 1)
            return database_url
        return 'sqlite:///bidtracker.db'

    SQLALCHEMY_DATABASE_URI = None  # Will be set in __init__
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ENGINE_OPTIONS = {
        'pool_pre_ping': True,
    }

    # Remote document store and auth (Supabase)
    SUPABASE_URL = os.environ.get('SUPABASE_URL')
    SUPABASE_KEY = os.environ.get('SUPABASE_KEY')

    # 'remote', 'local' or 'auto' (remote with local fallback)
    STORAGE_BACKEND = os.environ.get('STORAGE_BACKEND', 'auto').lower()

    # Seconds before the in-memory board reloads from the backend
    BOARD_MAX_AGE_SECONDS = int(os.environ.get('BOARD_MAX_AGE_SECONDS', 30))

    # Business settings
    TIMEZONE = os.environ.get('TIMEZONE', 'America/Los_Angeles')
    COMPANY_NAME = os.environ.get('COMPANY_NAME', 'Bid Tracker')
    JOB_STATUSES = _env_list('JOB_STATUSES', DEFAULT_JOB_STATUSES)

    # Session Configuration
    PERMANENT_SESSION_LIFETIME = timedelta(hours=24)
    SESSION_COOKIE_HTTPONLY = True
    SESSION_COOKIE_SAMESITE = 'Lax'
    SESSION_COOKIE_NAME = 'bidtracker_auth'

    CORS_ORIGINS = _env_list('CORS_ORIGINS', [
        'http://localhost:3000',
        'http://127.0.0.1:3000',
    ])
    CORS_SUPPORTS_CREDENTIALS = True

    # Attachment storage
    AZURE_STORAGE_CONNECTION_STRING = os.environ.get('AZURE_STORAGE_CONNECTION_STRING')
    AZURE_STORAGE_CONTAINER_NAME = os.environ.get('AZURE_STORAGE_CONTAINER_NAME', 'attachments')
    MAX_CONTENT_LENGTH = 16 * 1024 * 1024  # 16MB max file size
    UPLOAD_FOLDER = os.environ.get('UPLOAD_FOLDER', 'uploads')

    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')

    def __init__(self):
        self.SQLALCHEMY_DATABASE_URI = self.get_database_url()


class DevelopmentConfig(Config):
    """Development configuration for local testing"""
    DEBUG = True
    DEVELOPMENT = True

    def __init__(self):
        super().__init__()
        self.SESSION_COOKIE_SECURE = False

        dev_database_url = os.environ.get('DEV_DATABASE_URL')
        if dev_database_url:
            if dev_database_url.startswith('postgres://'):
                dev_database_url = dev_database_url.replace('postgres://', 'postgresql://', 1)
            self.SQLALCHEMY_DATABASE_URI = dev_database_url


class ProductionConfig(Config):
    """Production configuration"""
    DEBUG = False
    DEVELOPMENT = False
    SESSION_COOKIE_SECURE = True

    def __init__(self):
        super().__init__()

        secret_key = os.environ.get('SECRET_KEY')
        if not secret_key:
            raise ValueError("SECRET_KEY environment variable is required for production")
        self.SECRET_KEY = secret_key

        if self.STORAGE_BACKEND != 'local' and not (self.SUPABASE_URL and self.SUPABASE_KEY):
            print("WARNING: SUPABASE_URL/SUPABASE_KEY not set - data will be kept in local storage only")


class TestingConfig(Config):
    """Testing configuration"""
    TESTING = True
    SECRET_KEY = 'testing-secret-key'
    STORAGE_BACKEND = 'local'
    BOARD_MAX_AGE_SECONDS = 0

    def __init__(self):
        super().__init__()
        self.SQLALCHEMY_DATABASE_URI = 'sqlite:///:memory:'
        self.SQLALCHEMY_ENGINE_OPTIONS = {}
        self.AZURE_STORAGE_CONNECTION_STRING = None
        self.CORS_ORIGINS = ['*']


# Configuration mapping
config = {
    'development': DevelopmentConfig,
    'production': ProductionConfig,
    'testing': TestingConfig,
    'default': DevelopmentConfig
}


def get_config_name():
    """Detect environment from the process environment"""

    flask_env = os.environ.get('FLASK_ENV', '').lower()
    if flask_env in ['production', 'testing', 'development']:
        return flask_env

    # Azure App Service sets this for deployed sites
    if os.environ.get('WEBSITE_SITE_NAME'):
        return 'production'

    if os.environ.get('TESTING') or os.environ.get('CI'):
        return 'testing'

    return 'development'


__all__ = [
    'config',
    'get_config_name',
    'DEFAULT_JOB_STATUSES',
]
