"""
Configuration management for the Stampcard loyalty service.
"""
import os
from dotenv import load_dotenv

load_dotenv()


def _env_int(name: str, default: int) -> int:
    """Read an integer setting from the environment."""
    value = os.getenv(name)
    if value is None or value == '':
        return default
    return int(value)


class BaseConfig:
    """Base configuration."""
    SECRET_KEY = os.getenv('SECRET_KEY', 'dev-secret-key-change-in-production')
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Display currency for minor-unit amounts (KES cents)
    CURRENCY_CODE = os.getenv('CURRENCY_CODE', 'KES')

    # Defaults applied to newly created businesses
    DEFAULT_VISITS_REQUIRED = _env_int('DEFAULT_VISITS_REQUIRED', 10)
    DEFAULT_REWARD_EXPIRY_DAYS = _env_int('DEFAULT_REWARD_EXPIRY_DAYS', 30)
    DEFAULT_REWARD_DESCRIPTION = os.getenv('DEFAULT_REWARD_DESCRIPTION', 'Free service')

    # Analytics windows
    RETENTION_WINDOW_DAYS = _env_int('RETENTION_WINDOW_DAYS', 30)
    TREND_WINDOW_DAYS = _env_int('TREND_WINDOW_DAYS', 30)
    TOP_CUSTOMERS_LIMIT = _env_int('TOP_CUSTOMERS_LIMIT', 10)

    # Listing page sizes
    RECENT_VISITS_LIMIT = _env_int('RECENT_VISITS_LIMIT', 10)
    SMS_HISTORY_LIMIT = _env_int('SMS_HISTORY_LIMIT', 50)

    # Optimistic-concurrency retries for check-ins and redemptions
    TRANSACTION_MAX_RETRIES = _env_int('TRANSACTION_MAX_RETRIES', 3)

    # Front-end origins allowed by CORS
    CORS_ORIGINS = [
        origin.strip()
        for origin in os.getenv(
            'CORS_ORIGINS',
            'http://localhost:5173,http://127.0.0.1:5173'
        ).split(',')
        if origin.strip()
    ]


class DevelopmentConfig(BaseConfig):
    """Development configuration."""
    DEBUG = True
    SQLALCHEMY_DATABASE_URI = os.getenv(
        'DATABASE_URL',
        'sqlite:///stampcard_dev.db'  # SQLite fallback for local dev
    )


class ProductionConfig(BaseConfig):
    """Production configuration."""
    DEBUG = False

    _db_url = os.getenv('DATABASE_URL', '')
    if _db_url.startswith('postgres://'):
        # SQLAlchemy requires postgresql:// not postgres://
        _db_url = _db_url.replace('postgres://', 'postgresql://', 1)

    SQLALCHEMY_DATABASE_URI = _db_url

    SQLALCHEMY_ENGINE_OPTIONS = {
        'pool_size': 5,
        'pool_recycle': 300,
        'pool_pre_ping': True,  # Verify connections before using
    }

    _secret_key = os.getenv('SECRET_KEY', '')

    @classmethod
    def validate_secret_key(cls) -> str:
        """
        Validate SECRET_KEY in production environment.

        Raises:
            RuntimeError: If SECRET_KEY is missing, empty, or contains unsafe values
        """
        if not cls._secret_key:
            raise RuntimeError(
                "CRITICAL: SECRET_KEY environment variable is not set!\n"
                "Generate one with: python -c \"import secrets; print(secrets.token_hex(32))\""
            )

        insecure_patterns = ['dev', 'change', 'default', 'test', 'secret', 'password']
        lower_key = cls._secret_key.lower()
        for pattern in insecure_patterns:
            if pattern in lower_key:
                raise RuntimeError(
                    f"CRITICAL: SECRET_KEY contains '{pattern}' which suggests it's not secure!"
                )

        if len(cls._secret_key) < 32:
            raise RuntimeError(
                "CRITICAL: SECRET_KEY is too short (minimum 32 characters required)!"
            )

        return cls._secret_key

    SECRET_KEY = _secret_key  # Validated at app startup


class TestingConfig(BaseConfig):
    """Testing configuration."""
    TESTING = True
    SQLALCHEMY_DATABASE_URI = 'sqlite:///:memory:'


config_map = {
    'development': DevelopmentConfig,
    'production': ProductionConfig,
    'testing': TestingConfig
}


def get_config(config_name: str = 'development'):
    """Get configuration class by name."""
    return config_map.get(config_name, DevelopmentConfig)


def validate_config(config_name: str = 'development') -> None:
    """
    Validate configuration before app startup.

    Raises:
        RuntimeError: If validation fails in production
    """
    if config_name == 'production':
        ProductionConfig.validate_secret_key()
