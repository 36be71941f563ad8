import os
from datetime import timedelta
from urllib.parse import urlparse
from dotenv import load_dotenv
import pymysql
pymysql.install_as_MySQLdb()

load_dotenv()


def _bool_env(name, default="False"):
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes")


class Config:
    SECRET_KEY = os.getenv('SECRET_KEY', 'change_this_secret_key')
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    SQLALCHEMY_ENGINE_OPTIONS = {
        "pool_pre_ping": True,
    }

    JWT_ALGORITHM = "HS256"
    JWT_EXPIRY = timedelta(hours=int(os.getenv("JWT_EXPIRY_HOURS", "24")))
    AUTH_COOKIE_NAME = "access_token"
    SESSION_COOKIE_SECURE = _bool_env("SESSION_COOKIE_SECURE")
    SESSION_COOKIE_SAMESITE = os.getenv("SESSION_COOKIE_SAMESITE", "Lax")

    CORS_ORIGINS = [o.strip() for o in os.getenv(
        "CORS_ORIGINS", "http://localhost:3000,http://127.0.0.1:3000"
    ).split(",") if o.strip()]

    # "memory" or "redis"
    CACHE_TYPE = os.getenv("CACHE_TYPE", "memory")
    CACHE_REDIS_URL = os.getenv("CACHE_REDIS_URL", "redis://localhost:6379/0")
    CACHE_DEFAULT_TTL = int(os.getenv("CACHE_DEFAULT_TTL", "300"))
    CACHE_MAX_ENTRIES = int(os.getenv("CACHE_MAX_ENTRIES", "1024"))

    ANALYTICS_MAX_WORKERS = int(os.getenv("ANALYTICS_MAX_WORKERS", "8"))
    ANALYTICS_TIMEOUT = float(os.getenv("ANALYTICS_TIMEOUT", "30"))

    EXPOSE_ERROR_DETAILS = False
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")


class DevConfig(Config):
    """Development Configuration"""
    DEBUG = True
    TESTING = False
    EXPOSE_ERROR_DETAILS = True
    SQLALCHEMY_DATABASE_URI = os.getenv('SQLALCHEMY_DATABASE_URI', 'sqlite:///lms_analytics.db')


class TestConfig(Config):
    TESTING = True
    DEBUG = False
    SECRET_KEY = "test-secret-key-for-hs256-signing-0001"
    SQLALCHEMY_DATABASE_URI = 'sqlite:///:memory:'
    SQLALCHEMY_ENGINE_OPTIONS = {}
    CACHE_TYPE = "memory"
    ANALYTICS_MAX_WORKERS = 2
    ANALYTICS_TIMEOUT = 10
    LOG_LEVEL = "DEBUG"


class ProdConfig(Config):
    """Production Configuration"""
    DEBUG = False
    SESSION_COOKIE_SECURE = True

    raw_db_url = os.getenv('DATABASE_URL')

    if raw_db_url:
        if raw_db_url.startswith("mysql://"):
            raw_db_url = raw_db_url.replace("mysql://", "mysql+pymysql://", 1)

        parsed_url = urlparse(raw_db_url)
        SQLALCHEMY_DATABASE_URI = f"{parsed_url.scheme}://{parsed_url.netloc}{parsed_url.path}"
    else:
        SQLALCHEMY_DATABASE_URI = os.getenv('SQLALCHEMY_DATABASE_URI', 'sqlite:///lms_analytics.db')


ENV = os.getenv('FLASK_ENV', 'production').lower()

config_dict = {
    "development": DevConfig,
    "testing": TestConfig,
    "production": ProdConfig
}

CurrentConfig = config_dict.get(ENV, ProdConfig)
