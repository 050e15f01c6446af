import os
from datetime import timedelta
from dotenv import load_dotenv

load_dotenv()


class Config:
    """Base configuration"""
    SECRET_KEY = os.getenv('SECRET_KEY', 'your-secret-key-here-change-in-production')
    SQLALCHEMY_DATABASE_URI = os.getenv('DATABASE_URL', 'sqlite:///smart_library.db')
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    JWT_SECRET_KEY = os.getenv('JWT_SECRET_KEY', 'your-secret-key-here-change-in-production')
    JWT_ACCESS_TOKEN_EXPIRES = timedelta(days=int(os.getenv('JWT_EXPIRE_DAYS', '30')))
    JWT_COOKIE_CSRF_PROTECT = False

    # Impersonation tokens are short lived regardless of JWT_EXPIRE_DAYS
    IMPERSONATION_TOKEN_EXPIRES = timedelta(hours=2)
    PASSWORD_RESET_EXPIRES = timedelta(hours=1)

    # Uploads
    UPLOAD_FOLDER = os.getenv('UPLOAD_FOLDER', os.path.join(os.getcwd(), 'uploads'))
    MAX_UPLOAD_MB = int(os.getenv('MAX_UPLOAD_MB', '5'))
    MAX_CONTENT_LENGTH = 10 * MAX_UPLOAD_MB * 1024 * 1024

    # Business settings
    REFERRAL_BONUS = float(os.getenv('REFERRAL_BONUS', '100'))
    DEFAULT_GST_PERCENTAGE = float(os.getenv('DEFAULT_GST_PERCENTAGE', '18'))

    CORS_ORIGINS = os.getenv('CORS_ORIGINS', 'http://localhost:3000,http://127.0.0.1:3000').split(',')
    LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')


class DevelopmentConfig(Config):
    """Development configuration"""
    DEBUG = True
    LOG_LEVEL = os.getenv('LOG_LEVEL', 'DEBUG')


class ProductionConfig(Config):
    """Production configuration"""
    DEBUG = False


class TestingConfig(Config):
    """Testing configuration"""
    TESTING = True
    SQLALCHEMY_DATABASE_URI = 'sqlite:///:memory:'
    JWT_SECRET_KEY = 'testing-jwt-secret-key-that-is-long-enough-for-hs256'
    SECRET_KEY = 'testing-secret-key'
    LOG_LEVEL = 'WARNING'


config = {
    'development': DevelopmentConfig,
    'production': ProductionConfig,
    'testing': TestingConfig,
    'default': DevelopmentConfig
}
