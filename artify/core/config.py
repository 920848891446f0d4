"""
Application configuration.
Loads every environment variable the API needs in one place.
"""
import os


class Config:
    """Centralized configuration from environment variables."""

    ENVIRONMENT = os.environ.get('ENVIRONMENT', 'development')
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')

    # Sessions
    SESSION_SECRET = os.environ.get('SESSION_SECRET', 'change-me-in-production')
    SESSION_COOKIE_NAME = os.environ.get('SESSION_COOKIE_NAME', '__artify_session')
    SESSION_ALGORITHM = 'HS256'
    REMEMBER_ME_SECONDS = 60 * 60 * 24 * 30
    DEFAULT_SESSION_SECONDS = 60 * 60 * 24

    # Firestore
    FIREBASE_CREDENTIALS_PATH = os.environ.get('FIREBASE_CREDENTIALS_PATH', '')
    FIREBASE_PROJECT_ID = os.environ.get('FIREBASE_PROJECT_ID', '')

    # Object storage for project documents
    AWS_REGION = os.environ.get('AWS_REGION', 'us-east-1')
    UPLOAD_BUCKET = os.environ.get('UPLOAD_BUCKET', 'artify-documents')
    UPLOAD_URL_EXPIRY = int(os.environ.get('UPLOAD_URL_EXPIRY', '900'))

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT == 'production'


config = Config()
