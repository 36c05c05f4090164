import os
import tempfile
from datetime import timedelta
from dotenv import load_dotenv

# Load environment variables from .env (only for local development)
if os.getenv("FLASK_ENV") != "production":
    load_dotenv()


class Config:
    """Base configuration."""

    # General settings
    SECRET_KEY = os.getenv("SECRET_KEY", "default-secret-key")

    SQLALCHEMY_DATABASE_URI = os.getenv("DATABASE_URL", "sqlite:///skillswap.db")
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY", "default-jwt-secret-key")
    JWT_ACCESS_TOKEN_EXPIRES = timedelta(hours=int(os.getenv("JWT_ACCESS_TOKEN_EXPIRES", "24")))

    # External identity provider (ID tokens exchanged on login)
    IDENTITY_TOKEN_SECRET = os.getenv("IDENTITY_TOKEN_SECRET", "default-identity-secret")
    IDENTITY_TOKEN_ALGORITHM = os.getenv("IDENTITY_TOKEN_ALGORITHM", "HS256")
    IDENTITY_TOKEN_AUDIENCE = os.getenv("IDENTITY_TOKEN_AUDIENCE")

    # Profile photo storage: "local" writes to UPLOAD_FOLDER, "s3" to the bucket below
    UPLOAD_STORAGE = os.getenv("UPLOAD_STORAGE", "local")
    UPLOAD_FOLDER = os.getenv(
        "UPLOAD_FOLDER",
        os.path.abspath(os.path.join(os.path.dirname(__file__), '..', 'uploads'))
    )
    MAX_CONTENT_LENGTH = 5 * 1024 * 1024

    # AWS S3 configuration
    AWS_ACCESS_KEY = os.getenv("AWS_ACCESS_KEY")
    AWS_SECRET_KEY = os.getenv("AWS_SECRET_KEY")
    AWS_BUCKET_NAME = os.getenv("BUCKET_NAME")
    AWS_REGION = os.getenv("AWS_REGION", "us-east-1")

    # CORS configuration
    CORS_ORIGINS = [
        origin.strip() for origin in os.getenv("CORS_ORIGINS", "").split(",") if origin.strip()
    ]

    # Browse pagination
    DEFAULT_PAGE_SIZE = 9
    MAX_PAGE_SIZE = 100

    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    # Debug mode
    DEBUG = os.getenv("FLASK_ENV") != "production"


class TestingConfig(Config):
    """Configuration used by the test suite."""

    TESTING = True
    DEBUG = False
    SECRET_KEY = "test-secret-key"
    SQLALCHEMY_DATABASE_URI = "sqlite://"
    JWT_SECRET_KEY = "test-jwt-secret-key"
    IDENTITY_TOKEN_SECRET = "test-identity-secret"
    IDENTITY_TOKEN_AUDIENCE = None
    UPLOAD_STORAGE = "local"
    UPLOAD_FOLDER = os.path.join(tempfile.gettempdir(), "skillswap-test-uploads")
    AWS_BUCKET_NAME = "skillswap-test"
    CORS_ORIGINS = ["http://localhost:3000"]
    LOG_LEVEL = "DEBUG"
