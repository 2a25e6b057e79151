import os
from dotenv import load_dotenv

# Load environment variables
load_dotenv()


def _env_bool(name: str, default: str = 'false') -> bool:
    return os.getenv(name, default).lower() == 'true'


class Settings:
    # Flask settings
    FLASK_ENV = os.getenv('FLASK_ENV', 'development')
    DEBUG = FLASK_ENV == 'development'
    PORT = int(os.getenv('PORT', 3000))
    LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO').upper()

    # CORS settings (single frontend origin, credentials allowed)
    CORS_URL = os.getenv('CORS_URL', 'http://localhost:5173')

    # Session token settings
    JWT_SECRET = os.getenv('JWT_SECRET')  # MUST be set via environment variable
    JWT_ALGORITHM = os.getenv('JWT_ALGORITHM', 'HS256')
    TOKEN_TTL_SECONDS = int(os.getenv('TOKEN_TTL_SECONDS', 60 * 60))

    # Session cookie settings. The cookie outlives the token it carries.
    AUTH_COOKIE_NAME = os.getenv('AUTH_COOKIE_NAME', 'userJWT')
    AUTH_COOKIE_MAX_AGE = int(os.getenv('AUTH_COOKIE_MAX_AGE', 24 * 60 * 60))
    AUTH_COOKIE_SECURE = _env_bool('AUTH_COOKIE_SECURE')

    # Password hashing
    BCRYPT_ROUNDS = int(os.getenv('BCRYPT_ROUNDS', 10))

    # Firebase settings
    FIREBASE_PROJECT_ID = os.getenv('FIREBASE_PROJECT_ID')
    FIRESTORE_EMULATOR_HOST = os.getenv('FIRESTORE_EMULATOR_HOST')

    MIN_SECRET_LENGTH = 32

    @classmethod
    def as_dict(cls) -> dict:
        """Upper-case settings as a mapping suitable for ``app.config``."""
        return {k: getattr(cls, k) for k in dir(cls) if k.isupper()}

    @classmethod
    def validate(cls, config=None):
        """Validate required settings"""
        config = config or cls.as_dict()

        secret = config.get('JWT_SECRET')
        if not secret:
            raise ValueError("Missing required environment variable: JWT_SECRET")

        # Validate JWT secret strength
        if len(secret) < cls.MIN_SECRET_LENGTH:
            raise ValueError(f"JWT_SECRET must be at least {cls.MIN_SECRET_LENGTH} characters long")

        if config.get('BCRYPT_ROUNDS', 10) < 4:
            raise ValueError("BCRYPT_ROUNDS must be at least 4")

        return True
