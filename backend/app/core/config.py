from pydantic_settings import BaseSettings
from typing import List, Any
import json


def parse_cors_origins(v: Any) -> List[str]:
    """Parse CORS origins from string or list"""
    if isinstance(v, list):
        return v
    if isinstance(v, str):
        # Try JSON parsing first
        if v.startswith('['):
            try:
                return json.loads(v)
            except json.JSONDecodeError:
                pass
        # Fall back to comma-separated
        return [origin.strip() for origin in v.split(',') if origin.strip()]
    return []


def parse_extensions(v: Any) -> List[str]:
    """Parse allowed extensions from string or list"""
    if isinstance(v, list):
        return v
    if isinstance(v, str):
        if v.startswith('['):
            try:
                return json.loads(v)
            except json.JSONDecodeError:
                pass
        return [ext.strip().lower().lstrip('.') for ext in v.split(',') if ext.strip()]
    return []


class Settings(BaseSettings):
    """Application settings - all configurable via environment variables"""

    # ==========================================
    # Application
    # ==========================================
    APP_NAME: str = "TRIZEN CMS"
    ENVIRONMENT: str = "development"
    DEBUG: bool = True
    API_VERSION: str = "v1"

    # Server Configuration
    SERVER_HOST: str = "0.0.0.0"
    SERVER_PORT: int = 5000

    # ==========================================
    # Database
    # ==========================================
    DATABASE_URL: str = "sqlite+aiosqlite:///./trizen_cms.db"
    DB_POOL_SIZE: int = 10
    DB_MAX_OVERFLOW: int = 20
    DB_ECHO: bool = False

    # ==========================================
    # Redis (optional - rate limit storage)
    # ==========================================
    REDIS_URL: str = ""

    # ==========================================
    # Authentication
    # ==========================================
    JWT_SECRET_KEY: str = "CHANGE_ME"
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 10080  # 7 days
    BCRYPT_ROUNDS: int = 12  # 4 for dev (fast), 12 for prod (secure)

    # Seed admin (create_admin_user.py)
    ADMIN_EMAIL: str = "admin@trizenventures.com"
    ADMIN_PASSWORD: str = "CHANGE_ME"
    ADMIN_NAME: str = "System Administrator"

    # ==========================================
    # CORS (stored as comma-separated string, parsed to list)
    # ==========================================
    CORS_ORIGINS_STR: str = "http://localhost:3000,http://localhost:8080"

    @property
    def CORS_ORIGINS(self) -> List[str]:
        """Parse CORS origins from comma-separated string"""
        return parse_cors_origins(self.CORS_ORIGINS_STR)

    # ==========================================
    # Rate Limiting
    # ==========================================
    RATE_LIMIT_ENABLED: bool = True
    RATE_LIMIT_PER_MINUTE: int = 100

    # ==========================================
    # Uploads
    # ==========================================
    MAX_REQUEST_SIZE: int = 10485760  # 10MB
    MAX_CSV_UPLOAD_SIZE: int = 5242880  # 5MB
    ALLOWED_CSV_CONTENT_TYPES_STR: str = "text/csv"
    ALLOWED_CSV_EXTENSIONS_STR: str = "csv"

    @property
    def ALLOWED_CSV_CONTENT_TYPES(self) -> List[str]:
        return [t.strip().lower() for t in self.ALLOWED_CSV_CONTENT_TYPES_STR.split(',') if t.strip()]

    @property
    def ALLOWED_CSV_EXTENSIONS(self) -> List[str]:
        """Parse allowed upload extensions from comma-separated string"""
        return parse_extensions(self.ALLOWED_CSV_EXTENSIONS_STR)

    # ==========================================
    # Problem identifiers
    # ==========================================
    ID_ALLOCATION_MAX_RETRIES: int = 3  # commit retries after a uniqueness conflict
    ID_ALLOCATION_MAX_PROBES: int = 50  # counter advances past already-taken identifiers

    # ==========================================
    # Logging
    # ==========================================
    LOG_LEVEL: str = "INFO"
    LOG_FILE: str = "logs/app.log"

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"  # Ignore extra fields in .env that aren't defined in Settings


# Create settings instance
settings = Settings()
