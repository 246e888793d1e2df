"""
Application configuration using Pydantic settings.
"""
from pydantic_settings import BaseSettings
from typing import Optional


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Database settings
    database_url: Optional[str] = None
    sqlite_fallback_url: str = "sqlite:///./skillcircle.db"
    enable_sql_logging: bool = False

    # JWT settings
    jwt_secret_key: str = "change-this-in-production"
    jwt_algorithm: str = "HS256"
    jwt_access_token_expire_minutes: int = 60 * 24 * 30
    bcrypt_rounds: int = 12

    # AI settings
    gemini_api_key: Optional[str] = None
    gemini_model: str = "gemini-2.0-flash"
    gemini_max_tokens: int = 2048
    gemini_temperature: float = 0.3
    ai_request_timeout_seconds: float = 30.0
    ai_max_retries: int = 1

    # Server settings
    environment: str = "development"
    port: int = 5000
    cors_origins: list[str] = ["http://localhost:3000"]
    frontend_url: Optional[str] = None

    # Business rules
    default_max_members: int = 10
    enforce_request_transitions: bool = False
    require_circle_membership_for_group_messages: bool = False

    # Application settings
    app_name: str = "SkillCircle API"
    app_version: str = "0.1.0"
    debug: bool = False

    # Logging settings
    log_level: str = "INFO"
    log_format: str = "json"  # json or text
    enable_file_logging: bool = False
    log_directory: str = "logs"
    log_file_max_size_mb: int = 10
    log_file_backup_count: int = 5
    log_compression: bool = True
    app_log_file: str = "app.log"
    error_log_file: str = "error.log"
    security_log_file: str = "security.log"
    ai_log_file: str = "ai.log"
    database_log_file: str = "database.log"
    access_log_file: str = "access.log"

    # Security settings
    enable_security_headers: bool = True
    enable_request_logging: bool = True
    enable_rate_limiting: bool = True
    max_request_size_bytes: int = 1 * 1024 * 1024
    auth_rate_limit_requests: int = 10
    auth_rate_limit_window_seconds: int = 60
    ai_rate_limit_requests: int = 20
    ai_rate_limit_window_seconds: int = 3600
    rate_limit_cleanup_interval_seconds: int = 300

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == "production"

    @property
    def allowed_origins(self) -> list[str]:
        """CORS origins, including the deployed frontend when configured."""
        origins = list(self.cors_origins)
        if self.frontend_url and self.frontend_url not in origins:
            origins.append(self.frontend_url)
        return origins

    class Config:
        env_file = ".env"
        case_sensitive = False


# Global settings instance
settings = Settings()
