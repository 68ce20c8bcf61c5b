"""
Application configuration with Pydantic Settings for validation and type safety.
Supports environment-specific configurations and .env file loading.
"""

from enum import Enum
from typing import Optional
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field, field_validator


class Environment(str, Enum):
    """Application environment types"""

    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"
    TESTING = "testing"


class Settings(BaseSettings):
    """
    Application settings with validation.
    Settings are loaded from environment variables or .env file.
    """

    # Application settings
    app_name: str = Field(default="DietPlanner", description="Application name")
    app_version: str = Field(default="1.0.0", description="Application version")
    environment: Environment = Field(
        default=Environment.DEVELOPMENT, description="Application environment"
    )
    debug: bool = Field(default=False, description="Debug mode")

    # Server settings
    host: str = Field(default="0.0.0.0", description="Server host")
    port: int = Field(default=4000, ge=1, le=65535, description="Server port")

    # Database settings
    database_url: str = Field(
        default="postgresql+psycopg2://postgres@localhost:5432/diet_planner",
        description="SQLAlchemy database URL",
    )
    db_echo: bool = Field(default=False, description="SQLAlchemy echo SQL statements")
    db_init_attempts: int = Field(
        default=8, ge=1, description="Database initialization retry attempts"
    )
    db_init_delay_sec: float = Field(
        default=2.0, ge=0, description="Delay between DB init attempts"
    )

    # Authentication
    jwt_secret: str = Field(
        default="change-me-in-production", description="Secret used to sign JWTs"
    )
    jwt_algorithm: str = Field(default="HS256", description="JWT signing algorithm")
    jwt_expires_days: int = Field(default=7, ge=1, description="JWT lifetime in days")
    password_hash_method: str = Field(
        default="scrypt", description="werkzeug password hashing method"
    )
    login_max_attempts: int = Field(
        default=5, ge=1, description="Login attempts allowed per window"
    )
    login_window_sec: int = Field(
        default=15 * 60, ge=1, description="Login rate limit window in seconds"
    )
    verification_token_bytes: int = Field(
        default=32, ge=16, description="Random bytes in verification/reset tokens"
    )
    reset_token_ttl_sec: int = Field(
        default=60 * 60, ge=60, description="Password reset token lifetime"
    )

    # OpenAI / LangChain
    openai_api_key: Optional[str] = Field(default=None, description="OpenAI API key")
    openai_model: str = Field(default="gpt-4o", description="Chat model name")
    openai_temperature: float = Field(default=0.7, ge=0, le=2)
    openai_max_tokens: int = Field(default=2500, ge=1)
    openai_timeout_sec: float = Field(
        default=60.0, gt=0, description="Per-request timeout"
    )
    openai_max_retries: int = Field(default=2, ge=0)
    plan_generation_timeout_sec: float = Field(
        default=240.0, gt=0, description="Timeout for a whole 28-meal plan request"
    )
    meal_generation_timeout_sec: float = Field(
        default=30.0, gt=0, description="Timeout for one meal in chunked generation"
    )
    chunk_delay_sec: float = Field(
        default=1.0, ge=0, description="Pause between chunked generation batches"
    )

    # Email settings
    smtp_host: str = Field(default="smtp.gmail.com", description="SMTP host")
    smtp_port: int = Field(default=587, ge=1, le=65535, description="SMTP port")
    smtp_secure: bool = Field(default=False, description="Use implicit TLS (SMTPS)")
    smtp_user: Optional[str] = Field(default=None, description="SMTP username")
    smtp_pass: Optional[str] = Field(default=None, description="SMTP password")
    from_email: str = Field(
        default="noreply@dietplanner.com", description="Sender address"
    )
    client_url: str = Field(
        default="http://localhost:3000", description="Front-end base URL for links"
    )

    # LangSmith evaluations
    langsmith_api_key: Optional[str] = Field(default=None, description="LangSmith key")
    langsmith_endpoint: str = Field(
        default="https://api.smith.langchain.com", description="LangSmith API URL"
    )
    langsmith_project: str = Field(
        default="diet-planner-evals", description="LangSmith project name"
    )

    # Logging
    log_level: str = Field(default="INFO", description="Logging level")
    log_format: str = Field(
        default="%(asctime)s %(levelname)s %(name)s: %(message)s",
        description="Log format string",
    )

    # CORS settings
    cors_origins: list[str] = Field(
        default=["http://localhost:3000"],
        description="Allowed CORS origins",
    )
    cors_allow_credentials: bool = Field(
        default=True, description="Allow CORS credentials"
    )
    cors_allow_methods: list[str] = Field(
        default=["*"], description="Allowed HTTP methods"
    )
    cors_allow_headers: list[str] = Field(
        default=["*"], description="Allowed HTTP headers"
    )

    # API settings
    api_prefix: str = Field(default="", description="API route prefix")
    api_title: str = Field(
        default="Diet Planner API", description="API documentation title"
    )
    api_description: str = Field(
        default="AI-assisted weekly diet planning with GraphQL and streaming generation",
        description="API documentation description",
    )

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=False, extra="ignore"
    )

    @field_validator("environment", mode="before")
    @classmethod
    def validate_environment(cls, v):
        """Validate and normalize environment value"""
        if isinstance(v, str):
            return Environment(v.lower())
        return v

    def is_production(self) -> bool:
        """Check if running in production environment"""
        return self.environment == Environment.PRODUCTION

    def is_development(self) -> bool:
        """Check if running in development environment"""
        return self.environment == Environment.DEVELOPMENT

    def is_testing(self) -> bool:
        """Check if running in testing environment"""
        return self.environment == Environment.TESTING


# Global settings instance
settings = Settings()
