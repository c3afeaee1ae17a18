"""
Application configuration using Pydantic Settings.

Loads configuration from environment variables with validation
and type checking.
"""

from typing import Union

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Uses Pydantic for validation and type coercion.
    Reads from .env file if present.
    """

    # Application settings
    ENVIRONMENT: str = Field(default="development", description="Runtime environment")
    LOG_LEVEL: str = Field(default="INFO", description="Logging level")
    API_VERSION: str = Field(default="v1", description="API version prefix")

    # CORS settings
    ALLOWED_ORIGINS: Union[list[str], str] = Field(
        default=["http://localhost:3000", "http://localhost:5173"],
        description="Comma-separated list of allowed CORS origins",
    )

    # Server settings
    HOST: str = Field(default="0.0.0.0", description="Server host")
    PORT: int = Field(default=8000, description="Server port")

    # ZeroDB Settings
    ZERODB_API_KEY: str = Field(default="", description="ZeroDB API key")
    ZERODB_PROJECT_ID: str = Field(default="", description="ZeroDB project ID")
    ZERODB_BASE_URL: str = Field(
        default="https://api.ainative.studio", description="ZeroDB API base URL"
    )
    ZERODB_TIMEOUT: float = Field(default=30.0, description="ZeroDB request timeout")

    # Credential settings
    JWT_SECRET: str = Field(default="change-me", description="Secret used to sign access tokens")
    JWT_ALGORITHM: str = Field(default="HS256", description="Access token signing algorithm")
    JWT_EXPIRE_HOURS: int = Field(default=24, ge=1, description="Access token lifetime in hours")
    AUTH_HEADER_NAME: str = Field(
        default="x-auth-token", description="Request header carrying the access token"
    )
    BCRYPT_ROUNDS: int = Field(default=10, ge=4, le=16, description="bcrypt cost factor")

    # Gemini (generative text) settings
    GEMINI_API_KEY: str = Field(default="", description="Google Generative Language API key")
    GEMINI_MODEL: str = Field(default="gemini-pro", description="Gemini model name")
    GEMINI_BASE_URL: str = Field(
        default="https://generativelanguage.googleapis.com",
        description="Generative Language API base URL",
    )
    GEMINI_TIMEOUT: float = Field(default=30.0, description="Gemini request timeout")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",  # Ignore extra fields in .env
    )

    @field_validator("ALLOWED_ORIGINS", mode="before")
    @classmethod
    def parse_cors_origins(cls, v: Union[str, list[str]]) -> list[str]:
        """
        Parse comma-separated CORS origins into a list.

        Args:
            v: Comma-separated string of origins

        Returns:
            List of origin strings
        """
        if isinstance(v, str):
            return [origin.strip() for origin in v.split(",") if origin.strip()]
        return v

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """
        Validate log level is one of the standard Python logging levels.

        Args:
            v: Log level string

        Returns:
            Uppercase log level string

        Raises:
            ValueError: If log level is invalid
        """
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        v_upper = v.upper()
        if v_upper not in valid_levels:
            raise ValueError(f"LOG_LEVEL must be one of {valid_levels}")
        return v_upper


# Singleton instance
settings = Settings()
