"""
AutoApply - Application configuration.

Centralized configuration using Pydantic Settings for environment variable management.

Environment Variables:
    All settings can be overridden via environment variables with AUTOAPPLY_ prefix.

    AI Settings:
        AUTOAPPLY_AI_ENABLED=true              - Toggle AI features
        AUTOAPPLY_GEMINI_API_KEY=...           - Gemini API key from aistudio.google.com
        AUTOAPPLY_GEMINI_MODEL=...             - Text model (e.g., gemini-2.5-flash)
        AUTOAPPLY_GEMINI_VISION_MODEL=...      - Model used for screenshot OCR

    Email Settings:
        AUTOAPPLY_SMTP_USERNAME=...            - SMTP login (also the From address)
        AUTOAPPLY_SMTP_PASSWORD=...            - SMTP password (Gmail: an app password)
        AUTOAPPLY_EMAIL_FROM_NAME=...          - Display name for outgoing mail

    Applicant Settings:
        AUTOAPPLY_APPLICANT_NAME=...           - Used in the email signature
        AUTOAPPLY_CV_DIR=data                  - Where the CV file lives
"""
from pydantic_settings import BaseSettings
from typing import Optional


class AISettings(BaseSettings):
    """
    AI/Gemini API configuration settings.

    Available models (as of 2025):
        - gemini-2.5-flash: Fast, multimodal, good default
        - gemini-2.5-pro: Best quality, slower
        - gemini-2.0-flash: Previous generation flash model
    """
    ai_enabled: bool = True
    gemini_api_key: Optional[str] = None
    gemini_base_url: str = "https://generativelanguage.googleapis.com/v1beta"
    gemini_model: str = "gemini-2.5-flash"
    gemini_vision_model: str = "gemini-2.5-flash"
    ai_temperature: float = 0.7
    ai_max_tokens: Optional[int] = None
    ai_timeout: float = 60.0

    # Retry on rate limits (429 / quota exceeded)
    ai_retry_max_attempts: int = 2
    ai_retry_base_delay: float = 1.0

    class Config:
        env_prefix = "AUTOAPPLY_"
        env_file = ".env"
        extra = "ignore"


class EmailSettings(BaseSettings):
    """
    SMTP configuration settings.

    For Gmail:
        1. Enable 2-step verification on the account
        2. Create an app password and set AUTOAPPLY_SMTP_PASSWORD to it
    """
    smtp_host: str = "smtp.gmail.com"
    smtp_port: int = 587
    smtp_username: Optional[str] = None
    smtp_password: Optional[str] = None
    smtp_use_tls: bool = True
    smtp_timeout: float = 30.0
    email_from_name: str = "Job Applicant"

    class Config:
        env_prefix = "AUTOAPPLY_"
        env_file = ".env"
        extra = "ignore"


class ApplicantSettings(BaseSettings):
    """Static contact details appended as the signature of every drafted email."""
    applicant_name: str = ""
    applicant_phone: str = ""
    applicant_website: str = ""
    applicant_email: str = ""

    class Config:
        env_prefix = "AUTOAPPLY_"
        env_file = ".env"
        extra = "ignore"


class CVSettings(BaseSettings):
    """Location of the fixed CV the jobs are scored against."""
    cv_dir: str = "data"
    cv_filename: str = "cv.pdf"

    class Config:
        env_prefix = "AUTOAPPLY_"
        env_file = ".env"
        extra = "ignore"


class CacheSettings(BaseSettings):
    cache_enabled: bool = True
    cache_file: str = "data/gemini_cache.json"

    class Config:
        env_prefix = "AUTOAPPLY_"
        env_file = ".env"
        extra = "ignore"


class Settings(BaseSettings):
    """Combined application settings."""
    ai: AISettings = AISettings()
    email: EmailSettings = EmailSettings()
    applicant: ApplicantSettings = ApplicantSettings()
    cv: CVSettings = CVSettings()
    cache: CacheSettings = CacheSettings()

    # CORS allowed origins (comma-separated, e.g. "http://localhost:5173,https://myapp.com")
    allowed_origins: str = "*"

    host: str = "0.0.0.0"
    port: int = 5000
    log_level: str = "INFO"

    rate_limit_enabled: bool = True

    # Screenshot uploads
    max_upload_mb: int = 10

    class Config:
        env_prefix = "AUTOAPPLY_"
        env_file = ".env"
        extra = "ignore"


# Global settings instance
settings = Settings()
