"""
Application Configuration
"""
from pydantic_settings import BaseSettings
from typing import List, Optional


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    # MongoDB Configuration
    mongodb_uri: str
    database_name: str = "repair_desk"

    # API Configuration
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    api_reload: bool = True
    environment: str = "development"
    # Staff dashboard; always an allowed CORS origin
    shop_frontend_url: Optional[str] = "http://localhost:5173"
    cors_allowed_origins: List[str] = ["http://localhost:3000"]
    rate_limit_enabled: bool = True

    # Authentication
    jwt_secret_key: str
    jwt_algorithm: str = "HS256"
    jwt_expiration_hours: int = 24

    # Tickets
    ticket_id_prefix: str = "SATY"
    # Keep the first completion timestamp when a ticket is marked Completed again
    preserve_first_completion: bool = False

    # Customer notifications (SMS / WhatsApp gateway)
    notification_gateway_url: Optional[str] = None
    notification_gateway_token: Optional[str] = None

    # Logging
    log_level: str = "INFO"
    log_format: str = "text"  # text | json

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False


# Global settings instance
settings = Settings()
