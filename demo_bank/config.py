"""Configuration management using Pydantic Settings"""

from typing import List, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables"""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Database
    database_url: str = "sqlite:///./bank.db"

    # Sessions
    jwt_secret: str = "bank-simulation-secret-change-in-production"
    jwt_algorithm: str = "HS256"
    session_ttl_days: int = 7
    cookie_name: str = "bank_token"
    environment: str = "development"

    # Ledger
    seed_balance_cents: int = 100_000  # $1000 starting balance
    history_limit: int = 50

    # External Services
    huggingface_api_key: Optional[str] = None
    chat_api_url: str = "https://router.huggingface.co/v1/chat/completions"
    chat_model: str = "meta-llama/Llama-3.2-3B-Instruct"

    # Browser clients; credentialed requests get their Origin echoed back
    cors_origins: List[str] = ["*"]

    # Service
    service_name: str = "demo-bank"
    log_level: str = "INFO"

    # HTTP Client
    http_timeout_seconds: float = 30.0

    @property
    def cookie_secure(self) -> bool:
        return self.environment == "production"


settings = Settings()
