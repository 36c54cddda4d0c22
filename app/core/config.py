"""
Advocacia SaaS - Configuration
"""
from pydantic_settings import BaseSettings
from functools import lru_cache
from typing import Optional
import secrets
from pathlib import Path
from dotenv import load_dotenv

# Carrega .env com override para sobrescrever variáveis do sistema
env_file = Path(__file__).parent.parent.parent / ".env"
if env_file.exists():
    load_dotenv(env_file, override=True)


class Settings(BaseSettings):
    # App
    APP_NAME: str = "Advocacia SaaS API"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False
    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = "INFO"

    # Server
    HOST: str = "0.0.0.0"
    PORT: int = 8080

    # Control plane (schema admin): tenants, usuarios, tokens, chaves
    DATABASE_URL: str = "sqlite+aiosqlite:///./advocacia.db"
    ADMIN_SCHEMA: str = "admin"

    # PostgreSQL dos schemas de tenant
    POSTGRES_HOST: str = "localhost"
    POSTGRES_PORT: int = 5432
    POSTGRES_USER: str = "postgres"
    POSTGRES_PASSWORD: str = "postgres"
    POSTGRES_DATABASE: str = "postgres"
    TENANT_DATABASE_URL: Optional[str] = None
    TENANT_POOL_MIN_SIZE: int = 1
    TENANT_POOL_MAX_SIZE: int = 10
    # Fuso da sessão do pool: NOW() e CURRENT_DATE dos schemas seguem este valor
    TENANT_DB_TIMEZONE: str = "UTC"

    @property
    def tenant_dsn(self) -> str:
        """Returns TENANT_DATABASE_URL if set, otherwise builds it from POSTGRES_*"""
        if self.TENANT_DATABASE_URL:
            return self.TENANT_DATABASE_URL
        return (
            f"postgresql://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}"
            f"@{self.POSTGRES_HOST}:{self.POSTGRES_PORT}/{self.POSTGRES_DATABASE}"
        )

    # Security
    JWT_ACCESS_SECRET: str = secrets.token_urlsafe(32)
    JWT_REFRESH_SECRET: str = secrets.token_urlsafe(32)
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 15
    REFRESH_TOKEN_EXPIRE_DAYS: int = 7
    BCRYPT_ROUNDS: int = 12

    # Rate limiting
    RATE_LIMIT_ENABLED: bool = True
    LOGIN_RATE_LIMIT: str = "10/minute"
    REGISTER_RATE_LIMIT: str = "5/minute"

    # Admin padrão (criado via /api/admin/auth/setup)
    ADMIN_EMAIL: str = "admin@advocacia-saas.com"
    ADMIN_PASSWORD: str = "change-me-in-production"

    # CORS
    CORS_ORIGINS: list = ["*"]

    # Email Settings (SMTP)
    SMTP_HOST: str = "smtp.gmail.com"
    SMTP_PORT: int = 587
    SMTP_USER: Optional[str] = None
    SMTP_PASSWORD: Optional[str] = None
    SMTP_FROM_EMAIL: str = "noreply@advocacia-saas.com"
    SMTP_FROM_NAME: str = "Advocacia SaaS"
    SMTP_TLS: bool = True
    SMTP_SSL: bool = False

    class Config:
        extra = "ignore"
        env_file = ".env"
        case_sensitive = True


@lru_cache()
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
