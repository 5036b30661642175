import logging
from pydantic_settings import BaseSettings

logger = logging.getLogger(__name__)

_DEFAULT_SECRET = "change-me-in-production"


class Settings(BaseSettings):
    APP_ENV: str = "development"
    SECRET_KEY: str = _DEFAULT_SECRET
    DATABASE_URL: str = "sqlite:///./data/inventory.db"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24 * 30
    FIRST_ADMIN_NAME: str = "Administrator"
    FIRST_ADMIN_EMAIL: str = "admin@example.com"
    FIRST_ADMIN_PASS: str = "admin123"

    # Low-stock alerts; SMTP_HOST empty disables delivery
    SMTP_HOST: str = ""
    SMTP_PORT: int = 587
    SMTP_USER: str = ""
    SMTP_PASSWORD: str = ""
    MAIL_FROM: str = "inventory@example.com"
    ADMIN_EMAIL: str = ""
    LOW_STOCK_ALERTS: bool = True

    class Config:
        env_file = ".env"


settings = Settings()

if settings.SECRET_KEY == _DEFAULT_SECRET:
    if settings.APP_ENV == "production":
        raise RuntimeError("SECRET_KEY must be set in production. Check your .env file.")
    else:
        logger.warning("SECRET_KEY is using the default value, set it in .env before deploying")

if settings.FIRST_ADMIN_PASS == "admin123":
    logger.warning("FIRST_ADMIN_PASS is using the default value 'admin123', change it in .env")
