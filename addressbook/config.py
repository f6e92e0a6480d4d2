from pathlib import Path
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict

PACKAGE_DIR = Path(__file__).resolve().parent


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # App
    APP_NAME: str = "Address Book"
    ENV: str = "development"
    SECRET_KEY: str = "CHANGE_ME"
    SESSION_COOKIE_NAME: str = "addressbook_session"
    # session cookie is always Secure when ENV is "production"
    SESSION_HTTPS_ONLY: bool = False
    LOG_LEVEL: str = "INFO"

    # Database
    DATABASE_URL: str = "sqlite:///./contacts.db"
    SQL_ECHO: bool = False

    # Phone numbers without a leading "+" are parsed against this region.
    # Leave empty to require international format.
    PHONE_DEFAULT_REGION: Optional[str] = None

    # Presentation
    TEMPLATES_DIR: str = str(PACKAGE_DIR / "templates")
    STATIC_DIR: str = "static"


settings = Settings()
