# Defines application-wide settings using pydantic-settings' BaseSettings
# Manages environment variables for various aspects of the feed core:
# API configuration (version, project name)
# Remote post-list endpoint and request timeout
# Submission behaviour (deferred insertion delay, default author)
# Display settings (locale, time zone, avatar URLs)


import os
import json
from typing import Annotated, List, Union

from pydantic import field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict
from dotenv import load_dotenv

load_dotenv()

class Settings(BaseSettings):
    # API configuration
    API_V1_STR: str = "/api/v1"
    PROJECT_NAME: str = "Feed Content Core"
    VERSION: str = "0.1.0"

    # Remote post list
    FEED_ENDPOINT_URL: str = os.getenv("FEED_ENDPOINT_URL", "https://api.example.com/posts")
    REQUEST_TIMEOUT_SECONDS: float = 10.0
    REFRESH_ON_STARTUP: bool = False

    # Submission
    SUBMIT_DELAY_SECONDS: float = 1.0
    DEFAULT_AUTHOR_ID: int = 1  # Current user until auth exists

    # Display
    AVATAR_URL_TEMPLATE: str = "https://example.com/users/{author_id}/avatar"
    DISPLAY_LOCALE: str = os.getenv("DISPLAY_LOCALE", "en_US")
    DISPLAY_TIMEZONE: str = os.getenv("DISPLAY_TIMEZONE", "")  # empty means local zone

    # CORS
    BACKEND_CORS_ORIGINS: Annotated[List[str], NoDecode] = [
        "http://localhost:3000",     # Local development
        "http://10.0.2.2:3000",      # Android emulator
        "capacitor://localhost",     # Capacitor mobile app
    ]

    # Development settings - set these differently in production
    DEBUG: bool = os.getenv("DEBUG", "False").lower() in ["true", "1", "t"]
    ENVIRONMENT: str = os.getenv("ENVIRONMENT", "production")

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=True, extra="ignore")

    @field_validator("BACKEND_CORS_ORIGINS", mode="before")
    @classmethod
    def assemble_cors_origins(cls, v: Union[str, List[str]]) -> List[str]:
        if isinstance(v, str) and not v.startswith("["):
            return [i.strip() for i in v.split(",") if i.strip()]
        elif isinstance(v, str):
            # Handle JSON string format
            try:
                return json.loads(v)
            except ValueError:
                return []
        return v

    @field_validator("SUBMIT_DELAY_SECONDS", "REQUEST_TIMEOUT_SECONDS")
    @classmethod
    def non_negative(cls, v: float) -> float:
        if v < 0:
            raise ValueError("must not be negative")
        return v

# Create settings instance
settings = Settings()
