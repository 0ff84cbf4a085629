import os
from pydantic_settings import BaseSettings
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

class Settings(BaseSettings):
    """Application settings."""

    # API Settings
    API_TITLE: str = "Contribution Tracker API"
    API_DESCRIPTION: str = "API for managing per-user contribution events"
    API_VERSION: str = "1.0.0"
    BASE_URL: str = os.getenv("BASE_URL", "http://localhost:8000")
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
    CORS_ORIGINS: str = os.getenv("CORS_ORIGINS", "*")

    # Database Settings
    MONGODB_URL: str = os.getenv("MONGODB_URL", "mongodb://localhost:27017")
    DB_NAME: str = os.getenv("DB_NAME", "contribution_tracker")
    EVENTS_COLLECTION: str = os.getenv("EVENTS_COLLECTION", "events")
    MONGODB_SERVER_SELECTION_TIMEOUT_MS: int = int(os.getenv("MONGODB_SERVER_SELECTION_TIMEOUT_MS", "5000"))
    CREATE_INDEXES: bool = os.getenv("CREATE_INDEXES", "True").lower() == "true"

    # Per-call storage deadlines (seconds)
    STORAGE_TIMEOUT_SECONDS: float = float(os.getenv("STORAGE_TIMEOUT_SECONDS", "5"))
    LIST_TIMEOUT_SECONDS: float = float(os.getenv("LIST_TIMEOUT_SECONDS", "10"))

    JWT_SECRET_KEY: str = os.getenv("JWT_SECRET_KEY", "")
    JWT_ALGORITHM: str = os.getenv("JWT_ALGORITHM", "HS512")
    JWT_ACCESS_TOKEN_EXPIRE_MINUTES: int = int(os.getenv("JWT_ACCESS_TOKEN_EXPIRE_MINUTES", "15"))
    TOKEN_URL: str = os.getenv("TOKEN_URL", "auth/login")

    @property
    def CORS_ORIGIN_LIST(self) -> list[str]:
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]


settings = Settings()
