"""Application configuration from environment variables."""
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """All config comes from env vars or .env.backend file."""

    RECORDS_DB_PATH: str = "./data/db.json"
    FILE_STORAGE_PATH: str = "./public/uploads"
    UPLOADS_URL_PATH: str = "/uploads"
    API_HOST: str = "127.0.0.1"
    API_PORT: int = 8721
    CORS_ORIGINS: str = "http://localhost:3000"
    LOG_LEVEL: str = "INFO"

    class Config:
        env_file = ".env.backend"
        env_file_encoding = "utf-8"


settings = Settings()
