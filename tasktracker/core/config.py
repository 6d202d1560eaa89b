from pydantic_settings import BaseSettings
from typing import List
import os
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

class Settings(BaseSettings):
    # Database settings
    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///./tasktracker.db")
    SQL_ECHO: bool = os.getenv("SQL_ECHO", "false").lower() == "true"

    # Logging
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    # Project settings
    PROJECT_NAME: str = os.getenv("PROJECT_NAME", "Task Tracker")
    API_V1_STR: str = "/api/v1"
    CORS_ORIGINS: List[str] = ["http://localhost:3000", "http://127.0.0.1:3000"]

    # Optimistic locking: attempts for PUT /tasks/{id}/retry and the pause between them
    TASK_UPDATE_MAX_RETRIES: int = int(os.getenv("TASK_UPDATE_MAX_RETRIES", "3"))
    TASK_UPDATE_RETRY_DELAY: float = float(os.getenv("TASK_UPDATE_RETRY_DELAY", "0.1"))

    class Config:
        env_file = ".env"
        # Variables in .env that aren't defined here are ignored.
        extra = "ignore"

settings = Settings()
