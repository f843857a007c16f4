import os
from dotenv import load_dotenv

# Picks up a local .env file; real environment variables win
load_dotenv()

class Settings:
    PROJECT_NAME: str = "Expense Tracker"
    PROJECT_VERSION: str = "1.0.0"

    # 1. Infrastructure Config (Loaded from .env with defaults)
    POSTGRES_USER: str = os.getenv("POSTGRES_USER", "expense_user")
    POSTGRES_PASSWORD: str = os.getenv("POSTGRES_PASSWORD", "expense_password")
    POSTGRES_SERVER: str = os.getenv("POSTGRES_SERVER", "db")
    POSTGRES_PORT: str = os.getenv("POSTGRES_PORT", "5432")
    POSTGRES_DB: str = os.getenv("POSTGRES_DB", "expense_db")

    # 2. Security Config
    SECRET_KEY: str = os.getenv("SECRET_KEY", "super_secret_default_key")
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "60"))

    # 3. HTTP / Logging
    CORS_ORIGINS: str = os.getenv("CORS_ORIGINS", "*")
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
    LOG_FILE: str = os.getenv("LOG_FILE", "")

    # 4. Client side
    API_BASE_URL: str = os.getenv("API_BASE_URL", "http://localhost:8000")
    SESSION_FILE: str = os.getenv(
        "SESSION_FILE", os.path.join(os.path.expanduser("~"), ".expense_tracker", "session.json")
    )

    # 5. Construct the Database URL dynamically (DATABASE_URL overrides everything)
    @property
    def DATABASE_URL(self) -> str:
        override = os.getenv("DATABASE_URL")
        if override:
            return override
        return f"postgresql://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}@{self.POSTGRES_SERVER}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"

    @property
    def cors_origins_list(self) -> list:
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]

settings = Settings()
