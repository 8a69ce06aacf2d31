from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    DATABASE_URL: str = "sqlite+aiosqlite:///./elysian.db"
    SQL_ECHO: bool = False
    AUTO_CREATE_SCHEMA: bool = True

    # "sql" or "memory"
    STORE_BACKEND: str = "sql"
    STORE_TRANSACTION_ATTEMPTS: int = 5

    UPI_PAYEE_NAME: str = "Elysian Cafe"
    CURRENCY: str = "INR"
    TIMEZONE: str = "Asia/Kolkata"

    LOG_LEVEL: str = "INFO"

    class Config:
        env_file = ".env"

settings = Settings()
