from typing import Literal, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    DATABASE_URL: Optional[str] = None
    DB_HOST: str = "localhost"
    DB_PORT: int = 5432
    DB_USER: str = "postgres"
    DB_PASSWORD: str = "postgres"
    DB_NAME: str = "social"
    CREATE_TABLES: bool = True

    SECRET_KEY: str = "change-me"
    ALGORITHM: str = "HS256"
    # None means tokens never expire
    ACCESS_TOKEN_EXPIRE_MINUTES: Optional[int] = None
    BCRYPT_ROUNDS: int = 10

    PUSH_FANOUT: Literal["parties", "broadcast"] = "parties"

    CORS_ORIGINS: list[str] = ["*"]
    LOG_LEVEL: str = "INFO"
    HOST: str = "0.0.0.0"
    PORT: int = 3000

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    def get_db_url(self) -> str:
        if self.DATABASE_URL:
            return self.DATABASE_URL
        return (f"postgresql+asyncpg://{self.DB_USER}:{self.DB_PASSWORD}@"
                f"{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}")


settings = Settings()
database_url = settings.get_db_url()
