from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env")

    ENV: str = "development"

    DATABASE_URL: str
    LOG_LEVEL: str = "INFO"
    LOG_DIR: str = "logs"
    CORS_ORIGINS: list[str] = ["http://localhost:3000"]

    # Token policy
    TOKEN_BYTES: int = 48
    SESSION_LIFETIME_SECONDS: int = 60 * 60 * 24
    REMEMBER_LOGIN_LIFETIME_SECONDS: int = 60 * 60 * 24 * 15
    ACTIVITY_UPDATE_INTERVAL_SECONDS: int = 60
    TOKEN_CLEANUP_INTERVAL_SECONDS: int = 60 * 60


settings = Settings()
