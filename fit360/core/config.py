from dotenv import load_dotenv
from pydantic_settings import BaseSettings

load_dotenv()


class Settings(BaseSettings):
    DATABASE_DSN: str = "sqlite:///./fit360.db"
    ENVIRONMENT: str = "local"

    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "text"

    # Oura v2 user collection; personal access token is read from the env
    OURA_API_BASE: str = "https://api.ouraring.com/v2/usercollection"
    OURA_PERSONAL_ACCESS_TOKEN: str | None = None

    # HaveIBeenPwned range API (k-anonymity)
    PWNED_API_BASE: str = "https://api.pwnedpasswords.com"

    HTTP_TIMEOUT_SECONDS: float = 10.0

    SYNC_WINDOW_DAYS: int = 7
    VO2_MAX_WINDOW_DAYS: int = 30
    METRICS_LOOKBACK_DAYS: int = 30

    SESSION_TTL_HOURS: int = 168

    CORS_ORIGINS: list[str] = ["*"]


settings = Settings()
