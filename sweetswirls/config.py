from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    APP_NAME: str = "Sweet Swirls"
    DATABASE_URL: str = "sqlite:///./sweetswirls.db"

    # JWT signing
    SECRET_KEY: str = "change-me-in-production"
    ACCESS_TOKEN_EXPIRE_HOURS: int = 72

    # Base URL the API client talks to
    API_URL: str = "http://localhost:8000/api"

    # Pages reach the API in-process instead of over the network
    USE_LOCAL_API: bool = True
    API_TIMEOUT: float = 10.0

    # Default users, locations and sample items on an empty database
    SEED_DEMO_DATA: bool = True

    LOG_LEVEL: str = "INFO"

    model_config = {"env_file": ".env"}


settings = Settings()
