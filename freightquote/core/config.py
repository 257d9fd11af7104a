from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    REDIS_URL: str = "redis://localhost:6379/0"

    GOOGLE_MAPS_API_KEY: str = ""
    DISTANCE_MATRIX_URL: str = "https://maps.googleapis.com/maps/api/distancematrix/json"
    DISTANCE_LOOKUP_TIMEOUT: float = 10.0

    LEDGER_KEY: str = "quotes"
    DISTANCE_CACHE_PREFIX: str = "distance"

    DEFAULT_PAGE_SIZE: int = 5
    MAX_PAGE_SIZE: int = 100

    API_TITLE: str = "FreightQuote Service"
    API_DESCRIPTION: str = "Freight rate quotes with cached distances and a quote ledger"
    API_VERSION: str = "1.0.0"

    LOG_LEVEL: str = "INFO"
    DEBUG: bool = False

    class Config:
        env_file = ".env"
        case_sensitive = True

settings = Settings()
