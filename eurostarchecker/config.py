from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Eurostar API
    eurostar_api_key: str = ""
    eurostar_base_url: str = "https://api.prod.eurostar.com/bpa"
    http_timeout_seconds: float = 30.0
    provider_max_attempts: int = 3

    # Engine
    max_concurrent_fetches: int = 5

    class Config:
        env_file = ".env"


# Istanza globale usata in tutto il progetto
settings = Settings()
