from pydantic_settings import BaseSettings
from typing import Optional

class Settings(BaseSettings):
    # --- GERAIS ---
    PROJECT_NAME: str = "Weatherly Push API"
    API_V1_STR: str = "/api"
    PORT: int = 5000
    LOG_LEVEL: str = "INFO"

    # --- BANCO DE DADOS ---
    SQLALCHEMY_DATABASE_URI: str = "sqlite:///./weatherly.db"

    # --- URLs ---
    # Origem permitida no CORS (front-end)
    FRONTEND_URL: Optional[str] = None

    # --- WEATHER API ---
    # Sem valor padrão para a chave: se não estiver no .env o Pydantic dá erro ao iniciar.
    WEATHER_API_KEY: str
    WEATHER_API_URL: str = "https://api.weatherapi.com/v1"
    WEATHER_API_TIMEOUT: float = 10.0
    FORECAST_DAYS: int = 3

    # --- PUSH NOTIFICATIONS ---
    VAPID_PRIVATE_KEY: str
    VAPID_PUBLIC_KEY: str
    VAPID_CLAIMS_EMAIL: str = "mailto:weather@example.com"

    # --- SCHEDULER ---
    UPDATE_INTERVAL_HOURS: int = 2
    SCHEDULER_ENABLED: bool = True

    class Config:
        env_file = ".env"
        case_sensitive = True

settings = Settings()
