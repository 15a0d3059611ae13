"""
Configuration de l'application / Application configuration.
Utilise pydantic-settings pour charger depuis .env ou variables d'environnement.
"""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Application
    APP_NAME: str = "EquiRoute Scheduler"
    APP_VERSION: str = "0.1.0"
    DEBUG: bool = True

    # Database - SQLite par défaut pour le développement
    # Database - SQLite by default for development
    DATABASE_URL: str = "sqlite+aiosqlite:///./equiroute.db"
    SQLITE_BUSY_TIMEOUT_SECONDS: float = 15.0

    # CORS - origines autorisées / allowed origins
    CORS_ORIGINS: list[str] = ["http://localhost:5173", "http://localhost:3000"]

    # JWT (émis par le service d'authentification externe / issued by the external auth service)
    SECRET_KEY: str = "change-me-in-production"
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 30

    # Temps de trajet / Travel time
    AVERAGE_SPEED_KMH: float = 50.0
    TRAVEL_MARGIN_FACTOR: float = 1.0  # distance routière vs vol d'oiseau / road vs straight line

    # Créneaux / Time slots
    MIN_BOOKING_MINUTES: int = 15
    MAX_BOOKING_MINUTES: int = 480

    # Séries récurrentes / Recurring series
    MIN_INTERVAL_WEEKS: int = 1
    MAX_INTERVAL_WEEKS: int = 52
    MIN_SERIES_OCCURRENCES: int = 2
    MAX_SERIES_OCCURRENCES: int = 52
    DEFAULT_MAX_SERIES_OCCURRENCES: int = 12

    # Planification de tournées / Route planning
    ROUTE_MINUTES_PER_HORSE: int = 60
    ROUTE_AVERAGE_SPEED_KMH: float = 50.0

    # Valeurs par défaut des feature flags (surchargeables via la table parameters)
    # Feature flag defaults (overridable through the parameters table)
    FEATURE_FLAGS: dict[str, bool] = {
        "recurring_bookings": False,
        "route_planning": True,
        "group_bookings": False,
    }

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


settings = Settings()
