from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="BUNKER_", env_file=".env", extra="ignore")

    # Server
    host: str = "0.0.0.0"
    port: int = 5000
    secret_key: str = "bunker-secret"
    cors_allowed_origins: list[str] = ["http://localhost:5173", "http://localhost:3000"]
    log_level: str = "INFO"
    engineio_logger: bool = False
    # Werkzeug dev server outside a terminal; use eventlet/gunicorn in production
    allow_unsafe_werkzeug: bool = False

    # Rooms
    min_players: int = 3
    max_players: int = 12
    code_length: int = 6
    max_name_length: int = 24
    max_chat_length: int = 500

    # Rounds and voting
    max_rounds: int = 7
    reveals_per_round: int = 1
    survivor_threshold: int = 3
    voting_delay: float = 3.0  # seconds between the last round starting and the vote
    voting_timeout: float = 120.0  # 0 disables
    teardown_delay: float = 60.0

    # Send unrevealed attributes of other players as null
    redact_unrevealed: bool = False


@lru_cache()
def get_settings():
    return Settings()
