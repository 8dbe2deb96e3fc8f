from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field

DATA_DIR = Path(__file__).resolve().parent.parent / "data"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    # App
    app_name: str = Field(default="Flight Ranker")
    env: str = Field(default="development")
    log_level: str = Field(default="INFO")

    # Data sources
    flight_catalog_path: Path = Field(default=DATA_DIR / "flights.jsonl")
    airports_path: Path = Field(default=DATA_DIR / "airports.dat")

    # Ranking
    max_limit: int = Field(default=100)
    preferred_carrier_factor: float = Field(default=0.9)
    # Turns the preferred carrier into a hard filter instead of a score bonus
    require_preferred_carrier: bool = Field(default=False)
    # False aborts the whole search on the first bad catalog entry
    skip_malformed_records: bool = Field(default=False)
    cancel_check_interval: int = Field(default=64)

    # Rate limiting (per instance)
    rate_limit_per_minute: int = Field(default=60)

settings = Settings()
