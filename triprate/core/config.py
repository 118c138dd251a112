from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment with defaults.

    Environment variable mapping follows pydantic-settings rules (e.g., APP_NAME, DEBUG, DATA_DIR, DB_FILENAME, HOME_CURRENCY).
    """

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    # Basic app metadata
    app_name: str = "Trip Exchange Tracker"
    debug: bool = True
    version: str = "0.1.0"

    # Data & persistence
    data_dir: Path = Path("data")
    db_filename: str = "trips.sqlite3"
    db_path: Optional[Path] = None  # derived if not provided

    # Currency every exchange is paid in; labels only, the engine is unit-agnostic
    home_currency: str = "JPY"

    # Number of records returned by the "recent" listings
    recent_records_limit: int = 3

    def init_post_load(self) -> None:
        """Finalize derived fields and ensure directories exist."""
        if self.db_path is None:
            self.db_path = self.data_dir / self.db_filename
        # Ensure persistence directory exists
        Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)
        self.home_currency = self.home_currency.strip().upper()
        if not self.home_currency:
            raise ValueError("home_currency cannot be empty")
        if self.recent_records_limit < 1:
            raise ValueError(
                f"recent_records_limit must be positive, got {self.recent_records_limit}"
            )


@lru_cache
def get_settings() -> Settings:
    settings = Settings()
    settings.init_post_load()
    return settings
