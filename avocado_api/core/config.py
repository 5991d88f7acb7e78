# avocado_api/core/config.py

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field
from functools import lru_cache
from loguru import logger
from pathlib import Path
from typing import List, Optional


def find_dotenv_path(filename='.env', raise_error_if_not_found=False, usecwd=False) -> str | None:
    """Walks up from this package (or the CWD) looking for a dotenv file."""
    if usecwd or '__file__' not in globals():
        start_dir = Path.cwd()
    else:
        start_dir = Path(__file__).resolve().parent
    current_dir = start_dir
    for _ in range(10):
        env_path = current_dir / filename
        if env_path.is_file():
            logger.debug(f"Found {filename} file at: {env_path}")
            return str(env_path)
        parent_dir = current_dir.parent
        if parent_dir == current_dir:
            break
        current_dir = parent_dir
    if not usecwd and '__file__' in globals():
        env_path_cwd = Path.cwd() / filename
        if env_path_cwd.is_file():
            logger.debug(f"Found {filename} file at CWD: {env_path_cwd}")
            return str(env_path_cwd)
    logger.debug(f"{filename} not found in parent directories of {start_dir} or CWD.")
    if raise_error_if_not_found:
        raise IOError(f'{filename} not found')
    return None


class Settings(BaseSettings):
    PROJECT_NAME: str = "Avocado Sales API"
    LOG_LEVEL: str = "INFO"

    # Database
    MONGO_URL: str = "mongodb://localhost/avocadoSalesDB"
    MONGO_DEFAULT_DB_NAME: str = "avocadoSalesDB"
    MONGO_SERVER_SELECTION_TIMEOUT_MS: int = Field(default=5000, ge=0)

    # Server
    HOST: str = "0.0.0.0"
    PORT: int = 8080
    CORS_ORIGINS: str = "*"

    # Seeding
    RESET_DB: bool = False
    SEED_DATA_PATH: Optional[str] = None

    # Create validation: when False, zero counts as a missing value
    ALLOW_ZERO_VALUES: bool = False

    model_config = SettingsConfigDict(
        env_file=tuple(p for p in (find_dotenv_path('.env'), find_dotenv_path('.env.local')) if p) or None,
        env_file_encoding='utf-8',
        extra='ignore',
        case_sensitive=False,
    )

    @property
    def cors_origin_list(self) -> List[str]:
        if self.CORS_ORIGINS.strip() == "*":
            return ["*"]
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]

    @property
    def mongo_db_name(self) -> str:
        """Database name taken from the path of MONGO_URL, or the configured default."""
        without_scheme = self.MONGO_URL.split("://", 1)[-1]
        if "/" not in without_scheme:
            return self.MONGO_DEFAULT_DB_NAME
        db_name = without_scheme.split("/", 1)[1].split("?")[0]
        if not db_name or "/" in db_name or len(db_name) > 63:
            return self.MONGO_DEFAULT_DB_NAME
        return db_name


@lru_cache()
def get_settings() -> Settings:
    """Loads and validates the application settings."""
    logger.info("Loading application settings...")
    env_files_found = [p for p in [find_dotenv_path('.env'), find_dotenv_path('.env.local')] if p]
    if env_files_found:
        logger.info(f"Loading environment variables from: {', '.join(env_files_found)}")
    else:
        logger.debug("No .env file found. Loading settings from system environment variables only.")

    try:
        settings_instance = Settings()
        if settings_instance.RESET_DB:
            logger.warning("RESET_DB is enabled: the sales collection will be wiped and re-seeded on startup.")
        if settings_instance.ALLOW_ZERO_VALUES:
            logger.info("ALLOW_ZERO_VALUES is enabled: zero is accepted as a valid field value on create.")
        logger.info("Settings loaded and validated successfully.")
        return settings_instance
    except ValueError as val_err:
        logger.critical(f"CRITICAL ERROR in settings validation: {val_err}")
        raise SystemExit(f"Settings validation failed: {val_err}")


settings = get_settings()
