from pathlib import Path
from dotenv import dotenv_values
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

import os

# Explicitly load .env for local/dev environments only if values are missing from the environment
BASE_DIR = Path(__file__).resolve().parent.parent.parent
env_file = BASE_DIR / ".env"

if env_file.exists():
    file_env = dotenv_values(env_file)
    missing_keys = {k: v for k, v in file_env.items() if k not in os.environ}
    for k, v in missing_keys.items():
        os.environ[k] = v


class Settings(BaseSettings):
    """Application settings pulled from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="RLMOD_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Logging Configuration
    log_level: str = Field(default="INFO", description="Logging level")
    log_format: str = Field(default="console", description="Logging format (console or json)")

    # Generation Configuration
    random_seed: int = Field(default=114514, description="Seed for the generation PRNG")
    countries_count: int = Field(default=100, ge=1, description="Target number of countries")
    value_mean: float = Field(default=5000.0, description="Mean of the target country value distribution")
    value_std_dev: float = Field(
        default=1000.0, ge=0, description="Standard deviation of the target country value distribution"
    )

    # Output Configuration
    output_dir: str = Field(default="./output", description="Directory for generated country records")


# Instantiate singleton settings object
settings = Settings()
