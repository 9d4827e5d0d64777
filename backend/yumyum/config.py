"""Application configuration from environment variables."""

from __future__ import annotations

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    yumyum_env: str = "development"
    yumyum_log_level: str = "info"

    # CORS
    cors_origins: list[str] = ["http://localhost:3000"]

    # Live eating sessions kept in memory
    max_sessions: int = 64

    # Largest occupancy grid a request may ask for (cells of 10x10 units)
    max_grid_cells: int = 250_000

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


settings = Settings()
