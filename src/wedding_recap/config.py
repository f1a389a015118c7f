"""Application configuration loaded from environment variables."""

from typing import Literal

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}

    # Shotstack
    shotstack_api_key: str = ""
    shotstack_environment: Literal["stage", "v1"] = "stage"
    shotstack_request_timeout_sec: float = 30.0
    shotstack_status_timeout_sec: float = 10.0

    # Completion polling (120 x 5s = 10 minutes)
    recap_poll_interval_sec: float = 5.0
    recap_poll_max_attempts: int = 120

    # Supabase media library
    supabase_url: str = ""
    supabase_service_role_key: str = ""
    supabase_media_table: str = "media_items"

    # CORS
    allowed_origins: str = ""


settings = Settings()
