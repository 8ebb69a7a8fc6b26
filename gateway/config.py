"""
Application configuration loaded from environment variables / .env file.
"""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Device link
    device_ws_path: str = "/"
    request_timeout_ms: int = 3000
    stress_interval_ms: int = 10

    # API server
    api_host: str = "0.0.0.0"
    api_port: int = 3000
    log_level: str = "INFO"

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


settings = Settings()
