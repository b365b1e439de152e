"""Configuration management for path-tools."""

from typing import Literal, Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings with environment variable support."""

    log_level: str = "INFO"
    log_format: Literal["json", "console"] = "json"
    otel_enabled: bool = False
    otel_service_name: str = "path-tools"

    # Temporary directory defaults
    temp_prefix: str = "path-tools-"
    temp_root: Optional[str] = None
    sweep_on_exit: bool = True

    model_config = {
        "env_prefix": "PATH_TOOLS_",
        "case_sensitive": False,
    }


settings = Settings()
