"""
Library configuration management.
"""

from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict


STACK_DIVIDER = "======================================"

DEFAULT_RUNTIME_FRAME_PREFIXES = [
    "runpy.",
    "threading.",
    "asyncio.",
    "concurrent.futures.",
    "importlib._bootstrap",
]


class Settings(BaseSettings):
    """Library settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="STACKERR_",
        env_file=".env",
        extra="ignore",
        case_sensitive=False,
    )

    # Formatting
    stack_divider: str = STACK_DIVIDER

    # Outer frames belonging to interpreter dispatch machinery
    runtime_frame_prefixes: List[str] = DEFAULT_RUNTIME_FRAME_PREFIXES

    # Capture
    max_stack_depth: int = 1024

    # Logging
    log_level: str = "WARNING"


# Global settings instance
settings = Settings()
