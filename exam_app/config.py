"""Runtime settings, overridable through ``EXAMQT_*`` environment variables or a ``.env`` file."""

from __future__ import annotations

from pathlib import Path

from pydantic import PositiveInt
from pydantic_settings import BaseSettings, SettingsConfigDict

from exam_app.constants.network_constants import DEFAULT_HOST, DEFAULT_PORT
from exam_app.constants.session_constants import LEADERBOARD_SIZE


class PortalSettings(BaseSettings):
    """Portal settings loaded from the environment."""

    model_config = SettingsConfigDict(
        env_prefix="EXAMQT_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        frozen=True,
    )

    host: str = DEFAULT_HOST
    port: PositiveInt = DEFAULT_PORT
    tests_dir: Path = Path("sample_tests")

    # Signed-in student
    user_id: str = "student"
    display_name: str = "Student"
    class_name: str = "8"

    leaderboard_size: PositiveInt = LEADERBOARD_SIZE
    log_level: str = "INFO"
    api_enabled: bool = True
