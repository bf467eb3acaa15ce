from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Config(BaseSettings):
    """
    Application configuration loaded from environment variables and .env file.
    """

    # Data directory and file paths
    data_dir: Path = Field(default=Path("data"), alias="DATA_DIR")

    saved_messages_path: Path = Field(
        default=Path("data") / "saved_messages.json",
        alias="SAVED_MESSAGES_PATH",
    )
    scheduled_reminders_path: Path = Field(
        default=Path("data") / "scheduled_reminders.json",
        alias="SCHEDULED_REMINDERS_PATH",
    )
    digest_output_path: Path = Field(
        default=Path("data") / "daily_digest.md",
        alias="DIGEST_OUTPUT_PATH",
    )

    # Scoring
    important_threshold: int = Field(default=8, alias="IMPORTANT_THRESHOLD")
    fallback_score: int = Field(default=3, ge=0, le=100, alias="FALLBACK_SCORE")

    # Extraction / classification
    otp_min_length: int = Field(default=4, ge=1, alias="OTP_MIN_LENGTH")
    otp_max_length: int = Field(default=8, ge=1, alias="OTP_MAX_LENGTH")
    classifier_body_chars: int = Field(default=500, alias="CLASSIFIER_BODY_CHARS")

    # Logging
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    log_to_file: bool = Field(default=False, alias="LOG_TO_FILE")
    redact_logs: bool = Field(default=True, alias="REDACT_LOGS")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )


def load_config() -> "Config":
    return Config()
