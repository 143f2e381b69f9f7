"""Application configuration via Pydantic Settings."""

from functools import lru_cache

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class DetectorSettings(BaseSettings):
    """Hysteresis boundary detector parameters.

    Defaults are tuned for wrist-to-index-fingertip distance in
    normalized frame coordinates.
    """

    model_config = SettingsConfigDict(env_prefix="CYCLE_")

    high: float = 0.20
    low: float = 0.14
    min_duration_s: float = Field(default=0.35, ge=0.0)

    @model_validator(mode="after")
    def _check_threshold_order(self) -> "DetectorSettings":
        if self.low >= self.high:
            raise ValueError(f"low ({self.low}) must be < high ({self.high})")
        return self


class MetricSettings(BaseSettings):
    """Landmark indices used for the phase metric."""

    model_config = SettingsConfigDict(env_prefix="METRIC_")

    anchor_index: int = Field(default=0, ge=0)
    extremity_index: int = Field(default=8, ge=0)


class ContinuitySettings(BaseSettings):
    """Timeline normalization options for offline analysis."""

    model_config = SettingsConfigDict(env_prefix="CONTINUITY_")

    clamp_non_positive: bool = True
    session_start: float | None = None


class HandTrackingSettings(BaseSettings):
    """MediaPipe hand landmarker settings."""

    model_config = SettingsConfigDict(env_prefix="HANDS_")

    max_num_hands: int = Field(default=1, ge=1)
    min_detection_confidence: float = 0.6
    min_presence_confidence: float = 0.6
    min_tracking_confidence: float = 0.6


class FilterSettings(BaseSettings):
    """Metric smoothing parameters."""

    model_config = SettingsConfigDict(env_prefix="FILTER_")

    smoothing_window_size: int = Field(default=1, ge=1)


class CaptureSettings(BaseSettings):
    """Camera capture settings."""

    model_config = SettingsConfigDict(env_prefix="CAPTURE_")

    camera_index: int = 0
    width: int = 1280
    height: int = 720
    mirror: bool = True


class UISettings(BaseSettings):
    """Display and overlay settings."""

    model_config = SettingsConfigDict(env_prefix="", populate_by_name=True)

    display_width: int = Field(default=1280, alias="DISPLAY_WIDTH")
    display_height: int = Field(default=720, alias="DISPLAY_HEIGHT")
    draw_skeleton: bool = Field(default=True, alias="DRAW_SKELETON")
    show_metrics: bool = Field(default=True, alias="SHOW_METRICS")
    show_debug_info: bool = Field(default=False, alias="SHOW_DEBUG_INFO")


class LoggingSettings(BaseSettings):
    """Logging configuration."""

    model_config = SettingsConfigDict(env_prefix="LOG_")

    level: str = "INFO"
    file: str | None = None


class Settings(BaseSettings):
    """Root settings aggregating all configuration sections."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    detector: DetectorSettings = Field(default_factory=DetectorSettings)
    metric: MetricSettings = Field(default_factory=MetricSettings)
    continuity: ContinuitySettings = Field(default_factory=ContinuitySettings)
    hands: HandTrackingSettings = Field(default_factory=HandTrackingSettings)
    filter: FilterSettings = Field(default_factory=FilterSettings)
    capture: CaptureSettings = Field(default_factory=CaptureSettings)
    ui: UISettings = Field(default_factory=UISettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings instance."""
    return Settings()
