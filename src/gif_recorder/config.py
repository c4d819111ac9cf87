"""
Screen GIF Recorder Configuration
=================================

This module handles configuration loading for the GIF conversion core.

Configuration Sources (in order of precedence):
    1. Environment variables (highest priority)
    2. config.yaml file
    3. Default values (lowest priority)

Environment Variable Mapping:
    GIFREC_FPS              -> conversion.fps
    GIFREC_QUALITY          -> conversion.quality
    GIFREC_ALGORITHM        -> conversion.algorithm
    GIFREC_USE_OPTIMIZER    -> conversion.use_optimizer
    GIFREC_DEDUPLICATE      -> conversion.deduplicate_frames
    GIFREC_DEDUP_THRESHOLD  -> conversion.deduplication_threshold
    GIFREC_MAX_WIDTH        -> conversion.max_width
    GIFREC_OUTPUT_DIR       -> output.directory
    GIFREC_LOG_LEVEL        -> logging.level

Example:
    from gif_recorder.config import load_config

    settings = load_config()
    print(settings.conversion.fps)
    print(settings.conversion.frame_delay_ms)
"""

import os
import logging
from pathlib import Path
from typing import Literal, Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field


logger = logging.getLogger(__name__)


# =============================================================================
# Configuration Models
# =============================================================================

class ConversionConfig(BaseModel):
    """
    Tunables for a single frames-to-GIF conversion.

    Immutable: constructed once per conversion call and never
    mutated while a run is in progress.
    """

    model_config = ConfigDict(frozen=True)

    fps: int = Field(
        default=10,
        ge=1,
        description="Playback frame rate; inter-frame delay is 1000/fps ms",
    )
    quality: int = Field(
        default=10,
        ge=1,
        le=20,
        description="Encoder quality level, lower = better/slower",
    )
    algorithm: Literal["octree", "neuquant"] = Field(
        default="octree",
        description="Color quantization algorithm",
    )
    use_optimizer: bool = Field(
        default=True,
        description="Enable the post-quantization size optimizer",
    )
    threshold: int = Field(
        default=90,
        ge=0,
        le=100,
        description="Optimizer aggressiveness (similarity percentage)",
    )
    deduplicate_frames: bool = Field(
        default=True,
        description="Drop frames that are near-identical to the last accepted one",
    )
    deduplication_threshold: float = Field(
        default=99,
        ge=0,
        le=100,
        description="Similarity percentage at or above which a frame is dropped",
    )
    max_width: int = Field(
        default=0,
        ge=0,
        description="Upper bound on output width (0 = no scaling)",
    )

    @property
    def frame_delay_ms(self) -> int:
        """Per-frame delay in milliseconds."""
        return 1000 // self.fps


class OutputConfig(BaseModel):
    """Output location configuration."""

    directory: Optional[str] = Field(
        default=None,
        description="Directory for generated GIFs (None = ~/Downloads)",
    )


class SinkConfig(BaseModel):
    """Streaming sink configuration."""

    max_pending_chunks: int = Field(
        default=16,
        ge=1,
        description="Encoded chunks buffered between encoder and file writer",
    )
    fsync: bool = Field(
        default=True,
        description="fsync the output file before reporting success",
    )


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = Field(default="INFO", description="Log level")
    format: str = Field(default="text", description="Log format: json or text")


class Settings(BaseModel):
    """
    Main settings class for the GIF recorder.

    Loads configuration from YAML file and environment variables.
    Environment variables take precedence over file values.
    """

    conversion: ConversionConfig = Field(default_factory=ConversionConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)
    sink: SinkConfig = Field(default_factory=SinkConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


# =============================================================================
# Configuration Loading
# =============================================================================

_TRUE_VALUES = {"1", "true", "yes", "on"}


def load_config(config_path: Optional[str] = None) -> Settings:
    """
    Load configuration from YAML file and environment variables.

    Priority (highest to lowest):
        1. Environment variables
        2. YAML config file
        3. Default values

    Args:
        config_path: Path to config.yaml. If None, searches common locations.

    Returns:
        Settings: Loaded configuration

    Raises:
        pydantic.ValidationError: If any value is out of range
    """
    if config_path is None:
        search_paths = [
            Path("config.yaml"),
            Path("config.yml"),
            Path.home() / ".config" / "gif-recorder" / "config.yaml",
        ]
        for path in search_paths:
            if path.exists():
                config_path = str(path)
                break

    config_data = {}
    if config_path and Path(config_path).exists():
        logger.info(f"Loading config from: {config_path}")
        with open(config_path, "r") as f:
            config_data = yaml.safe_load(f) or {}
    else:
        logger.debug("No config file found, using defaults and environment variables")

    _apply_env_overrides(config_data)

    return Settings.model_validate(config_data)


def _apply_env_overrides(config_data: dict) -> None:
    """Apply environment variable overrides to config data."""

    # Conversion settings
    if env_fps := os.environ.get("GIFREC_FPS"):
        config_data.setdefault("conversion", {})["fps"] = int(env_fps)
    if env_quality := os.environ.get("GIFREC_QUALITY"):
        config_data.setdefault("conversion", {})["quality"] = int(env_quality)
    if env_algorithm := os.environ.get("GIFREC_ALGORITHM"):
        config_data.setdefault("conversion", {})["algorithm"] = env_algorithm
    if env_optimizer := os.environ.get("GIFREC_USE_OPTIMIZER"):
        config_data.setdefault("conversion", {})["use_optimizer"] = (
            env_optimizer.lower() in _TRUE_VALUES
        )
    if env_dedup := os.environ.get("GIFREC_DEDUPLICATE"):
        config_data.setdefault("conversion", {})["deduplicate_frames"] = (
            env_dedup.lower() in _TRUE_VALUES
        )
    if env_dedup_threshold := os.environ.get("GIFREC_DEDUP_THRESHOLD"):
        config_data.setdefault("conversion", {})["deduplication_threshold"] = float(
            env_dedup_threshold
        )
    if env_width := os.environ.get("GIFREC_MAX_WIDTH"):
        config_data.setdefault("conversion", {})["max_width"] = int(env_width)

    # Output settings
    if env_dir := os.environ.get("GIFREC_OUTPUT_DIR"):
        config_data.setdefault("output", {})["directory"] = env_dir

    # Logging settings
    if env_log := os.environ.get("GIFREC_LOG_LEVEL"):
        config_data.setdefault("logging", {})["level"] = env_log


def setup_logging(settings: Settings) -> None:
    """Configure logging based on settings."""
    log_level = getattr(logging, settings.logging.level.upper(), logging.INFO)

    if settings.logging.format == "json":
        log_format = '{"time": "%(asctime)s", "level": "%(levelname)s", "module": "%(name)s", "message": "%(message)s"}'
    else:
        log_format = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    logging.basicConfig(
        level=log_level,
        format=log_format,
        datefmt="%Y-%m-%dT%H:%M:%S",
    )
