"""Configuration management for the delivery stream application.

Resolution order:
  1. Explicit environment variables
  2. Values from config/{env}.yml
  3. Defaults defined in the pydantic models
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from pydantic import BaseModel, Field, field_validator, model_validator

from .errors import ConfigurationConflictError
from .options import Compression


class AWSConfig(BaseModel):
    """AWS-related configuration."""
    region: str = "us-east-1"
    account: Optional[str] = None


class DestinationSettings(BaseModel):
    """S3 destination settings. A bucket is created when no name is given."""
    bucket_name: Optional[str] = None
    role_arn: Optional[str] = None
    prefix: Optional[str] = None
    error_output_prefix: Optional[str] = None
    compression: Optional[Compression] = None
    buffering_interval_seconds: Optional[int] = Field(default=None, ge=60, le=900)
    buffering_size_mib: Optional[int] = Field(default=None, ge=1, le=128)


class DeliveryLoggingSettings(BaseModel):
    """CloudWatch logging of delivery errors."""
    enabled: bool = True
    log_group_name: Optional[str] = None
    log_stream_name: Optional[str] = None


LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")


class LoggingConfig(BaseModel):
    """Application logging configuration."""
    level: str = "INFO"

    @field_validator("level")
    @classmethod
    def check_level(cls, v: str) -> str:
        level = v.upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"logging.level must be one of {', '.join(LOG_LEVELS)}, got {v!r}")
        return level


class AppConfig(BaseModel):
    environment: str = Field(...)
    app_name: str = "firehose-destinations"
    delivery_stream_name: Optional[str] = None
    aws: AWSConfig = Field(default_factory=AWSConfig)
    destination: DestinationSettings = Field(default_factory=DestinationSettings)
    delivery_logging: DeliveryLoggingSettings = Field(default_factory=DeliveryLoggingSettings)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @model_validator(mode="after")
    def check_delivery_logging(self) -> "AppConfig":
        dl = self.delivery_logging
        if not dl.enabled and (dl.log_group_name or dl.log_stream_name):
            raise ConfigurationConflictError(
                "delivery_logging.enabled is false but a log group or stream name is set"
            )
        if dl.log_stream_name and not dl.log_group_name:
            raise ConfigurationConflictError(
                "delivery_logging.log_stream_name requires delivery_logging.log_group_name"
            )
        return self


def _load_yaml(path: Path) -> Dict[str, Any]:
    with path.open("r", encoding="utf-8") as fh:
        data = yaml.safe_load(fh) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Configuration file {path} must contain a mapping, got {type(data).__name__}")
    return data


def default_config_dir() -> Path:
    return Path(__file__).parent.parent / "config"


def load_config(env: Optional[str] = None, config_dir: Optional[str] = None) -> AppConfig:
    """Load configuration for the given environment.

    Args:
        env: Environment name (dev/prod). If None, uses ENVIRONMENT env var.
        config_dir: Directory holding {env}.yml files.

    Returns:
        Loaded configuration object.

    Raises:
        FileNotFoundError: If configuration file doesn't exist.
        yaml.YAMLError: If the file is not valid YAML.
        ValueError: If the file does not hold a mapping.
        pydantic.ValidationError: If configuration is invalid.
    """
    env = env or os.getenv("ENVIRONMENT", "dev")
    base = Path(config_dir) if config_dir else default_config_dir()
    cfg_path = base / f"{env}.yml"

    if not cfg_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {cfg_path}")

    raw = _load_yaml(cfg_path)
    raw.setdefault("environment", env)
    raw = _apply_env_overrides(raw)

    return AppConfig(**raw)


def _apply_env_overrides(config_data: Dict[str, Any]) -> Dict[str, Any]:
    """Apply environment variable overrides to configuration data."""
    if os.getenv("AWS_REGION"):
        config_data.setdefault("aws", {})["region"] = os.getenv("AWS_REGION")

    if os.getenv("FIREHOSE_STREAM_NAME"):
        config_data["delivery_stream_name"] = os.getenv("FIREHOSE_STREAM_NAME")

    # Destination overrides
    if os.getenv("FIREHOSE_BUCKET_NAME"):
        config_data.setdefault("destination", {})["bucket_name"] = os.getenv("FIREHOSE_BUCKET_NAME")
    if os.getenv("FIREHOSE_ROLE_ARN"):
        config_data.setdefault("destination", {})["role_arn"] = os.getenv("FIREHOSE_ROLE_ARN")
    if os.getenv("FIREHOSE_PREFIX"):
        config_data.setdefault("destination", {})["prefix"] = os.getenv("FIREHOSE_PREFIX")

    # Delivery logging overrides
    logging_enabled = os.getenv("FIREHOSE_LOGGING_ENABLED")
    if logging_enabled:
        config_data.setdefault("delivery_logging", {})["enabled"] = (
            logging_enabled.lower() == "true"
        )
    if os.getenv("FIREHOSE_LOG_GROUP_NAME"):
        config_data.setdefault("delivery_logging", {})["log_group_name"] = os.getenv("FIREHOSE_LOG_GROUP_NAME")

    if os.getenv("LOG_LEVEL"):
        config_data.setdefault("logging", {})["level"] = os.getenv("LOG_LEVEL")

    return config_data


def is_aws_deploy_allowed() -> bool:
    """Check if AWS deployments are allowed (safety flag)."""
    return os.getenv("ALLOW_AWS_DEPLOY", "").lower() in ("1", "true", "yes")
