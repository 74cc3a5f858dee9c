"""Tests for configuration loading."""

import pytest
import yaml
from pydantic import ValidationError

from firehosedestinations.config import (
    AppConfig,
    _apply_env_overrides,
    is_aws_deploy_allowed,
    load_config,
)
from firehosedestinations.options import Compression


@pytest.fixture
def config_dir(tmp_path):
    (tmp_path / "test.yml").write_text(
        "environment: test\n"
        "app_name: records\n"
        "aws:\n"
        "  region: eu-west-1\n"
        "destination:\n"
        "  bucket_name: records-bucket\n"
        "  compression: GZIP\n"
        "  buffering_interval_seconds: 120\n"
        "delivery_logging:\n"
        "  log_group_name: /aws/kinesisfirehose/records\n",
        encoding="utf-8",
    )
    return tmp_path


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for key in (
        "ENVIRONMENT", "AWS_REGION", "FIREHOSE_STREAM_NAME", "FIREHOSE_BUCKET_NAME",
        "FIREHOSE_ROLE_ARN", "FIREHOSE_PREFIX", "FIREHOSE_LOGGING_ENABLED",
        "FIREHOSE_LOG_GROUP_NAME", "LOG_LEVEL", "ALLOW_AWS_DEPLOY",
    ):
        monkeypatch.delenv(key, raising=False)


def test_load_config_from_yaml(config_dir):
    config = load_config("test", config_dir=str(config_dir))

    assert config.environment == "test"
    assert config.app_name == "records"
    assert config.aws.region == "eu-west-1"
    assert config.destination.bucket_name == "records-bucket"
    assert config.destination.compression is Compression.GZIP
    assert config.destination.buffering_interval_seconds == 120
    assert config.delivery_logging.enabled is True
    assert config.delivery_logging.log_group_name == "/aws/kinesisfirehose/records"
    assert config.logging.level == "INFO"


def test_environment_name_defaults_to_file_name(tmp_path):
    (tmp_path / "staging.yml").write_text("app_name: records\n", encoding="utf-8")

    config = load_config("staging", config_dir=str(tmp_path))
    assert config.environment == "staging"


def test_load_config_fails_when_file_missing(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_config("nonexistent_env", config_dir=str(tmp_path))


def test_environment_variable_selects_file(config_dir, monkeypatch):
    monkeypatch.setenv("ENVIRONMENT", "test")
    assert load_config(config_dir=str(config_dir)).app_name == "records"


def test_apply_env_overrides_sets_values(monkeypatch):
    monkeypatch.setenv("AWS_REGION", "eu-central-1")
    monkeypatch.setenv("FIREHOSE_STREAM_NAME", "stream-override")
    monkeypatch.setenv("FIREHOSE_BUCKET_NAME", "bucket-override")
    monkeypatch.setenv("FIREHOSE_PREFIX", "raw/")
    monkeypatch.setenv("FIREHOSE_LOGGING_ENABLED", "false")
    monkeypatch.setenv("LOG_LEVEL", "DEBUG")

    out = _apply_env_overrides({"aws": {"region": "us-east-1"}})
    assert out["aws"]["region"] == "eu-central-1"
    assert out["delivery_stream_name"] == "stream-override"
    assert out["destination"]["bucket_name"] == "bucket-override"
    assert out["destination"]["prefix"] == "raw/"
    assert out["delivery_logging"]["enabled"] is False
    assert out["logging"]["level"] == "DEBUG"


def test_disabling_logging_with_log_group_is_rejected(config_dir, monkeypatch):
    monkeypatch.setenv("FIREHOSE_LOGGING_ENABLED", "false")

    with pytest.raises(ValidationError, match="log group"):
        load_config("test", config_dir=str(config_dir))


def test_log_stream_requires_log_group():
    with pytest.raises(ValidationError):
        AppConfig(environment="test", delivery_logging={"log_stream_name": "deliveries"})


@pytest.mark.parametrize("field,value", [
    ("buffering_interval_seconds", 30),
    ("buffering_interval_seconds", 901),
    ("buffering_size_mib", 0),
    ("buffering_size_mib", 129),
])
def test_buffering_bounds(field, value):
    with pytest.raises(ValidationError):
        AppConfig(environment="test", destination={field: value})


def test_deploy_guard(monkeypatch):
    assert is_aws_deploy_allowed() is False
    monkeypatch.setenv("ALLOW_AWS_DEPLOY", "1")
    assert is_aws_deploy_allowed() is True


def test_logging_level_is_normalized():
    config = AppConfig(environment="test", logging={"level": "debug"})
    assert config.logging.level == "DEBUG"


def test_unknown_logging_level_rejected():
    with pytest.raises(ValidationError, match="logging.level"):
        AppConfig(environment="test", logging={"level": "LOUD"})


def test_non_mapping_config_rejected(tmp_path):
    (tmp_path / "listroot.yml").write_text("- environment\n- test\n", encoding="utf-8")

    with pytest.raises(ValueError, match="mapping"):
        load_config("listroot", config_dir=str(tmp_path))


def test_malformed_yaml_raises_yaml_error(tmp_path):
    (tmp_path / "malformed.yml").write_text("destination: [records\n", encoding="utf-8")

    with pytest.raises(yaml.YAMLError):
        load_config("malformed", config_dir=str(tmp_path))
