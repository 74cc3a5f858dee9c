import pytest
from aws_cdk import aws_logs as logs

from firehosedestinations.errors import ConfigurationConflictError, DestinationConfigurationError
from firehosedestinations.options import (
    ExplicitRole,
    LoggingDefault,
    LoggingDisabled,
    LoggingWithGroup,
    NoRole,
    logging_choice,
    role_choice,
)


def test_role_choice_variants(destination_role):
    assert role_choice() == NoRole()
    assert role_choice(destination_role) == ExplicitRole(destination_role)


def test_logging_defaults_to_enabled():
    assert logging_choice() == LoggingDefault()


def test_logging_disabled():
    assert logging_choice(logging=False) == LoggingDisabled()


def test_logging_with_group(stack):
    log_group = logs.LogGroup.from_log_group_name(stack, "Log Group", "evergreen")

    choice = logging_choice(log_group=log_group)
    assert isinstance(choice, LoggingWithGroup)
    assert choice.log_group is log_group
    assert choice.log_stream is None


def test_disabled_logging_with_group_conflicts(stack):
    log_group = logs.LogGroup.from_log_group_name(stack, "Log Group", "evergreen")

    with pytest.raises(ConfigurationConflictError, match="log group"):
        logging_choice(logging=False, log_group=log_group)


def test_disabled_logging_with_stream_conflicts(stack):
    log_stream = logs.LogStream.from_log_stream_name(stack, "Log Stream", "deliveries")

    with pytest.raises(ConfigurationConflictError, match="log stream"):
        logging_choice(logging=False, log_stream=log_stream)


def test_stream_without_group_conflicts(stack):
    log_stream = logs.LogStream.from_log_stream_name(stack, "Log Stream", "deliveries")

    with pytest.raises(ConfigurationConflictError):
        logging_choice(log_stream=log_stream)


def test_conflict_is_a_configuration_error():
    # Callers catching the base class or ValueError also see conflicts
    assert issubclass(ConfigurationConflictError, DestinationConfigurationError)
    assert issubclass(ConfigurationConflictError, ValueError)
