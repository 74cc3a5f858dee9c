"""Option variants for delivery stream destinations.

User-facing keyword options (``role``, ``logging``, ``log_group``,
``log_stream``) are normalized once into explicit variants so that the
resolver only ever deals with consistent states:

- role: ``NoRole`` or ``ExplicitRole``
- logging: ``LoggingDisabled``, ``LoggingDefault`` or ``LoggingWithGroup``

Contradictory combinations raise ``ConfigurationConflictError`` here, before
any resource is created.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

from aws_cdk import aws_iam as iam
from aws_cdk import aws_logs as logs

from .errors import ConfigurationConflictError


class Compression(str, Enum):
    """Compression formats accepted by S3 destinations."""
    UNCOMPRESSED = "UNCOMPRESSED"
    GZIP = "GZIP"
    ZIP = "ZIP"
    SNAPPY = "Snappy"
    HADOOP_SNAPPY = "HADOOP_SNAPPY"


@dataclass(frozen=True)
class NoRole:
    """No role supplied; one is created when the destination is bound."""


@dataclass(frozen=True)
class ExplicitRole:
    role: iam.IRole


@dataclass(frozen=True)
class LoggingDisabled:
    """Delivery errors are not logged to CloudWatch."""


@dataclass(frozen=True)
class LoggingDefault:
    """Logging enabled with a log group and stream created on bind."""


@dataclass(frozen=True)
class LoggingWithGroup:
    log_group: logs.ILogGroup
    log_stream: Optional[logs.ILogStream] = None


RoleChoice = Union[NoRole, ExplicitRole]
LoggingChoice = Union[LoggingDisabled, LoggingDefault, LoggingWithGroup]


def role_choice(role: Optional[iam.IRole] = None) -> RoleChoice:
    if role is None:
        return NoRole()
    return ExplicitRole(role)


def logging_choice(
    logging: bool = True,
    log_group: Optional[logs.ILogGroup] = None,
    log_stream: Optional[logs.ILogStream] = None,
) -> LoggingChoice:
    """Resolve the logging options into a single variant.

    Args:
        logging: Whether delivery errors should be logged at all
        log_group: Existing log group to log into
        log_stream: Existing stream inside ``log_group``

    Raises:
        ConfigurationConflictError: If logging is disabled while a log group or
            stream is supplied, or a stream is supplied without its group.
    """
    if not logging:
        if log_group is not None:
            raise ConfigurationConflictError(
                "logging cannot be disabled when a log group is provided"
            )
        if log_stream is not None:
            raise ConfigurationConflictError(
                "logging cannot be disabled when a log stream is provided"
            )
        return LoggingDisabled()

    if log_stream is not None and log_group is None:
        raise ConfigurationConflictError(
            "a log stream can only be provided together with its log group"
        )

    if log_group is None:
        return LoggingDefault()
    return LoggingWithGroup(log_group, log_stream)
