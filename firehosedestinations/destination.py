"""S3 bucket destination for Kinesis Data Firehose delivery streams.

A destination is bound into the delivery stream that uses it. Binding
resolves the role and logging options, attaches least-privilege grants to the
role and returns the ``ExtendedS3DestinationConfiguration`` body together with
the grants the stream has to depend on. Firehose validates the role's
permissions when the stream is created, so the stream must not be provisioned
before the role policy exists.
"""

import abc
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from aws_cdk import Duration, Size
from aws_cdk import aws_iam as iam
from aws_cdk import aws_kinesisfirehose as firehose
from aws_cdk import aws_logs as logs
from aws_cdk import aws_s3 as s3
from constructs import Construct, IDependable

from .errors import DestinationConfigurationError
from .options import (
    Compression,
    ExplicitRole,
    LoggingChoice,
    LoggingDisabled,
    LoggingWithGroup,
    RoleChoice,
    logging_choice,
    role_choice,
)

logger = logging.getLogger(__name__)

FIREHOSE_SERVICE_PRINCIPAL = "firehose.amazonaws.com"

# Action families rather than exact calls so new S3 APIs keep working.
BUCKET_ACTIONS = [
    "s3:GetObject*",
    "s3:GetBucket*",
    "s3:List*",
    "s3:DeleteObject*",
    "s3:PutObject*",
    "s3:Abort*",
]

LOG_ACTIONS = [
    "logs:CreateLogStream",
    "logs:PutLogEvents",
]

DEFAULT_BUFFERING_INTERVAL_SECONDS = 300
DEFAULT_BUFFERING_SIZE_MIB = 5

ROLE_ID = "S3 Destination Role"
LOG_GROUP_ID = "LogGroup"
LOG_STREAM_ID = "S3Destination"


@dataclass
class DestinationConfig:
    """Result of binding a destination into a delivery stream."""
    extended_s3_destination_configuration: firehose.CfnDeliveryStream.ExtendedS3DestinationConfigurationProperty
    # Grants the delivery stream resource must depend on
    dependables: List[IDependable] = field(default_factory=list)


class Destination(abc.ABC):
    """A target that a delivery stream delivers records to."""

    @abc.abstractmethod
    def bind(self, scope: Construct) -> DestinationConfig:
        """Bind the destination into the delivery stream construct ``scope``."""


class S3Bucket(Destination):
    """Deliver records into an S3 bucket.

    Args:
        bucket: Bucket records are written to
        role: Role Firehose assumes to write to the bucket. Created when omitted.
        logging: Log delivery errors to CloudWatch Logs
        log_group: Existing log group for delivery errors. Created when omitted.
        log_stream: Existing stream in ``log_group`` to write errors to
        prefix: Key prefix for delivered objects
        error_output_prefix: Key prefix for records that failed delivery
        compression: Compression format applied to delivered objects
        buffering_interval: Time to buffer records before delivery (60s-900s)
        buffering_size: Amount of data to buffer before delivery (1-128 MiB)
    """

    def __init__(
        self,
        bucket: s3.IBucket,
        *,
        role: Optional[iam.IRole] = None,
        logging: bool = True,
        log_group: Optional[logs.ILogGroup] = None,
        log_stream: Optional[logs.ILogStream] = None,
        prefix: Optional[str] = None,
        error_output_prefix: Optional[str] = None,
        compression: Optional[Compression] = None,
        buffering_interval: Optional[Duration] = None,
        buffering_size: Optional[Size] = None,
    ) -> None:
        self.bucket = bucket
        self.role_choice: RoleChoice = role_choice(role)
        self.logging_choice: LoggingChoice = logging_choice(logging, log_group, log_stream)
        self.prefix = prefix
        self.error_output_prefix = error_output_prefix
        self.compression = Compression(compression) if compression is not None else None
        self._buffering_hints = _buffering_hints(buffering_interval, buffering_size)
        # Keyed by id(scope); the scope is held so the id stays unique
        self._bound: Dict[int, Tuple[Construct, DestinationConfig]] = {}

    def bind(self, scope: Construct) -> DestinationConfig:
        path = scope.node.path
        if id(scope) in self._bound:
            logger.debug(f"S3 destination already bound into {path}, reusing configuration")
            return self._bound[id(scope)][1]

        role = self._resolve_role(scope)

        bucket_grant = iam.Grant.add_to_principal(
            grantee=role,
            actions=BUCKET_ACTIONS,
            resource_arns=[self.bucket.bucket_arn, self.bucket.arn_for_objects("*")],
        )
        dependables: List[IDependable] = [bucket_grant]

        logging_options, log_grant = self._resolve_logging(scope, role)
        if log_grant is not None:
            dependables.append(log_grant)

        config = DestinationConfig(
            extended_s3_destination_configuration=firehose.CfnDeliveryStream.ExtendedS3DestinationConfigurationProperty(
                bucket_arn=self.bucket.bucket_arn,
                role_arn=role.role_arn,
                cloud_watch_logging_options=logging_options,
                prefix=self.prefix,
                error_output_prefix=self.error_output_prefix,
                compression_format=self.compression.value if self.compression else None,
                buffering_hints=self._buffering_hints,
            ),
            dependables=dependables,
        )
        self._bound[id(scope)] = (scope, config)
        logger.info(
            f"Bound S3 destination into {path} with {len(dependables)} grant(s), "
            f"logging {type(self.logging_choice).__name__}"
        )
        return config

    def _resolve_role(self, scope: Construct) -> iam.IRole:
        if isinstance(self.role_choice, ExplicitRole):
            return self.role_choice.role

        existing = scope.node.try_find_child(ROLE_ID)
        if existing is not None:
            return existing

        logger.debug(f"Creating destination role in {scope.node.path}")
        return iam.Role(
            scope,
            ROLE_ID,
            assumed_by=iam.ServicePrincipal(FIREHOSE_SERVICE_PRINCIPAL),
        )

    def _resolve_logging(self, scope: Construct, role: iam.IRole):
        """Return the logging block (or None) and the grant for writing logs."""
        choice = self.logging_choice
        if isinstance(choice, LoggingDisabled):
            return None, None

        if isinstance(choice, LoggingWithGroup):
            log_group = choice.log_group
            log_stream_name = choice.log_stream.log_stream_name if choice.log_stream else None
        else:
            log_group = scope.node.try_find_child(LOG_GROUP_ID)
            if log_group is None:
                logger.debug(f"Creating delivery log group in {scope.node.path}")
                log_group = logs.LogGroup(scope, LOG_GROUP_ID)
            log_stream = log_group.node.try_find_child(LOG_STREAM_ID) or log_group.add_stream(LOG_STREAM_ID)
            log_stream_name = log_stream.log_stream_name

        log_grant = iam.Grant.add_to_principal(
            grantee=role,
            actions=LOG_ACTIONS,
            resource_arns=[log_group.log_group_arn],
        )
        options = firehose.CfnDeliveryStream.CloudWatchLoggingOptionsProperty(
            enabled=True,
            log_group_name=log_group.log_group_name,
            log_stream_name=log_stream_name,
        )
        return options, log_grant


def _buffering_hints(
    interval: Optional[Duration],
    size: Optional[Size],
) -> Optional[firehose.CfnDeliveryStream.BufferingHintsProperty]:
    if interval is None and size is None:
        return None

    interval_seconds = DEFAULT_BUFFERING_INTERVAL_SECONDS
    if interval is not None:
        try:
            interval_seconds = int(interval.to_seconds())
        except RuntimeError as e:
            raise DestinationConfigurationError(
                f"buffering interval must be a whole number of seconds: {e}"
            ) from e
        if not 60 <= interval_seconds <= 900:
            raise DestinationConfigurationError(
                f"buffering interval must be between 60 and 900 seconds, got {interval_seconds}"
            )

    size_mib = DEFAULT_BUFFERING_SIZE_MIB
    if size is not None:
        try:
            size_mib = int(size.to_mebibytes())
        except RuntimeError as e:
            raise DestinationConfigurationError(
                f"buffering size must be a whole number of MiB: {e}"
            ) from e
        if not 1 <= size_mib <= 128:
            raise DestinationConfigurationError(
                f"buffering size must be between 1 and 128 MiB, got {size_mib}"
            )

    return firehose.CfnDeliveryStream.BufferingHintsProperty(
        interval_in_seconds=interval_seconds,
        size_in_m_bs=size_mib,
    )
