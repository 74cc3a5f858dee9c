"""Delivery stream CDK stack.

This stack creates a DirectPut Kinesis Data Firehose delivery stream that
writes into S3:
- S3 bucket (imported by name or created encrypted and private)
- IAM role assumed by Firehose (imported by ARN or created on bind)
- CloudWatch log group/stream for delivery errors (optional)
"""

import logging
from typing import Any, Dict, Union

from aws_cdk import (
    CfnOutput,
    Duration,
    RemovalPolicy,
    Size,
    Stack,
    Tags,
)
from aws_cdk import (
    aws_iam as iam,
)
from aws_cdk import (
    aws_logs as logs,
)
from aws_cdk import (
    aws_s3 as s3,
)
from constructs import Construct
from pydantic import BaseModel

from .config import AppConfig
from .delivery_stream import DeliveryStream
from .destination import S3Bucket

logger = logging.getLogger(__name__)


class DeliveryStreamStack(Stack):
    """CDK Stack for an S3-backed delivery stream."""

    def __init__(
        self,
        scope: Construct,
        construct_id: str,
        *,
        # `config` may be a plain dict or a Pydantic model (AppConfig)
        config: Union[Dict[str, Any], BaseModel],
        **kwargs
    ) -> None:
        """Initialize the Delivery Stream Stack.

        Args:
            scope: CDK scope
            construct_id: Stack identifier
            config: Configuration from the config loader
            **kwargs: Additional stack arguments

        Raises:
            pydantic.ValidationError: If a dict config is invalid.
            DestinationConfigurationError: If destination options conflict.
        """
        super().__init__(scope, construct_id, **kwargs)

        if isinstance(config, BaseModel):
            self.config = AppConfig.model_validate(config.model_dump())
        else:
            self.config = AppConfig(**config)

        self.bucket = self._resolve_bucket()
        self.destination = self._create_destination()

        self.delivery_stream = DeliveryStream(
            self, "DeliveryStream",
            destinations=[self.destination],
            delivery_stream_name=self.config.delivery_stream_name,
        )

        CfnOutput(
            self, "DeliveryStreamName",
            value=self.delivery_stream.delivery_stream_name,
            description="Name of the delivery stream",
        )
        CfnOutput(
            self, "DeliveryStreamArn",
            value=self.delivery_stream.delivery_stream_arn,
            description="ARN of the delivery stream",
        )

        self._apply_tags()

    def _resolve_bucket(self) -> s3.IBucket:
        """Import the configured bucket or create a private, encrypted one."""
        bucket_name = self.config.destination.bucket_name
        if bucket_name:
            logger.info(f"Importing destination bucket {bucket_name}")
            return s3.Bucket.from_bucket_name(self, "DestinationBucket", bucket_name)

        return s3.Bucket(
            self, "DestinationBucket",
            encryption=s3.BucketEncryption.S3_MANAGED,
            block_public_access=s3.BlockPublicAccess.BLOCK_ALL,
            enforce_ssl=True,
            removal_policy=RemovalPolicy.RETAIN,
        )

    def _create_destination(self) -> S3Bucket:
        settings = self.config.destination
        delivery_logging = self.config.delivery_logging

        role = None
        if settings.role_arn:
            role = iam.Role.from_role_arn(self, "DestinationRole", settings.role_arn, mutable=True)

        log_group = None
        log_stream = None
        if delivery_logging.log_group_name:
            log_group = logs.LogGroup.from_log_group_name(
                self, "DeliveryLogGroup", delivery_logging.log_group_name
            )
            if delivery_logging.log_stream_name:
                log_stream = logs.LogStream.from_log_stream_name(
                    self, "DeliveryLogStream", delivery_logging.log_stream_name
                )

        buffering_interval = None
        if settings.buffering_interval_seconds is not None:
            buffering_interval = Duration.seconds(settings.buffering_interval_seconds)
        buffering_size = None
        if settings.buffering_size_mib is not None:
            buffering_size = Size.mebibytes(settings.buffering_size_mib)

        return S3Bucket(
            self.bucket,
            role=role,
            logging=delivery_logging.enabled,
            log_group=log_group,
            log_stream=log_stream,
            prefix=settings.prefix,
            error_output_prefix=settings.error_output_prefix,
            compression=settings.compression,
            buffering_interval=buffering_interval,
            buffering_size=buffering_size,
        )

    def _apply_tags(self) -> None:
        """Apply consistent tags to all resources."""
        Tags.of(self).add("Application", self.config.app_name)
        Tags.of(self).add("Environment", self.config.environment)
