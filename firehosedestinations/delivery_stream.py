"""Kinesis Data Firehose delivery stream construct."""

import logging
from typing import Optional, Sequence

from aws_cdk import aws_iam as iam
from aws_cdk import aws_kinesisfirehose as firehose
from constructs import Construct

from .destination import Destination
from .errors import DestinationConfigurationError

logger = logging.getLogger(__name__)

PUT_RECORD_ACTIONS = [
    "firehose:PutRecord",
    "firehose:PutRecordBatch",
]


class DeliveryStream(Construct):
    """A DirectPut delivery stream writing into a single destination.

    The destination's grants are declared as dependencies of the stream
    resource, so the role policy exists before Firehose validates it.
    """

    def __init__(
        self,
        scope: Construct,
        construct_id: str,
        *,
        destinations: Sequence[Destination],
        delivery_stream_name: Optional[str] = None,
    ) -> None:
        super().__init__(scope, construct_id)

        if len(destinations) != 1:
            raise DestinationConfigurationError(
                f"Only one destination is allowed per delivery stream, got {len(destinations)}"
            )

        destination_config = destinations[0].bind(self)

        self.resource = firehose.CfnDeliveryStream(
            self, "Resource",
            delivery_stream_type="DirectPut",
            delivery_stream_name=delivery_stream_name,
            extended_s3_destination_configuration=destination_config.extended_s3_destination_configuration,
        )
        if destination_config.dependables:
            self.resource.node.add_dependency(*destination_config.dependables)

        self.delivery_stream_name: str = self.resource.ref
        self.delivery_stream_arn: str = self.resource.attr_arn
        logger.debug(f"Declared delivery stream {self.node.path}")

    def grant_put_records(self, grantee: iam.IGrantable) -> iam.Grant:
        """Allow ``grantee`` to put records into this delivery stream."""
        return iam.Grant.add_to_principal(
            grantee=grantee,
            actions=PUT_RECORD_ACTIONS,
            resource_arns=[self.delivery_stream_arn],
        )
