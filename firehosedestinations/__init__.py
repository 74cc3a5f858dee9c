"""CDK constructs for delivering Kinesis Data Firehose records into S3."""

from .delivery_stream import DeliveryStream
from .destination import Destination, DestinationConfig, S3Bucket
from .errors import ConfigurationConflictError, DestinationConfigurationError
from .options import Compression

__all__ = [
    "Compression",
    "ConfigurationConflictError",
    "DeliveryStream",
    "Destination",
    "DestinationConfig",
    "DestinationConfigurationError",
    "S3Bucket",
]
