import sys
from pathlib import Path

import pytest
from aws_cdk import Stack
from aws_cdk import aws_iam as iam
from aws_cdk import aws_s3 as s3

# Add the repository root to sys.path so tests can import the package directly.
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))


@pytest.fixture
def stack():
    """Bare stack the destination resources are synthesized into."""
    return Stack()


@pytest.fixture
def bucket(stack):
    return s3.Bucket(stack, "Bucket")


@pytest.fixture
def destination_role(stack):
    return iam.Role(
        stack, "Destination Role",
        assumed_by=iam.ServicePrincipal("firehose.amazonaws.com"),
    )
