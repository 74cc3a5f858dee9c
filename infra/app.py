"""CDK App entry point for the delivery stream infrastructure."""

import os
import sys
from pathlib import Path

# Add the repository root to path so the app runs from a plain checkout
sys.path.insert(0, str(Path(__file__).parent.parent))

from aws_cdk import App, Environment

from firehosedestinations.config import is_aws_deploy_allowed, load_config
from firehosedestinations.stack import DeliveryStreamStack


def main():
    """Main CDK app entry point."""
    app = App()

    # Load configuration
    env_name = os.getenv("ENVIRONMENT", "dev")
    config = load_config(env_name)

    # Safety check for AWS deployment
    if not is_aws_deploy_allowed():
        print("WARNING: ALLOW_AWS_DEPLOY not set. This is a dry-run synthesis only.")
        print("Set ALLOW_AWS_DEPLOY=1 to enable actual AWS deployments.")

    env = Environment(
        account=config.aws.account or os.getenv("CDK_DEFAULT_ACCOUNT"),
        region=config.aws.region
    )

    DeliveryStreamStack(
        app,
        f"FirehoseDestinations-{config.environment}",
        config=config,
        env=env,
        description=f"S3 delivery stream for {config.environment} environment"
    )

    app.synth()


if __name__ == "__main__":
    main()
