from __future__ import annotations

import argparse
import json
import logging
import os
from pathlib import Path

import yaml
from aws_cdk import App, Environment
from pydantic import ValidationError

from .config import load_config
from .errors import DestinationConfigurationError
from .stack import DeliveryStreamStack

logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(prog="firehose-destinations")
    parser.add_argument("--env", default=None, help="Environment name (reads config/<env>.yml)")
    parser.add_argument("--config-dir", default=None, help="Directory containing environment YAML files")
    parser.add_argument("--output", default=None, help="Write the synthesized template to this file")
    args = parser.parse_args(argv)

    try:
        config = load_config(args.env, config_dir=args.config_dir)
    except FileNotFoundError as e:
        print(str(e))
        return 2
    except ValidationError as e:
        print(f"Invalid configuration: {e}")
        return 3
    except (yaml.YAMLError, ValueError) as e:
        print(f"Unreadable configuration: {e}")
        return 3

    logging.basicConfig(
        level=config.logging.level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app = App()
    try:
        stack = DeliveryStreamStack(
            app,
            f"FirehoseDestinations-{config.environment}",
            config=config,
            env=Environment(account=os.getenv("CDK_DEFAULT_ACCOUNT"), region=config.aws.region),
        )
    except DestinationConfigurationError as e:
        print(f"Invalid destination configuration: {e}")
        return 3

    template = app.synth().get_stack_by_name(stack.stack_name).template
    rendered = json.dumps(template, indent=2, sort_keys=True)

    if args.output:
        Path(args.output).write_text(rendered + "\n", encoding="utf-8")
        logger.info(f"Wrote template for {stack.stack_name} to {args.output}")
    else:
        print(rendered)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
