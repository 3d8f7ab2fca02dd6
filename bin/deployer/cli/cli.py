import logging
from pathlib import Path

import click

from deployer.config import DEFAULT_CONFIG_PATH, DeployerConfig


@click.group()
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=DEFAULT_CONFIG_PATH,
    show_default=True,
    help="Deployer configuration file",
)
@click.option("--state-bucket", help="Override the S3 bucket holding release state")
@click.option("--state-machine", help="Override the deployer state machine name")
@click.option("--debug/--no-debug", help="Turn on debugging")
@click.pass_context
def cli(ctx: click.Context, config_path: Path, state_bucket: str, state_machine: str, debug: bool):
    if debug:
        logging.basicConfig(level=logging.DEBUG)
    else:
        logging.basicConfig(level=logging.INFO)
        logging.getLogger("boto3").setLevel(logging.WARNING)
        logging.getLogger("botocore").setLevel(logging.WARNING)
        logging.getLogger("urllib3").setLevel(logging.WARNING)
    ctx.obj = DeployerConfig.load(config_path).with_cli_overrides(
        state_bucket=state_bucket, state_machine_name=state_machine
    )


def are_you_sure(name: str, expected: str) -> bool:
    typed = input(f'Confirm operation: "{name}"\nType "{expected}" to proceed: ')
    return typed.strip() == expected
