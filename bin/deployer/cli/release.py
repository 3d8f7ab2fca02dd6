"""Release commands: resolve, previous, deploy and halt."""

from __future__ import annotations

import json
import logging
import sys

import click

from deployer.amazon import AwsClients, state_machine_arn
from deployer.aws.asg import for_not_release_id_service_map
from deployer.cli import cli
from deployer.config import DeployerConfig
from deployer.errors import TRANSPORT_ERRORS, DeployerError
from deployer.execution import start_execution
from deployer.halt import halt
from deployer.models import Release
from deployer.release_state import ReleaseState
from deployer.service_resources import resolve_release, validate_release

LOGGER = logging.getLogger(__name__)


def _load_release(file_or_json: str) -> Release:
    try:
        return Release.from_file_or_json(file_or_json)
    except (OSError, ValueError) as e:
        raise click.BadParameter(str(e), param_hint="RELEASE") from e


@cli.command(name="resolve")
@click.argument("release_file_or_json", metavar="RELEASE")
@click.pass_obj
def resolve_cmd(cfg: DeployerConfig, release_file_or_json: str):
    """Find and validate every resource the services of RELEASE need."""
    release = _load_release(release_file_or_json)
    try:
        resources = resolve_release(release, AwsClients.default())
        validate_release(release, resources, cfg.deploy_with)
    except (DeployerError, *TRANSPORT_ERRORS) as e:
        LOGGER.error("Release %s failed validation: %s", release.release_id, e)
        print(f"❌ {e}")
        sys.exit(1)

    names = {service: service_resources.to_names().to_dict() for service, service_resources in resources.items()}
    click.echo(json.dumps(names, indent=2, sort_keys=True))


@cli.command(name="previous")
@click.argument("project_name")
@click.argument("config_name")
@click.argument("release_id")
@click.pass_obj
def previous_cmd(cfg: DeployerConfig, project_name: str, config_name: str, release_id: str):
    """List the AutoScalingGroups of releases other than RELEASE_ID, by service."""
    try:
        groups = for_not_release_id_service_map(AwsClients.default().autoscaling, project_name, config_name, release_id)
    except (DeployerError, *TRANSPORT_ERRORS) as e:
        print(f"❌ {e}")
        sys.exit(1)

    if not groups:
        print(f"No previous AutoScalingGroups for {project_name}/{config_name}")
        return
    for service_name, group in sorted(groups.items()):
        print(f"{service_name: <24} {group.name: <48} {group.release_id or '-': <24} {group.desired_capacity}")


@cli.command(name="deploy")
@click.argument("release_file_or_json", metavar="RELEASE")
@click.pass_obj
def deploy_cmd(cfg: DeployerConfig, release_file_or_json: str):
    """Upload RELEASE and start a deployer execution for it."""
    release = _load_release(release_file_or_json)
    clients = AwsClients.default()
    try:
        arn = state_machine_arn(cfg.state_machine_name)
        ReleaseState(clients.s3, cfg.state_bucket).upload(release)
        execution = start_execution(clients.sfn, arn, release)
    except (ValueError, *TRANSPORT_ERRORS) as e:
        print(f"❌ Error starting deploy: {e}")
        sys.exit(1)
    print(f"Started {execution['executionArn']}")


@cli.command(name="halt")
@click.argument("release_file_or_json", metavar="RELEASE")
@click.pass_obj
def halt_cmd(cfg: DeployerConfig, release_file_or_json: str):
    """Halt the execution currently deploying RELEASE."""
    release = _load_release(release_file_or_json)

    def show_progress(_status: str) -> None:
        click.echo(".", nl=False)

    try:
        status = halt(
            release,
            AwsClients.default(),
            state_machine_arn(cfg.state_machine_name),
            on_poll=show_progress,
            poll_interval=cfg.halt.poll_interval,
            max_polls=cfg.halt.max_polls,
            state_bucket=cfg.state_bucket,
        )
    except (DeployerError, ValueError, TimeoutError, *TRANSPORT_ERRORS) as e:
        click.echo("")
        print(f"❌ Error halting release {release.release_id}: {e}")
        sys.exit(1)
    click.echo("")
    print(f"Release {release.release_id} halted, execution finished with {status}")
