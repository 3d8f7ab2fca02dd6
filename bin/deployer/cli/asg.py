"""AutoScalingGroup commands."""

from __future__ import annotations

import sys

import click

from deployer.amazon import AwsClients
from deployer.aws import asg
from deployer.cli import cli
from deployer.cli.cli import are_you_sure
from deployer.config import DeployerConfig
from deployer.errors import TRANSPORT_ERRORS, DeployerError


@cli.group(name="asg")
def asg_group():
    """AutoScalingGroup commands."""


@asg_group.command(name="instances")
@click.argument("asg_name")
def asg_instances(asg_name: str):
    """Show the instances of ASG_NAME and their lifecycle state."""
    try:
        instances = asg.get_instances(AwsClients.default().autoscaling, asg_name)
    except (DeployerError, *TRANSPORT_ERRORS) as e:
        print(f"❌ {e}")
        sys.exit(1)
    for instance_id, state in sorted(instances.items()):
        print(f"{instance_id: <20} {state}")


@asg_group.command(name="teardown")
@click.argument("asg_name")
@click.option("--yes", is_flag=True, help="Skip the confirmation prompt")
@click.pass_obj
def asg_teardown(cfg: DeployerConfig, asg_name: str, yes: bool):
    """Delete ASG_NAME, its instances and its alarms.

    Only use this on a previous release's group: nothing checks whether it is still serving.
    """
    clients = AwsClients.default()
    try:
        group = asg.find(clients.autoscaling, asg_name)
    except (DeployerError, *TRANSPORT_ERRORS) as e:
        print(f"❌ {e}")
        sys.exit(1)

    print(f"{group.name}: {group.project_name}/{group.config_name}/{group.service_name} release {group.release_id}")
    print(f"  {len(group.instance_ids)} instances, desired capacity {group.desired_capacity}")
    if not yes and not are_you_sure(f"teardown {group.name}", group.name):
        print("Teardown cancelled.")
        return

    try:
        asg.teardown(group, clients.autoscaling, clients.cloudwatch)
    except TRANSPORT_ERRORS as e:
        print(f"❌ Error tearing down {group.name}: {e}")
        sys.exit(1)
    print(f"✅ {group.name} torn down")
