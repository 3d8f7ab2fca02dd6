"""Auto Scaling groups: lookup, the per-release index, and teardown.

Every group this deployer creates carries the full identity as tags, so which
release (and which service) a group belongs to is answered by its tags alone.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from deployer.aws.finder import Finder
from deployer.errors import DuplicatePreviousError, IdentityMismatchError
from deployer.identity import has_config_name, has_project_name, has_release_id
from deployer.tags import CONFIG_NAME, PROJECT_NAME, RELEASE_ID, SERVICE_NAME, fetch_tag, tag_filter

LOGGER = logging.getLogger(__name__)

# CloudWatch DeleteAlarms accepts at most this many names per call
MAX_ALARMS_PER_DELETE = 100


@dataclass(frozen=True)
class ScalingGroup:
    name: str
    arn: str | None = None
    project_name: str | None = None
    config_name: str | None = None
    service_name: str | None = None
    release_id: str | None = None
    desired_capacity: int = 0
    instance_ids: tuple[str, ...] = field(default_factory=tuple)

    @classmethod
    def from_description(cls, group: dict, tags: list[dict] | None = None) -> ScalingGroup:
        if tags is None:
            tags = group.get("Tags", [])
        return cls(
            name=group["AutoScalingGroupName"],
            arn=group.get("AutoScalingGroupARN"),
            project_name=fetch_tag(tags, PROJECT_NAME),
            config_name=fetch_tag(tags, CONFIG_NAME),
            service_name=fetch_tag(tags, SERVICE_NAME),
            release_id=fetch_tag(tags, RELEASE_ID),
            desired_capacity=group.get("DesiredCapacity", 0),
            instance_ids=tuple(instance["InstanceId"] for instance in group.get("Instances", [])),
        )


class ScalingGroupFinder(Finder[ScalingGroup]):
    kind = "AutoScalingGroup"
    name_key = "AutoScalingGroupName"
    identifier_key = "AutoScalingGroupName"
    tag_owner_key = "AutoScalingGroupName"

    def _describe_by_name(self, name: str) -> list[dict]:
        return self.client.describe_auto_scaling_groups(AutoScalingGroupNames=[name])["AutoScalingGroups"]

    def _describe_tags(self, identifier: str) -> list[dict]:
        return self._describe_by_name(identifier)

    def _build(self, resource: dict, tags: list[dict]) -> ScalingGroup:
        return ScalingGroup.from_description(resource, tags)


def find(as_client, name: str) -> ScalingGroup:
    return ScalingGroupFinder(as_client).find(name)


def get_instances(as_client, name: str) -> dict[str, str]:
    """Get the lifecycle state of each instance in the named group."""
    group = ScalingGroupFinder(as_client).find_by_name(name)
    return {instance["InstanceId"]: instance["LifecycleState"] for instance in group.get("Instances", [])}


#####
# Release index
#####


def _for_project_config(as_client, project_name: str, config_name: str) -> list[ScalingGroup]:
    # The tag filters narrow things down server side; the exact match is still done on the tags we get back
    paginator = as_client.get_paginator("describe_auto_scaling_groups")
    pages = paginator.paginate(Filters=[tag_filter(PROJECT_NAME, project_name), tag_filter(CONFIG_NAME, config_name)])
    groups = []
    for page in pages:
        for description in page["AutoScalingGroups"]:
            group = ScalingGroup.from_description(description)
            if has_project_name(group, project_name) and has_config_name(group, config_name):
                groups.append(group)
    return groups


def for_release_id(as_client, project_name: str, config_name: str, release_id: str) -> list[ScalingGroup]:
    """All groups of the project and config that belong to ``release_id``."""
    return [
        group
        for group in _for_project_config(as_client, project_name, config_name)
        if has_release_id(group, release_id)
    ]


def for_not_release_id(as_client, project_name: str, config_name: str, release_id: str) -> list[ScalingGroup]:
    """All groups of the project and config that belong to any release other than ``release_id``."""
    return [
        group
        for group in _for_project_config(as_client, project_name, config_name)
        if not has_release_id(group, release_id)
    ]


def for_not_release_id_service_map(
    as_client, project_name: str, config_name: str, release_id: str
) -> dict[str, ScalingGroup]:
    """The previous release's group for each service, keyed by service name.

    A service may only ever have one group from an earlier release; finding two
    means the fleet is in a state no deploy should touch.
    """
    by_service: dict[str, ScalingGroup] = {}
    for group in for_not_release_id(as_client, project_name, config_name, release_id):
        if group.service_name is None:
            raise IdentityMismatchError(f"AutoScalingGroup {group.name!r} has no ServiceName tag")

        existing = by_service.get(group.service_name)
        if existing is not None:
            raise DuplicatePreviousError(
                f"Found multiple previous AutoScalingGroups for service {group.service_name!r}: "
                f"{existing.name!r} and {group.name!r}"
            )
        by_service[group.service_name] = group

    return by_service


#####
# Teardown
#####


def alarm_names(as_client, group_name: str) -> list[str]:
    """Names of the CloudWatch alarms wired to the group's scaling policies."""
    names = []
    paginator = as_client.get_paginator("describe_policies")
    for page in paginator.paginate(AutoScalingGroupName=group_name):
        for policy in page["ScalingPolicies"]:
            names.extend(alarm["AlarmName"] for alarm in policy.get("Alarms", []))
    return names


def delete_alarms(cw_client, names: list[str]) -> None:
    for start in range(0, len(names), MAX_ALARMS_PER_DELETE):
        cw_client.delete_alarms(AlarmNames=names[start : start + MAX_ALARMS_PER_DELETE])


def teardown(group: ScalingGroup, as_client, cw_client) -> None:
    """Delete a superseded group, its instances, and then its alarms.

    Only ever call this with a previous release's group. The alarm names must be
    read first since the policies disappear along with the group, but the alarms
    themselves go only once the group is gone.
    """
    names = alarm_names(as_client, group.name)

    LOGGER.info("Deleting AutoScalingGroup %s (%d instances)", group.name, len(group.instance_ids))
    as_client.delete_auto_scaling_group(AutoScalingGroupName=group.name, ForceDelete=True)

    if names:
        LOGGER.info("Deleting %d alarms for %s", len(names), group.name)
        delete_alarms(cw_client, names)
