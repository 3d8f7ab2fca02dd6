"""ELBv2 target groups."""

from __future__ import annotations

from dataclasses import dataclass

from deployer.aws.finder import Finder
from deployer.tags import CONFIG_NAME, PROJECT_NAME, SERVICE_NAME, fetch_tag


@dataclass(frozen=True)
class TargetGroup:
    target_group_arn: str
    target_group_name: str | None = None
    project_name: str | None = None
    config_name: str | None = None
    service_name: str | None = None


class TargetGroupFinder(Finder[TargetGroup]):
    kind = "TargetGroup"
    name_key = "TargetGroupName"
    identifier_key = "TargetGroupArn"
    tag_owner_key = "ResourceArn"
    not_found_codes = ("TargetGroupNotFound",)

    def _describe_by_name(self, name: str) -> list[dict]:
        return self.client.describe_target_groups(Names=[name])["TargetGroups"]

    def _describe_tags(self, identifier: str) -> list[dict]:
        return self.client.describe_tags(ResourceArns=[identifier])["TagDescriptions"]

    def _build(self, resource: dict, tags: list[dict]) -> TargetGroup:
        return TargetGroup(
            target_group_arn=resource["TargetGroupArn"],
            target_group_name=resource.get("TargetGroupName"),
            project_name=fetch_tag(tags, PROJECT_NAME),
            config_name=fetch_tag(tags, CONFIG_NAME),
            service_name=fetch_tag(tags, SERVICE_NAME),
        )


def find_all(elb_client, names: list[str]) -> list[TargetGroup]:
    return TargetGroupFinder(elb_client).find_all(names)


def get_instances(elb_client, target_group_arn: str, instance_ids: list[str]) -> dict[str, str]:
    """Get the target health state of each of ``instance_ids`` in a target group.

    The describe call goes out even for an empty list; targets that were not
    asked about are left out of the result.
    """
    response = elb_client.describe_target_health(
        TargetGroupArn=target_group_arn, Targets=[{"Id": iid} for iid in instance_ids]
    )
    wanted = set(instance_ids)
    return {
        target["Target"]["Id"]: target["TargetHealth"]["State"]
        for target in response["TargetHealthDescriptions"]
        if target["Target"]["Id"] in wanted
    }
