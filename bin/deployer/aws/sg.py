"""EC2 security groups, looked up by their Name tag."""

from __future__ import annotations

from dataclasses import dataclass

from deployer.aws.finder import Finder
from deployer.tags import CONFIG_NAME, NAME, PROJECT_NAME, SERVICE_NAME, fetch_tag, tag_filter


@dataclass(frozen=True)
class SecurityGroup:
    group_id: str
    name: str | None = None
    project_name: str | None = None
    config_name: str | None = None
    service_name: str | None = None


class SecurityGroupFinder(Finder[SecurityGroup]):
    kind = "SecurityGroup"
    identifier_key = "GroupId"
    tag_owner_key = "GroupId"
    not_found_codes = ("InvalidGroup.NotFound", "InvalidGroupId.NotFound")

    def _name_of(self, resource: dict) -> str | None:
        return fetch_tag(resource.get("Tags"), NAME)

    def _describe_by_name(self, name: str) -> list[dict]:
        return self.client.describe_security_groups(Filters=[tag_filter(NAME, name)])["SecurityGroups"]

    def _describe_tags(self, identifier: str) -> list[dict]:
        return self.client.describe_security_groups(GroupIds=[identifier])["SecurityGroups"]

    def _build(self, resource: dict, tags: list[dict]) -> SecurityGroup:
        return SecurityGroup(
            group_id=resource["GroupId"],
            name=fetch_tag(tags, NAME),
            project_name=fetch_tag(tags, PROJECT_NAME),
            config_name=fetch_tag(tags, CONFIG_NAME),
            service_name=fetch_tag(tags, SERVICE_NAME),
        )


def find_all(ec2_client, names: list[str]) -> list[SecurityGroup]:
    return SecurityGroupFinder(ec2_client).find_all(names)
