"""EC2 subnets, looked up by their Name tag."""

from __future__ import annotations

from dataclasses import dataclass

from deployer.aws.finder import Finder
from deployer.tags import DEPLOY_WITH, NAME, fetch_tag, tag_filter


@dataclass(frozen=True)
class Subnet:
    subnet_id: str
    name: str | None = None
    deploy_with: str | None = None


class SubnetFinder(Finder[Subnet]):
    kind = "Subnet"
    identifier_key = "SubnetId"
    tag_owner_key = "SubnetId"
    not_found_codes = ("InvalidSubnetID.NotFound",)

    def _name_of(self, resource: dict) -> str | None:
        return fetch_tag(resource.get("Tags"), NAME)

    def _describe_by_name(self, name: str) -> list[dict]:
        return self.client.describe_subnets(Filters=[tag_filter(NAME, name)])["Subnets"]

    def _describe_tags(self, identifier: str) -> list[dict]:
        return self.client.describe_subnets(SubnetIds=[identifier])["Subnets"]

    def _build(self, resource: dict, tags: list[dict]) -> Subnet:
        return Subnet(
            subnet_id=resource["SubnetId"],
            name=fetch_tag(tags, NAME),
            deploy_with=fetch_tag(tags, DEPLOY_WITH),
        )


def find_all(ec2_client, names: list[str]) -> list[Subnet]:
    return SubnetFinder(ec2_client).find_all(names)
