"""IAM instance profiles. Their identity is the path, ``/project/config/service/``."""

from __future__ import annotations

from dataclasses import dataclass

from deployer.aws.finder import Finder


@dataclass(frozen=True)
class Profile:
    name: str
    arn: str | None = None
    path: str | None = None


def profile_path(project_name: str, config_name: str, service_name: str) -> str:
    return f"/{project_name}/{config_name}/{service_name}/"


class ProfileFinder(Finder[Profile]):
    """A profile's identity is its path, so the lookup stops at GetInstanceProfile: no tags are read."""

    kind = "InstanceProfile"
    name_key = "InstanceProfileName"
    identifier_key = "InstanceProfileName"
    not_found_codes = ("NoSuchEntity",)

    def _describe_by_name(self, name: str) -> list[dict]:
        return [self.client.get_instance_profile(InstanceProfileName=name)["InstanceProfile"]]

    def _build(self, resource: dict, tags: list[dict]) -> Profile:
        return Profile(name=resource["InstanceProfileName"], arn=resource.get("Arn"), path=resource.get("Path"))

    def find(self, name: str) -> Profile:
        return self._build(self.find_by_name(name), [])


def find(iam_client, name: str) -> Profile:
    return ProfileFinder(iam_client).find(name)
