"""Machine images, by image id or Name tag."""

from __future__ import annotations

from dataclasses import dataclass

from deployer.aws.finder import Finder
from deployer.tags import DEPLOY_WITH, NAME, fetch_tag, tag_filter


@dataclass(frozen=True)
class Image:
    image_id: str
    name: str | None = None
    deploy_with: str | None = None


def _is_image_id(name: str) -> bool:
    return name.startswith("ami-")


class ImageFinder(Finder[Image]):
    kind = "Image"
    identifier_key = "ImageId"
    tag_owner_key = "ImageId"
    not_found_codes = ("InvalidAMIID.NotFound", "InvalidAMIID.Malformed")

    def _name_of(self, resource: dict) -> str | None:
        return fetch_tag(resource.get("Tags"), NAME)

    def _name_matches(self, resource: dict, name: str) -> bool:
        if _is_image_id(name):
            return resource.get("ImageId") == name
        return self._name_of(resource) == name

    def _describe_by_name(self, name: str) -> list[dict]:
        if _is_image_id(name):
            return self.client.describe_images(ImageIds=[name])["Images"]
        return self.client.describe_images(Filters=[tag_filter(NAME, name)])["Images"]

    def _describe_tags(self, identifier: str) -> list[dict]:
        return self.client.describe_images(ImageIds=[identifier])["Images"]

    def _build(self, resource: dict, tags: list[dict]) -> Image:
        return Image(
            image_id=resource["ImageId"],
            name=fetch_tag(tags, NAME),
            deploy_with=fetch_tag(tags, DEPLOY_WITH),
        )


def find(ec2_client, name_or_id: str) -> Image:
    return ImageFinder(ec2_client).find(name_or_id)
