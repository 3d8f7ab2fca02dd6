"""The lookup shared by every resource kind: describe by name, then fetch tags by identifier."""

from __future__ import annotations

import logging
from typing import Any, Callable, Generic, Iterable, TypeVar

from botocore.exceptions import ClientError

from deployer.errors import NotFoundError, is_client_error

LOGGER = logging.getLogger(__name__)

R = TypeVar("R")


class Finder(Generic[R]):
    """Looks up one kind of AWS resource and builds its value type.

    Subclasses describe the kind: how to ask AWS for a resource by name and for
    the tags of a resource by identifier, which response keys hold the name,
    the identifier and the tag owner, and which error codes mean "no such
    resource". Everything else, including the checks that the response is
    exactly the resource asked for, lives here.
    """

    kind = "Resource"
    name_key = "Name"
    identifier_key = "Id"
    tag_owner_key = "Id"
    not_found_codes: tuple[str, ...] = ()

    def __init__(self, client):
        self.client = client

    # Per-kind capability.

    def _describe_by_name(self, name: str) -> list[dict]:
        raise NotImplementedError

    def _describe_tags(self, identifier: str) -> list[dict]:
        raise NotImplementedError

    def _build(self, resource: dict, tags: list[dict]) -> R:
        raise NotImplementedError

    def _name_of(self, resource: dict) -> str | None:
        return resource.get(self.name_key)

    def _identifier_of(self, resource: dict) -> str:
        return resource[self.identifier_key]

    def _name_matches(self, resource: dict, name: str) -> bool:
        return self._name_of(resource) == name

    # Shared lookup.

    def _call(self, what: str, fn: Callable[[], Any]) -> Any:
        try:
            return fn()
        except ClientError as e:
            if is_client_error(e, *self.not_found_codes):
                raise NotFoundError(f"{self.kind} {what!r} not found") from e
            raise

    def find_by_name(self, name: str) -> dict:
        matches = self._call(name, lambda: self._describe_by_name(name))

        if len(matches) != 1:
            raise NotFoundError(f"{self.kind} {name!r} not found ({len(matches)} matches)")

        # APIs that match loosely (prefixes, case) must not hand back a different resource
        if not self._name_matches(matches[0], name):
            raise NotFoundError(f"{self.kind} {name!r} not found (found {self._name_of(matches[0])!r})")

        return matches[0]

    def find_tags(self, identifier: str) -> list[dict]:
        descriptions = self._call(identifier, lambda: self._describe_tags(identifier))

        if len(descriptions) != 1:
            raise NotFoundError(f"{self.kind} {identifier!r} tags not found ({len(descriptions)} results)")

        if descriptions[0].get(self.tag_owner_key) != identifier:
            raise NotFoundError(
                f"{self.kind} {identifier!r} tags not found (found {descriptions[0].get(self.tag_owner_key)!r})"
            )

        return descriptions[0].get("Tags") or []

    def find(self, name: str) -> R:
        resource = self.find_by_name(name)
        tags = self.find_tags(self._identifier_of(resource))
        LOGGER.debug("Found %s %s (%s)", self.kind, name, self._identifier_of(resource))
        return self._build(resource, tags)

    def find_all(self, names: Iterable[str]) -> list[R]:
        return [self.find(name) for name in names]
