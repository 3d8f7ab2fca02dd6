"""Identity predicates shared by every tagged resource kind.

Each predicate only needs the one property it compares, so scaling groups,
target groups, load balancers and security groups stay unrelated value types
and still go through the same checks.
"""

from __future__ import annotations

from typing import Protocol

from deployer.errors import IdentityMismatchError


class HasProjectName(Protocol):
    @property
    def project_name(self) -> str | None: ...


class HasConfigName(Protocol):
    @property
    def config_name(self) -> str | None: ...


class HasServiceName(Protocol):
    @property
    def service_name(self) -> str | None: ...


class HasReleaseId(Protocol):
    @property
    def release_id(self) -> str | None: ...


class ServiceIdentity(HasProjectName, HasConfigName, HasServiceName, HasReleaseId, Protocol):
    pass


def has_project_name(resource: HasProjectName, project_name: str | None) -> bool:
    if resource.project_name is None or project_name is None:
        return False
    return resource.project_name == project_name


def has_config_name(resource: HasConfigName, config_name: str | None) -> bool:
    if resource.config_name is None or config_name is None:
        return False
    return resource.config_name == config_name


def has_service_name(resource: HasServiceName, service_name: str | None) -> bool:
    if resource.service_name is None or service_name is None:
        return False
    return resource.service_name == service_name


def has_release_id(resource: HasReleaseId, release_id: str | None) -> bool:
    if resource.release_id is None or release_id is None:
        return False
    return resource.release_id == release_id


def check_identity(kind: str, resource, service: ServiceIdentity) -> None:
    """Raise IdentityMismatchError unless ``resource`` is tagged for ``service``'s project, config and name."""
    if not has_project_name(resource, service.project_name):
        raise IdentityMismatchError(
            f"{kind} incorrect ProjectName requires {service.project_name!r} has {resource.project_name!r}"
        )

    if not has_config_name(resource, service.config_name):
        raise IdentityMismatchError(
            f"{kind} incorrect ConfigName requires {service.config_name!r} has {resource.config_name!r}"
        )

    if not has_service_name(resource, service.service_name):
        raise IdentityMismatchError(
            f"{kind} incorrect ServiceName requires {service.service_name!r} has {resource.service_name!r}"
        )
