"""The release descriptor handed to the deployer, and the per-service view of it."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field

from deployer.config_safe_loader import load_yaml


class ServiceConfig(BaseModel):
    """What one service of a release declares it needs."""

    instance_profile: str | None = None
    security_groups: list[str] = Field(default_factory=list)
    elbs: list[str] = Field(default_factory=list)
    target_groups: list[str] = Field(default_factory=list)
    # Overrides the release's subnets when set
    subnets: list[str] | None = None

    model_config = ConfigDict(frozen=True, extra="ignore")


@dataclass(frozen=True)
class Service:
    """One service of a release, with its full identity and the resource names it expects."""

    project_name: str
    config_name: str
    service_name: str
    release_id: str
    image: str
    instance_profile: str | None = None
    security_groups: tuple[str, ...] = ()
    elbs: tuple[str, ...] = ()
    target_groups: tuple[str, ...] = ()
    subnets: tuple[str, ...] = ()

    def __str__(self):
        return f"{self.project_name}/{self.config_name}/{self.service_name}@{self.release_id}"


class Release(BaseModel):
    """A release of a project's config: one release id, one image, any number of services."""

    project_name: str
    config_name: str
    release_id: str
    created_at: str | None = None
    image: str
    subnets: list[str] = Field(default_factory=list)
    # S3 bucket holding this release's state; falls back to the configured one
    bucket: str | None = None
    services: dict[str, ServiceConfig] = Field(default_factory=dict)

    model_config = ConfigDict(frozen=True, extra="ignore")

    @property
    def release_dir(self) -> str:
        return f"{self.project_name}/{self.config_name}/{self.release_id}"

    def service(self, name: str) -> Service:
        if name not in self.services:
            raise KeyError(f"Release {self.release_id} has no service {name!r}")
        service_config = self.services[name]
        subnets = service_config.subnets if service_config.subnets is not None else self.subnets
        return Service(
            project_name=self.project_name,
            config_name=self.config_name,
            service_name=name,
            release_id=self.release_id,
            image=self.image,
            instance_profile=service_config.instance_profile,
            security_groups=tuple(service_config.security_groups),
            elbs=tuple(service_config.elbs),
            target_groups=tuple(service_config.target_groups),
            subnets=tuple(subnets),
        )

    def all_services(self) -> list[Service]:
        return [self.service(name) for name in self.services]

    @classmethod
    def from_file_or_json(cls, file_or_json: str) -> Release:
        """Parse a release from a path to a JSON/YAML file, or from the document itself."""
        # JSON is YAML, so one loader serves both
        if file_or_json.lstrip().startswith("{"):
            data = load_yaml(file_or_json)
        else:
            with Path(file_or_json).open(encoding="utf-8") as release_file:
                data = load_yaml(release_file)
        if not isinstance(data, dict):
            raise ValueError(f"Release must be a mapping, got {type(data).__name__}")
        return cls.model_validate(data)
