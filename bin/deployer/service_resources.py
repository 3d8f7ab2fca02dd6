"""Resolving and validating everything a service release depends on.

Nothing here creates infrastructure. ``resolve`` finds what the release
names; ``validate`` refuses the bundle unless every piece is there, is unique,
and is tagged for this service. Both stop at the first problem.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from deployer.amazon import AwsClients
from deployer.aws import alb, ami, asg, elb, iam, sg, subnet
from deployer.aws.alb import TargetGroup
from deployer.aws.ami import Image
from deployer.aws.asg import ScalingGroup
from deployer.aws.elb import LoadBalancer
from deployer.aws.iam import Profile, profile_path
from deployer.aws.sg import SecurityGroup
from deployer.aws.subnet import Subnet
from deployer.errors import CountMismatchError, IdentityMismatchError, NotFoundError
from deployer.identity import check_identity
from deployer.models import Release, Service

LOGGER = logging.getLogger(__name__)

DEFAULT_DEPLOY_WITH = "asg-deployer"


@dataclass(frozen=True)
class ServiceResourceNames:
    image: str | None = None
    profile: str | None = None
    prev_asg: str | None = None
    security_groups: list[str] = field(default_factory=list)
    elbs: list[str] = field(default_factory=list)
    target_groups: list[str] = field(default_factory=list)
    subnets: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        result = {
            "image": self.image,
            "profile_arn": self.profile,
            "prev_asg": self.prev_asg,
            "security_groups": self.security_groups,
            "elbs": self.elbs,
            "target_group_arns": self.target_groups,
            "subnets": self.subnets,
        }
        return {key: value for key, value in result.items() if value}


@dataclass
class ServiceResources:
    """Everything a single service of a release runs on, as found in AWS."""

    image: Image | None = None
    profile: Profile | None = None
    prev_asg: ScalingGroup | None = None
    security_groups: list[SecurityGroup] = field(default_factory=list)
    elbs: list[LoadBalancer] = field(default_factory=list)
    target_groups: list[TargetGroup] = field(default_factory=list)
    subnets: list[Subnet] = field(default_factory=list)

    def to_names(self) -> ServiceResourceNames:
        return ServiceResourceNames(
            image=self.image.image_id if self.image else None,
            profile=self.profile.arn if self.profile else None,
            prev_asg=self.prev_asg.name if self.prev_asg else None,
            security_groups=[group.group_id for group in self.security_groups if group and group.group_id],
            elbs=[lb.load_balancer_name for lb in self.elbs if lb and lb.load_balancer_name],
            target_groups=[tg.target_group_arn for tg in self.target_groups if tg and tg.target_group_arn],
            subnets=[sn.subnet_id for sn in self.subnets if sn and sn.subnet_id],
        )

    def validate(self, service: Service, deploy_with: str = DEFAULT_DEPLOY_WITH) -> None:
        validate(service, self, deploy_with)


#####
# Resolve
#####


def resolve(
    service: Service, clients: AwsClients, prev_asgs: dict[str, ScalingGroup] | None = None
) -> ServiceResources:
    """Find every resource ``service`` names.

    ``prev_asgs`` is the previous release's groups by service name; pass it in
    to share one lookup between all the services of a release.
    """
    LOGGER.debug("Resolving resources for %s", service)
    if prev_asgs is None:
        prev_asgs = asg.for_not_release_id_service_map(
            clients.autoscaling, service.project_name, service.config_name, service.release_id
        )

    image = ami.find(clients.ec2, service.image)
    profile = iam.find(clients.iam, service.instance_profile) if service.instance_profile else None

    return ServiceResources(
        image=image,
        profile=profile,
        prev_asg=prev_asgs.get(service.service_name),
        security_groups=sg.find_all(clients.ec2, list(service.security_groups)),
        elbs=elb.find_all(clients.elb, list(service.elbs)),
        target_groups=alb.find_all(clients.elbv2, list(service.target_groups)),
        subnets=subnet.find_all(clients.ec2, list(service.subnets)),
    )


def resolve_release(release: Release, clients: AwsClients) -> dict[str, ServiceResources]:
    prev_asgs = asg.for_not_release_id_service_map(
        clients.autoscaling, release.project_name, release.config_name, release.release_id
    )
    return {service.service_name: resolve(service, clients, prev_asgs) for service in release.all_services()}


#####
# Validate
#####


def validate(service: Service, resources: ServiceResources, deploy_with: str = DEFAULT_DEPLOY_WITH) -> None:
    """Raise the first problem found with ``resources`` as the resources of ``service``."""
    validate_attributes(service, resources)
    validate_image(resources.image, deploy_with)
    validate_profile(service, resources.profile)
    validate_prev_asg(service, resources.prev_asg)

    for group in resources.security_groups:
        validate_security_group(service, group)

    for lb in resources.elbs:
        validate_elb(service, lb)

    for tg in resources.target_groups:
        validate_target_group(service, tg)

    for sn in resources.subnets:
        validate_subnet(sn, deploy_with)


def validate_release(
    release: Release, resources: dict[str, ServiceResources], deploy_with: str = DEFAULT_DEPLOY_WITH
) -> None:
    for service in release.all_services():
        if service.service_name not in resources:
            raise NotFoundError(f"No resources resolved for service {service.service_name!r}")
        validate(service, resources[service.service_name], deploy_with)


def _count_mismatch(kind: str, actual: list[str], expected: tuple[str, ...]) -> CountMismatchError:
    return CountMismatchError(f"{kind} Not Found actual {actual} expected {list(expected)}")


def validate_attributes(service: Service, resources: ServiceResources) -> None:
    names = resources.to_names()

    if resources.image is None:
        raise NotFoundError("Image is nil")

    # Too few is something missing, too many is a tag on more than one resource
    if len(service.security_groups) != len(resources.security_groups):
        raise _count_mismatch("Security Group", names.security_groups, service.security_groups)

    if len(service.elbs) != len(resources.elbs):
        raise _count_mismatch("ELB", names.elbs, service.elbs)

    if len(service.target_groups) != len(resources.target_groups):
        raise _count_mismatch("TargetGroup", names.target_groups, service.target_groups)

    if len(service.subnets) != len(resources.subnets):
        raise _count_mismatch("Subnets", names.subnets, service.subnets)


def _validate_deploy_with(kind: str, resource_id: str, actual: str | None, deploy_with: str) -> None:
    if actual is None:
        raise IdentityMismatchError(f"{kind} {resource_id} DeployWith Tag nil")

    if actual != deploy_with:
        raise IdentityMismatchError(f"{kind} {resource_id} DeployWith Tag expected: {deploy_with} actual: {actual}")


def validate_image(image: Image | None, deploy_with: str = DEFAULT_DEPLOY_WITH) -> None:
    if image is None:
        raise NotFoundError("Image is nil")

    _validate_deploy_with("Image", image.image_id, image.deploy_with, deploy_with)


def validate_subnet(sn: Subnet | None, deploy_with: str = DEFAULT_DEPLOY_WITH) -> None:
    if sn is None:
        raise NotFoundError("Subnet is nil")

    _validate_deploy_with("Subnet", sn.subnet_id, sn.deploy_with, deploy_with)


def validate_profile(service: Service, profile: Profile | None) -> None:
    if profile is None:
        return  # a service may run without an instance profile

    if profile.path is None:
        raise IdentityMismatchError(f"Iam Profile {profile.name} Path not found")

    valid_path = profile_path(service.project_name, service.config_name, service.service_name)
    if profile.path != valid_path:
        raise IdentityMismatchError(f"Iam Profile Path incorrect, it is {profile.path!r} and requires {valid_path!r}")


def validate_prev_asg(service: Service, group: ScalingGroup | None) -> None:
    if group is None:
        return  # first release of this service

    # The release index already filtered on these, this guards against it ever being handed something else
    check_identity("Previous ASG", group, service)

    if group.release_id is None:
        raise IdentityMismatchError(f"Previous ASG {group.name} ReleaseID nil")

    if group.release_id == service.release_id:
        raise IdentityMismatchError(
            f"Previous ASG incorrect ReleaseID requires not {service.release_id!r} has {group.release_id!r}"
        )


def validate_security_group(service: Service, group: SecurityGroup | None) -> None:
    if group is None:
        raise NotFoundError("SecurityGroup is nil")
    check_identity("Security Group", group, service)


def validate_elb(service: Service, lb: LoadBalancer | None) -> None:
    if lb is None:
        raise NotFoundError("LoadBalancer is nil")
    check_identity("ELB", lb, service)


def validate_target_group(service: Service, tg: TargetGroup | None) -> None:
    if tg is None:
        raise NotFoundError("TargetGroup is nil")
    check_identity("Target Group", tg, service)
