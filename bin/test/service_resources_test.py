from __future__ import annotations

import dataclasses
from unittest.mock import patch

import pytest
from deployer.aws.alb import TargetGroup
from deployer.aws.ami import Image
from deployer.aws.asg import ScalingGroup
from deployer.aws.elb import LoadBalancer
from deployer.aws.iam import Profile
from deployer.aws.sg import SecurityGroup
from deployer.aws.subnet import Subnet
from deployer.errors import CountMismatchError, IdentityMismatchError, NotFoundError
from deployer.models import Service
from deployer.service_resources import ServiceResources, resolve, resolve_release, validate, validate_release

SERVICE = Service(
    project_name="project",
    config_name="development",
    service_name="web",
    release_id="rel-C",
    image="ubuntu-base",
    instance_profile="web-profile",
    security_groups=("web-sg",),
    elbs=("web-elb",),
    target_groups=("web-tg",),
    subnets=("private-a",),
)

IDENTITY = ("project", "development", "web")


def valid_resources(**overrides) -> ServiceResources:
    resources = ServiceResources(
        image=Image("ami-0001", "ubuntu-base", "asg-deployer"),
        profile=Profile("web-profile", "arn:aws:iam::0:instance-profile/web", "/project/development/web/"),
        prev_asg=ScalingGroup("project-development-web-rel-B", None, *IDENTITY, "rel-B"),
        security_groups=[SecurityGroup("sg-0001", "web-sg", *IDENTITY)],
        elbs=[LoadBalancer("web-elb", None, *IDENTITY)],
        target_groups=[TargetGroup("arn:tg/web-tg", "web-tg", *IDENTITY)],
        subnets=[Subnet("subnet-0001", "private-a", "asg-deployer")],
    )
    return dataclasses.replace(resources, **overrides)


class TestValidate:
    def test_valid(self):
        validate(SERVICE, valid_resources())

    def test_validation_is_repeatable(self):
        resources = valid_resources()
        validate(SERVICE, resources)
        validate(SERVICE, resources)
        assert resources == valid_resources()

    def test_empty_service_needs_only_an_image(self):
        service = Service("project", "development", "web", "rel-C", "ubuntu-base")
        validate(service, ServiceResources(image=Image("ami-0001", deploy_with="asg-deployer")))

    def test_missing_image(self):
        with pytest.raises(NotFoundError, match="Image is nil"):
            validate(SERVICE, valid_resources(image=None))

    def test_first_release_has_no_previous_group(self):
        validate(SERVICE, valid_resources(prev_asg=None))

    def test_service_without_profile(self):
        validate(dataclasses.replace(SERVICE, instance_profile=None), valid_resources(profile=None))

    def test_security_group_count_mismatch(self):
        with pytest.raises(
            CountMismatchError, match=r"Security Group Not Found actual \[\] expected \['web-sg'\]"
        ):
            validate(SERVICE, valid_resources(security_groups=[]))

    def test_too_many_target_groups(self):
        extra = TargetGroup("arn:tg/web-tg-2", "web-tg", *IDENTITY)
        with pytest.raises(CountMismatchError, match="TargetGroup Not Found"):
            validate(SERVICE, valid_resources(target_groups=[valid_resources().target_groups[0], extra]))

    def test_subnet_count_mismatch(self):
        with pytest.raises(CountMismatchError, match="Subnets Not Found"):
            validate(SERVICE, valid_resources(subnets=[]))

    @pytest.mark.parametrize(
        "deploy_with, message", [(None, "DeployWith Tag nil"), ("other", "expected: asg-deployer")]
    )
    def test_image_deploy_with(self, deploy_with, message):
        with pytest.raises(IdentityMismatchError, match=message):
            validate(SERVICE, valid_resources(image=Image("ami-0001", deploy_with=deploy_with)))

    def test_subnet_deploy_with(self):
        with pytest.raises(IdentityMismatchError, match="Subnet subnet-0002 DeployWith"):
            validate(SERVICE, valid_resources(subnets=[Subnet("subnet-0002", "private-a", None)]))

    def test_custom_deploy_with(self):
        with pytest.raises(IdentityMismatchError, match="expected: fenrir actual: asg-deployer"):
            validate(SERVICE, valid_resources(), deploy_with="fenrir")

    @pytest.mark.parametrize("path", [None, "/project/development/worker/", "/project/development/web"])
    def test_profile_path(self, path):
        with pytest.raises(IdentityMismatchError, match="Iam Profile"):
            validate(SERVICE, valid_resources(profile=Profile("web-profile", "arn", path)))

    def test_previous_group_from_same_release(self):
        prev = ScalingGroup("project-development-web-rel-C", None, *IDENTITY, "rel-C")
        with pytest.raises(IdentityMismatchError, match="Previous ASG incorrect ReleaseID"):
            validate(SERVICE, valid_resources(prev_asg=prev))

    def test_previous_group_without_release(self):
        prev = ScalingGroup("project-development-web", None, *IDENTITY, None)
        with pytest.raises(IdentityMismatchError, match="ReleaseID nil"):
            validate(SERVICE, valid_resources(prev_asg=prev))

    def test_previous_group_of_other_service(self):
        prev = ScalingGroup("project-development-worker-rel-B", None, "project", "development", "worker", "rel-B")
        with pytest.raises(IdentityMismatchError, match="Previous ASG incorrect ServiceName"):
            validate(SERVICE, valid_resources(prev_asg=prev))

    def test_security_group_of_other_project(self):
        group = SecurityGroup("sg-0001", "web-sg", "other", "development", "web")
        with pytest.raises(
            IdentityMismatchError, match="Security Group incorrect ProjectName requires 'project' has 'other'"
        ):
            validate(SERVICE, valid_resources(security_groups=[group]))

    def test_elb_of_other_config(self):
        lb = LoadBalancer("web-elb", None, "project", "production", "web")
        with pytest.raises(IdentityMismatchError, match="ELB incorrect ConfigName"):
            validate(SERVICE, valid_resources(elbs=[lb]))

    def test_untagged_target_group(self):
        with pytest.raises(IdentityMismatchError, match="Target Group incorrect ProjectName"):
            validate(SERVICE, valid_resources(target_groups=[TargetGroup("arn:tg/web-tg")]))

    def test_method_delegates(self):
        with pytest.raises(NotFoundError):
            valid_resources(image=None).validate(SERVICE)


def test_to_names():
    assert valid_resources(prev_asg=None, elbs=[]).to_names().to_dict() == {
        "image": "ami-0001",
        "profile_arn": "arn:aws:iam::0:instance-profile/web",
        "security_groups": ["sg-0001"],
        "target_group_arns": ["arn:tg/web-tg"],
        "subnets": ["subnet-0001"],
    }


class TestResolve:
    @pytest.fixture
    def finders(self):
        resources = valid_resources()
        with (
            patch("deployer.service_resources.ami.find", return_value=resources.image) as image,
            patch("deployer.service_resources.iam.find", return_value=resources.profile) as profile,
            patch("deployer.service_resources.sg.find_all", return_value=resources.security_groups) as groups,
            patch("deployer.service_resources.elb.find_all", return_value=resources.elbs) as elbs,
            patch("deployer.service_resources.alb.find_all", return_value=resources.target_groups) as target_groups,
            patch("deployer.service_resources.subnet.find_all", return_value=resources.subnets) as subnets,
        ):
            yield {
                "image": image,
                "profile": profile,
                "security_groups": groups,
                "elbs": elbs,
                "target_groups": target_groups,
                "subnets": subnets,
            }

    def test_resolve(self, finders, clients, make_group):
        clients.autoscaling.set_groups(make_group("project", "development", "web", "rel-B"))

        resources = resolve(SERVICE, clients)

        finders["image"].assert_called_once_with(clients.ec2, "ubuntu-base")
        finders["profile"].assert_called_once_with(clients.iam, "web-profile")
        finders["security_groups"].assert_called_once_with(clients.ec2, ["web-sg"])
        finders["elbs"].assert_called_once_with(clients.elb, ["web-elb"])
        finders["target_groups"].assert_called_once_with(clients.elbv2, ["web-tg"])
        finders["subnets"].assert_called_once_with(clients.ec2, ["private-a"])
        assert resources.prev_asg.name == "project-development-web-rel-B"
        validate(SERVICE, resources)

    def test_resolve_without_profile(self, finders, clients):
        resources = resolve(dataclasses.replace(SERVICE, instance_profile=None), clients, prev_asgs={})
        finders["profile"].assert_not_called()
        assert resources.profile is None
        assert resources.prev_asg is None

    def test_not_found_propagates(self, finders, clients):
        finders["security_groups"].side_effect = NotFoundError("SecurityGroup 'web-sg' not found")
        with pytest.raises(NotFoundError):
            resolve(SERVICE, clients, prev_asgs={})

    def test_resolve_release_reads_the_index_once(self, finders, clients, release, make_group):
        clients.autoscaling.set_groups(
            make_group("project", "development", "web", "rel-B"),
            make_group("project", "development", "worker", "rel-B"),
        )

        resources = resolve_release(release, clients)

        clients.autoscaling.get_paginator.return_value.paginate.assert_called_once()
        assert sorted(resources) == ["web", "worker"]
        assert resources["worker"].prev_asg.service_name == "worker"
        finders["subnets"].assert_any_call(clients.ec2, ["private-a", "private-b"])
        finders["subnets"].assert_any_call(clients.ec2, ["private-a"])

    def test_validate_release_requires_every_service(self, release):
        with pytest.raises(NotFoundError, match="service 'web'"):
            validate_release(release, {})
