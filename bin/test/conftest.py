# pylint: disable=redefined-outer-name
from __future__ import annotations

from unittest.mock import MagicMock

import botocore.session
import pytest
from deployer.amazon import AwsClients
from deployer.models import Release


def _client(service: str):
    return botocore.session.get_session().create_client(
        service, region_name="us-east-1", aws_access_key_id="not-real", aws_secret_access_key="not-real"
    )


@pytest.fixture
def elbv2_client():
    return _client("elbv2")


@pytest.fixture
def classic_elb_client():
    return _client("elb")


@pytest.fixture
def ec2_client():
    return _client("ec2")


@pytest.fixture
def iam_client():
    return _client("iam")


def identity_tags(project: str | None, config: str | None, service: str | None, release: str | None = None):
    pairs = (("ProjectName", project), ("ConfigName", config), ("ServiceName", service), ("ReleaseID", release))
    return [{"Key": key, "Value": value} for key, value in pairs if value is not None]


def _make_group(project, config, service, release, name=None, instance_ids=("i-0001",)):
    name = name or f"{project}-{config}-{service}-{release}"
    return {
        "AutoScalingGroupName": name,
        "AutoScalingGroupARN": f"arn:aws:autoscaling:us-east-1:000000000000:autoScalingGroup:uuid:{name}",
        "DesiredCapacity": len(instance_ids),
        "Instances": [{"InstanceId": iid, "LifecycleState": "InService"} for iid in instance_ids],
        "Tags": [
            dict(tag, ResourceId=name, ResourceType="auto-scaling-group")
            for tag in identity_tags(project, config, service, release)
        ],
    }


@pytest.fixture
def tags_for():
    return identity_tags


@pytest.fixture
def make_group():
    """Build a DescribeAutoScalingGroups entry tagged with the given identity."""
    return _make_group


@pytest.fixture
def asg_client():
    """An autoscaling client double whose group listing is set with ``.groups``."""
    client = MagicMock()

    def set_groups(*groups):
        client.get_paginator.return_value.paginate.return_value = [{"AutoScalingGroups": list(groups)}]
        client.describe_auto_scaling_groups.side_effect = lambda AutoScalingGroupNames: {
            "AutoScalingGroups": [g for g in groups if g["AutoScalingGroupName"] in AutoScalingGroupNames]
        }

    set_groups()
    client.set_groups = set_groups
    return client


@pytest.fixture
def clients(asg_client):
    return AwsClients(
        autoscaling=asg_client,
        elbv2=MagicMock(),
        elb=MagicMock(),
        ec2=MagicMock(),
        iam=MagicMock(),
        cloudwatch=MagicMock(),
        s3=MagicMock(),
        sfn=MagicMock(),
    )


@pytest.fixture
def release():
    return Release.model_validate(
        {
            "project_name": "project",
            "config_name": "development",
            "release_id": "rel-C",
            "image": "ubuntu-base",
            "subnets": ["private-a", "private-b"],
            "bucket": "release-state",
            "services": {
                "web": {
                    "instance_profile": "web-profile",
                    "security_groups": ["web-sg"],
                    "elbs": ["web-elb"],
                    "target_groups": ["web-tg"],
                },
                "worker": {"security_groups": ["worker-sg"], "subnets": ["private-a"]},
            },
        }
    )
