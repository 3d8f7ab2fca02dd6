from __future__ import annotations

from dataclasses import dataclass
from typing import Any


class LazyObjectWrapper:
    def __init__(self, fn):
        self.__fn = fn
        self.__setup = False
        self.__obj = None

    def __ensure_setup(self):
        if not self.__setup:
            self.__obj = self.__fn()
            self.__setup = True

    def __getattr__(self, attr):
        self.__ensure_setup()
        return getattr(self.__obj, attr)


def _import_boto():
    obj = __import__("boto3")

    if not obj.session.Session().region_name:
        obj.setup_default_session(region_name="us-east-1")

    return obj


boto3 = LazyObjectWrapper(_import_boto)

as_client = LazyObjectWrapper(lambda: boto3.client("autoscaling"))
elb_client = LazyObjectWrapper(lambda: boto3.client("elbv2"))
classic_elb_client = LazyObjectWrapper(lambda: boto3.client("elb"))
ec2_client = LazyObjectWrapper(lambda: boto3.client("ec2"))
iam_client = LazyObjectWrapper(lambda: boto3.client("iam"))
cw_client = LazyObjectWrapper(lambda: boto3.client("cloudwatch"))
s3_client = LazyObjectWrapper(lambda: boto3.client("s3"))
sfn_client = LazyObjectWrapper(lambda: boto3.client("stepfunctions"))
sts_client = LazyObjectWrapper(lambda: boto3.client("sts"))


@dataclass(frozen=True)
class AwsClients:
    """The set of AWS API clients a release touches.

    Anything exposing the boto3 client methods will do, which is how the tests
    substitute stubbed or mocked clients.
    """

    autoscaling: Any
    elbv2: Any
    elb: Any
    ec2: Any
    iam: Any
    cloudwatch: Any
    s3: Any
    sfn: Any

    @classmethod
    def default(cls) -> AwsClients:
        return cls(
            autoscaling=as_client,
            elbv2=elb_client,
            elb=classic_elb_client,
            ec2=ec2_client,
            iam=iam_client,
            cloudwatch=cw_client,
            s3=s3_client,
            sfn=sfn_client,
        )


def current_region() -> str:
    return sts_client.meta.region_name


def current_account_id() -> str:
    return sts_client.get_caller_identity()["Account"]


def state_machine_arn(name: str, region: str | None = None, account_id: str | None = None) -> str:
    region = region or current_region()
    account_id = account_id or current_account_id()
    return f"arn:aws:states:{region}:{account_id}:stateMachine:{name}"
