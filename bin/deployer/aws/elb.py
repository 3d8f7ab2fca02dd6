"""Classic load balancers."""

from __future__ import annotations

from dataclasses import dataclass

from deployer.aws.finder import Finder
from deployer.tags import CONFIG_NAME, PROJECT_NAME, SERVICE_NAME, fetch_tag


@dataclass(frozen=True)
class LoadBalancer:
    load_balancer_name: str
    dns_name: str | None = None
    project_name: str | None = None
    config_name: str | None = None
    service_name: str | None = None


class LoadBalancerFinder(Finder[LoadBalancer]):
    kind = "LoadBalancer"
    name_key = "LoadBalancerName"
    identifier_key = "LoadBalancerName"
    tag_owner_key = "LoadBalancerName"
    not_found_codes = ("LoadBalancerNotFound",)

    def _describe_by_name(self, name: str) -> list[dict]:
        return self.client.describe_load_balancers(LoadBalancerNames=[name])["LoadBalancerDescriptions"]

    def _describe_tags(self, identifier: str) -> list[dict]:
        return self.client.describe_tags(LoadBalancerNames=[identifier])["TagDescriptions"]

    def _build(self, resource: dict, tags: list[dict]) -> LoadBalancer:
        return LoadBalancer(
            load_balancer_name=resource["LoadBalancerName"],
            dns_name=resource.get("DNSName"),
            project_name=fetch_tag(tags, PROJECT_NAME),
            config_name=fetch_tag(tags, CONFIG_NAME),
            service_name=fetch_tag(tags, SERVICE_NAME),
        )


def find_all(classic_elb_client, names: list[str]) -> list[LoadBalancer]:
    return LoadBalancerFinder(classic_elb_client).find_all(names)


def get_instances(classic_elb_client, load_balancer_name: str, instance_ids: list[str]) -> dict[str, str]:
    """Get the health state (InService, OutOfService, ...) of each of ``instance_ids`` behind a load balancer."""
    response = classic_elb_client.describe_instance_health(
        LoadBalancerName=load_balancer_name, Instances=[{"InstanceId": iid} for iid in instance_ids]
    )
    wanted = set(instance_ids)
    return {
        state["InstanceId"]: state["State"] for state in response["InstanceStates"] if state["InstanceId"] in wanted
    }
