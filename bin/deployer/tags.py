"""Reading identity tags off AWS resources.

EC2, Auto Scaling, ELB and ELBv2 all hand tags back from boto3 as a list of
``{"Key": ..., "Value": ...}`` dicts (Auto Scaling adds a few extra fields per
entry), so a single lookup serves every resource kind.
"""

from __future__ import annotations

from typing import Iterable, Mapping

PROJECT_NAME = "ProjectName"
CONFIG_NAME = "ConfigName"
SERVICE_NAME = "ServiceName"
RELEASE_ID = "ReleaseID"
DEPLOY_WITH = "DeployWith"
NAME = "Name"


def fetch_tag(tags: Iterable[Mapping[str, str]] | None, key: str | None) -> str | None:
    """Return the value of the first tag whose key is ``key``, or None."""
    if key is None or tags is None:
        return None

    for tag in tags:
        tag_key = tag.get("Key")
        if tag_key is None:
            continue
        if tag_key == key:
            return tag.get("Value")

    return None


def tag_filter(key: str, *values: str) -> dict:
    """An EC2/Auto Scaling style filter matching resources tagged ``key`` with any of ``values``."""
    return {"Name": f"tag:{key}", "Values": list(values)}
