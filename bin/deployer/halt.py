"""Halting a release that is being deployed."""

from __future__ import annotations

import logging
from typing import Callable

from deployer.amazon import AwsClients
from deployer.errors import RunNotFoundError
from deployer.execution import execution_prefix, find_execution, wait_for_execution
from deployer.models import Release
from deployer.release_state import ReleaseState

LOGGER = logging.getLogger(__name__)


def halt(
    release: Release,
    clients: AwsClients,
    state_machine_arn: str,
    on_poll: Callable[[str], None] | None = None,
    poll_interval: float = 1.0,
    max_polls: int = 900,
    state_bucket: str | None = None,
) -> str:
    """Ask the execution deploying ``release`` to stop, and wait until it has.

    This only raises the halt flag: the execution notices it at its next check
    and winds itself down. Returns the execution's final status.
    """
    prefix = execution_prefix(release)
    execution = find_execution(clients.sfn, state_machine_arn, prefix)
    if execution is None:
        raise RunNotFoundError(f"Cannot find current execution of release with prefix {prefix!r}")

    LOGGER.info("Halting execution %s (%s)", execution["name"], execution.get("status", "unknown"))
    ReleaseState(clients.s3, state_bucket).halt(release)

    return wait_for_execution(clients.sfn, execution["executionArn"], poll_interval, max_polls, on_poll)
