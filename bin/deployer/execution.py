"""Step Functions executions of the deployer state machine.

An execution is found again from its release alone, by name. The prefix
format below is what every running execution was started with: changing it
makes those executions impossible to halt.
"""

from __future__ import annotations

import hashlib
import logging
import re
import time
import uuid
from typing import Callable

from deployer.models import Release

LOGGER = logging.getLogger(__name__)

SEPARATOR = "-"
SERVICE_SEPARATOR = "_"
# Execution names are limited to 80 characters; this leaves room for the unique suffix
MAX_PREFIX_LENGTH = 64
SUFFIX_LENGTH = 16
DIGEST_LENGTH = 8
TERMINAL_STATUSES = frozenset(("SUCCEEDED", "FAILED", "TIMED_OUT", "ABORTED"))

_INVALID_NAME_CHARS = re.compile(r"[^A-Za-z0-9_-]")
_SUFFIX = re.compile(rf"[0-9a-f]{{{SUFFIX_LENGTH}}}")


def _clean(part: str) -> str:
    return _INVALID_NAME_CHARS.sub("-", part)


def _digest(text: str) -> str:
    return hashlib.sha1(text.encode("utf-8")).hexdigest()[:DIGEST_LENGTH]


def execution_prefix(release: Release) -> str:
    """The name prefix shared by every execution of ``release``.

    The release id always appears whole at the end. When the name would run
    past ``MAX_PREFIX_LENGTH`` the service list is cut short and followed by a
    digest of the full list; if even that does not fit, project, config and
    services all collapse into one digest.
    """
    head = SEPARATOR.join([_clean(release.project_name), _clean(release.config_name)])
    services = SERVICE_SEPARATOR.join(sorted(release.services))
    tail = _clean(release.release_id) + SEPARATOR

    prefix = SEPARATOR.join([head, _clean(services)]) + SEPARATOR + tail
    if len(prefix) <= MAX_PREFIX_LENGTH:
        return prefix

    room = MAX_PREFIX_LENGTH - len(head) - len(tail) - 2 * len(SEPARATOR) - len(SERVICE_SEPARATOR) - DIGEST_LENGTH
    if room >= 0:
        shortened = _clean(services)[:room] + SERVICE_SEPARATOR + _digest(services)
        return SEPARATOR.join([head, shortened]) + SEPARATOR + tail

    prefix = _digest(SEPARATOR.join([release.project_name, release.config_name, services])) + SEPARATOR + tail
    if len(prefix) > MAX_PREFIX_LENGTH:
        raise ValueError(f"Release id {release.release_id!r} is too long to name an execution after")
    return prefix


def execution_name(release: Release) -> str:
    return execution_prefix(release) + uuid.uuid4().hex[:SUFFIX_LENGTH]


def is_execution_of(name: str, prefix: str) -> bool:
    """Whether ``name`` is ``prefix`` plus a unique suffix, and nothing else."""
    return name.startswith(prefix) and _SUFFIX.fullmatch(name[len(prefix) :]) is not None


def start_execution(sfn_client, state_machine_arn: str, release: Release) -> dict:
    name = execution_name(release)
    LOGGER.info("Starting execution %s of %s", name, state_machine_arn)
    return sfn_client.start_execution(stateMachineArn=state_machine_arn, name=name, input=release.model_dump_json())


def find_execution(sfn_client, state_machine_arn: str, name_prefix: str) -> dict | None:
    """The most recent execution named ``name_prefix`` plus a unique suffix, or None.

    Matching the suffix exactly keeps release ``rel-1`` from finding the runs of ``rel-1-hotfix``.
    """
    paginator = sfn_client.get_paginator("list_executions")
    for page in paginator.paginate(stateMachineArn=state_machine_arn):
        for execution in page["executions"]:
            if is_execution_of(execution["name"], name_prefix):
                return execution
    return None


def wait_for_execution(
    sfn_client,
    execution_arn: str,
    poll_interval: float = 1.0,
    max_polls: int = 900,
    on_poll: Callable[[str], None] | None = None,
) -> str:
    """Poll until the execution reaches a terminal status, and return it.

    ``on_poll`` is called with the status after every poll.
    """
    for poll in range(max_polls):
        status = sfn_client.describe_execution(executionArn=execution_arn)["status"]
        if on_poll:
            on_poll(status)
        if status in TERMINAL_STATUSES:
            LOGGER.debug("Execution %s finished with %s after %d polls", execution_arn, status, poll + 1)
            return status
        time.sleep(poll_interval)

    raise TimeoutError(f"Timeout waiting for execution {execution_arn} to finish after {max_polls} polls")
