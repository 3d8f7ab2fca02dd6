"""Errors raised while resolving, validating, halting or tearing down a release."""

from __future__ import annotations

from botocore.exceptions import BotoCoreError, ClientError

# Failures of the AWS call itself. These are never wrapped, callers see them as boto raised them.
TRANSPORT_ERRORS = (ClientError, BotoCoreError)


class DeployerError(Exception):
    """Base class for every error this package raises on its own account."""

    pass


class NotFoundError(DeployerError):
    """A lookup returned no result, or more than the one it should have."""

    pass


class DuplicatePreviousError(DeployerError):
    """More than one previous-release scaling group exists for a single service."""

    pass


class IdentityMismatchError(DeployerError):
    """A resource's tags or path do not belong to the service being released."""

    pass


class CountMismatchError(DeployerError):
    """The number of resources found differs from the number the release declares."""

    pass


class RunNotFoundError(DeployerError):
    """No orchestration execution could be found for the release being halted."""

    pass


def is_client_error(error: ClientError, *codes: str) -> bool:
    return error.response.get("Error", {}).get("Code") in codes
