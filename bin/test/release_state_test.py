from __future__ import annotations

from unittest.mock import MagicMock

import pytest
from botocore.exceptions import ClientError
from deployer.models import Release
from deployer.release_state import ReleaseState


def client_error(code: str) -> ClientError:
    return ClientError({"Error": {"Code": code, "Message": code}}, "GetObject")


def test_keys(release):
    assert ReleaseState.release_key(release) == "project/development/rel-C/release"
    assert ReleaseState.halt_key(release) == "project/development/rel-C/halt"


def test_release_bucket_wins_over_default(release):
    assert ReleaseState(MagicMock(), "configured").bucket_for(release) == "release-state"
    unbucketed = release.model_copy(update={"bucket": None})
    assert ReleaseState(MagicMock(), "configured").bucket_for(unbucketed) == "configured"
    with pytest.raises(ValueError):
        ReleaseState(MagicMock()).bucket_for(unbucketed)


def test_upload(release):
    s3 = MagicMock()
    ReleaseState(s3).upload(release)
    kwargs = s3.put_object.call_args.kwargs
    assert kwargs["Bucket"] == "release-state"
    assert kwargs["Key"] == "project/development/rel-C/release"
    assert Release.model_validate_json(kwargs["Body"]) == release


def test_halt(release):
    s3 = MagicMock()
    ReleaseState(s3).halt(release)
    s3.put_object.assert_called_once_with(Bucket="release-state", Key="project/development/rel-C/halt", Body="halt")


def test_is_halted(release):
    s3 = MagicMock()
    assert ReleaseState(s3).is_halted(release)
    s3.get_object.assert_called_once_with(Bucket="release-state", Key="project/development/rel-C/halt")


@pytest.mark.parametrize("code", ["NoSuchKey", "404"])
def test_not_halted(release, code):
    s3 = MagicMock()
    s3.get_object.side_effect = client_error(code)
    assert not ReleaseState(s3).is_halted(release)


def test_is_halted_passes_other_errors_through(release):
    s3 = MagicMock()
    s3.get_object.side_effect = client_error("AccessDenied")
    with pytest.raises(ClientError):
        ReleaseState(s3).is_halted(release)
