"""Release state kept in S3, under ``{project}/{config}/{release_id}/``."""

from __future__ import annotations

import logging

from botocore.exceptions import ClientError

from deployer.errors import is_client_error
from deployer.models import Release

LOGGER = logging.getLogger(__name__)


class ReleaseState:
    def __init__(self, s3_client, default_bucket: str | None = None):
        self.s3 = s3_client
        self.default_bucket = default_bucket

    def bucket_for(self, release: Release) -> str:
        bucket = release.bucket or self.default_bucket
        if not bucket:
            raise ValueError(f"No state bucket for release {release.release_id}: set one in the release or config")
        return bucket

    @staticmethod
    def release_key(release: Release) -> str:
        return f"{release.release_dir}/release"

    @staticmethod
    def halt_key(release: Release) -> str:
        return f"{release.release_dir}/halt"

    def upload(self, release: Release) -> None:
        self.s3.put_object(
            Bucket=self.bucket_for(release),
            Key=self.release_key(release),
            Body=release.model_dump_json(),
            ContentType="application/json",
        )

    def halt(self, release: Release) -> None:
        """Flag the release as halting; the running execution stops at its next check."""
        bucket = self.bucket_for(release)
        LOGGER.info("Setting halt flag s3://%s/%s", bucket, self.halt_key(release))
        self.s3.put_object(Bucket=bucket, Key=self.halt_key(release), Body="halt")

    def is_halted(self, release: Release) -> bool:
        try:
            self.s3.get_object(Bucket=self.bucket_for(release), Key=self.halt_key(release))
            return True
        except ClientError as e:
            if is_client_error(e, "NoSuchKey", "404"):
                return False
            raise
