"""Parsing of S3 bucket ARNs into their addressable parts."""

from __future__ import annotations

import re

_BUCKET_ARN_RE = re.compile(
    r"^arn:(?P<partition>aws(?:-[a-z]+)*):s3:::(?P<bucket>[a-z0-9][a-z0-9.-]{1,61}[a-z0-9])$"
)


class InvalidBucketArnError(ValueError):
    """Raised when a string does not identify an S3 bucket."""


class BucketArn:
    """A parsed ``arn:<partition>:s3:::<bucket>`` identifier."""

    def __init__(self, arn: str, partition: str, bucket_name: str) -> None:
        self.arn: str = arn
        self.partition: str = partition
        self.bucket_name: str = bucket_name

    def objects_arn(self, key_pattern: str = "*") -> str:
        """Return the ARN matching objects in the bucket by ``key_pattern``."""
        return f"{self.arn}/{key_pattern}"

    def __eq__(self, other: object) -> bool:
        return isinstance(other, BucketArn) and other.arn == self.arn

    def __hash__(self) -> int:
        return hash(self.arn)

    def __repr__(self) -> str:
        return f"BucketArn({self.arn!r})"


def parse_bucket_arn(arn: str) -> BucketArn:
    """Parse an S3 bucket ARN.

    Surrounding whitespace is ignored. Object ARNs and ARNs for other
    services are rejected.

    Raises:
        InvalidBucketArnError: ``arn`` is not a bucket ARN.
    """
    candidate = arn.strip()
    match = _BUCKET_ARN_RE.match(candidate)
    if match is None or ".." in match.group("bucket"):
        raise InvalidBucketArnError(f"Not an S3 bucket ARN: {arn!r}")
    return BucketArn(
        arn=candidate,
        partition=match.group("partition"),
        bucket_name=match.group("bucket"),
    )
