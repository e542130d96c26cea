"""CloudFront origin and cache behavior settings for build artifact serving."""

from __future__ import annotations

import pulumi
import pulumi_aws as aws

S3_ORIGIN_ID = "build-artifacts-s3-origin"
ALLOWED_METHODS: list[str] = ["GET", "HEAD"]
DEFAULT_TTL_SECONDS = 300
MIN_TTL_SECONDS = 0
MAX_TTL_SECONDS = 365 * 24 * 60 * 60
VIEWER_REQUEST = "viewer-request"


def s3_origin(
    domain_name: pulumi.Input[str],
    access_identity_path: pulumi.Input[str],
) -> aws.cloudfront.DistributionOriginArgs:
    """Return the S3 origin reached through an origin access identity."""
    return aws.cloudfront.DistributionOriginArgs(
        origin_id=S3_ORIGIN_ID,
        domain_name=domain_name,
        s3_origin_config=aws.cloudfront.DistributionOriginS3OriginConfigArgs(
            origin_access_identity=access_identity_path,
        ),
    )


def default_cache_behavior(
    edge_function_version_arn: pulumi.Input[str],
) -> aws.cloudfront.DistributionDefaultCacheBehaviorArgs:
    """Return the read-only, compressed, five-minute default cache behavior.

    The URL rewriter runs on viewer requests only, ahead of the cache lookup.
    """
    return aws.cloudfront.DistributionDefaultCacheBehaviorArgs(
        target_origin_id=S3_ORIGIN_ID,
        viewer_protocol_policy="redirect-to-https",
        allowed_methods=list(ALLOWED_METHODS),
        cached_methods=list(ALLOWED_METHODS),
        compress=True,
        min_ttl=MIN_TTL_SECONDS,
        default_ttl=DEFAULT_TTL_SECONDS,
        max_ttl=MAX_TTL_SECONDS,
        forwarded_values=aws.cloudfront.DistributionDefaultCacheBehaviorForwardedValuesArgs(
            query_string=False,
            cookies=aws.cloudfront.DistributionDefaultCacheBehaviorForwardedValuesCookiesArgs(
                forward="none",
            ),
        ),
        lambda_function_associations=[
            aws.cloudfront.DistributionDefaultCacheBehaviorLambdaFunctionAssociationArgs(
                event_type=VIEWER_REQUEST,
                lambda_arn=edge_function_version_arn,
                include_body=False,
            )
        ],
    )
