"""AWS S3 + CloudFront + Lambda@Edge implementation of ArtifactsPublicAccess."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import pulumi
import pulumi_aws as aws

from artifacts_cdn_infra.components.public_access import PublicAccessOutputs
from artifacts_cdn_infra.config import DEFAULT_EDGE_FUNCTION_SOURCE, PriceClass
from artifacts_cdn_infra.graph import ConstructionGraph
from artifacts_cdn_infra.providers.aws.arn import BucketArn, parse_bucket_arn
from artifacts_cdn_infra.providers.aws.distribution import default_cache_behavior, s3_origin
from artifacts_cdn_infra.providers.aws.edge_function import AwsEdgeFunction, AwsEdgeFunctionArgs
from artifacts_cdn_infra.providers.aws.policy import append_statement, object_read_statement

logger: logging.Logger = logging.getLogger(__name__)

_NO_BUCKET_POLICY = "NoSuchBucketPolicy"


def read_bucket_policy(bucket_name: str) -> str | None:
    """Return the bucket's current policy document, or ``None`` if it has none.

    Any lookup failure other than a missing policy propagates.
    """
    try:
        result = aws.s3.get_bucket_policy(bucket=bucket_name)
    except Exception as exc:
        if _NO_BUCKET_POLICY not in str(exc):
            raise
        logger.debug("bucket_policy_absent", extra={"bucket": bucket_name})
        return None
    return result.policy or None


class AwsArtifactsPublicAccessArgs:
    """Arguments for the public build artifact access component."""

    def __init__(
        self,
        build_bucket_arn: str,
        edge_function_source: Path = DEFAULT_EDGE_FUNCTION_SOURCE,
        price_class: PriceClass = PriceClass.PRICE_CLASS_100,
    ) -> None:
        self.build_bucket_arn: str = build_bucket_arn
        self.edge_function_source: Path = Path(edge_function_source)
        self.price_class: PriceClass = price_class


class AwsArtifactsPublicAccess(pulumi.ComponentResource):
    """Serves an existing private S3 build bucket through CloudFront.

    Only the distribution's origin access identity may read the bucket; the
    read grant is appended to whatever policy the bucket already carries, and
    the policy is retained when the stack is destroyed. Viewer requests pass
    through the URL rewriter edge function before any cache lookup.

    The bucket ARN and edge function source are checked before anything is
    declared, so a bad input never leaves a partial resource graph.
    """

    def __init__(
        self,
        name: str,
        args: AwsArtifactsPublicAccessArgs,
        opts: pulumi.ResourceOptions | None = None,
    ) -> None:
        """Validate inputs, then declare identity, policy, edge function and CDN.

        Args:
            name: Logical Pulumi resource name.
            args: Bucket ARN, edge function source and CDN price class.
            opts: Optional Pulumi resource options.

        Raises:
            InvalidBucketArnError: ``args.build_bucket_arn`` is not a bucket ARN.
            EdgeFunctionArtifactError: The edge function handler is missing.
        """
        bucket_arn = parse_bucket_arn(args.build_bucket_arn)
        edge_args = AwsEdgeFunctionArgs(source_dir=args.edge_function_source)
        edge_args.validate()

        super().__init__("artifacts-cdn:aws:PublicAccess", name, {}, opts)

        logger.debug(
            "provisioning_aws_public_access",
            extra={"name": name, "bucket": bucket_arn.bucket_name},
        )

        self._name: str = name
        self._args: AwsArtifactsPublicAccessArgs = args
        self._bucket_arn: BucketArn = bucket_arn
        self._edge_args: AwsEdgeFunctionArgs = edge_args

        self.graph: ConstructionGraph = (
            ConstructionGraph()
            .add("bucket", self._resolve_bucket)
            .add("identity", self._create_identity)
            .add("policy", self._attach_policy, depends_on=("bucket", "identity"))
            .add("edge_function", self._create_edge_function)
            .add(
                "distribution",
                self._create_distribution,
                depends_on=("bucket", "identity", "policy", "edge_function"),
            )
        )
        resources = self.graph.build()

        distribution: aws.cloudfront.Distribution = resources["distribution"]
        edge_function: AwsEdgeFunction = resources["edge_function"]

        self._outputs: PublicAccessOutputs = PublicAccessOutputs(
            distribution_domain_name=distribution.domain_name,
            distribution_id=distribution.id,
            edge_function_version_arn=edge_function.outputs.version_arn,
        )
        self.register_outputs(
            {
                "distribution_domain_name": self._outputs.distribution_domain_name,
                "distribution_id": self._outputs.distribution_id,
                "edge_function_version_arn": self._outputs.edge_function_version_arn,
            }
        )

    def _resolve_bucket(self, _: Mapping[str, Any]) -> pulumi.Output[aws.s3.GetBucketResult]:
        return aws.s3.get_bucket_output(
            bucket=self._bucket_arn.bucket_name,
            opts=pulumi.InvokeOptions(parent=self),
        )

    def _create_identity(self, _: Mapping[str, Any]) -> aws.cloudfront.OriginAccessIdentity:
        return aws.cloudfront.OriginAccessIdentity(
            f"{self._name}-oai",
            aws.cloudfront.OriginAccessIdentityArgs(
                comment=f"OAI for {self._bucket_arn.bucket_name}",
            ),
            opts=pulumi.ResourceOptions(parent=self),
        )

    def _attach_policy(self, deps: Mapping[str, Any]) -> aws.s3.BucketPolicy:
        identity: aws.cloudfront.OriginAccessIdentity = deps["identity"]
        objects_arn = self._bucket_arn.objects_arn()
        existing_policy = read_bucket_policy(self._bucket_arn.bucket_name)

        policy = pulumi.Output.all(identity.iam_arn, identity.s3_canonical_user_id).apply(
            lambda ids: append_statement(
                existing_policy,
                object_read_statement(objects_arn, ids[0]),
                principal_aliases=[ids[1]],
            )
        )

        # The bucket and its other statements predate this stack.
        return aws.s3.BucketPolicy(
            f"{self._name}-bucket-policy",
            aws.s3.BucketPolicyArgs(bucket=deps["bucket"].id, policy=policy),
            opts=pulumi.ResourceOptions(parent=self, retain_on_delete=True),
        )

    def _create_edge_function(self, _: Mapping[str, Any]) -> AwsEdgeFunction:
        return AwsEdgeFunction(
            f"{self._name}-url-rewriter",
            self._edge_args,
            opts=pulumi.ResourceOptions(parent=self),
        )

    def _create_distribution(self, deps: Mapping[str, Any]) -> aws.cloudfront.Distribution:
        identity: aws.cloudfront.OriginAccessIdentity = deps["identity"]
        edge_function: AwsEdgeFunction = deps["edge_function"]

        return aws.cloudfront.Distribution(
            f"{self._name}-cdn",
            aws.cloudfront.DistributionArgs(
                enabled=True,
                comment=f"Build artifacts from {self._bucket_arn.bucket_name}",
                price_class=self._args.price_class.value,
                http_version="http2",
                origins=[
                    s3_origin(
                        domain_name=deps["bucket"].bucket_regional_domain_name,
                        access_identity_path=identity.cloudfront_access_identity_path,
                    )
                ],
                default_cache_behavior=default_cache_behavior(edge_function.outputs.version_arn),
                restrictions=aws.cloudfront.DistributionRestrictionsArgs(
                    geo_restriction=aws.cloudfront.DistributionRestrictionsGeoRestrictionArgs(
                        restriction_type="none",
                    ),
                ),
                viewer_certificate=aws.cloudfront.DistributionViewerCertificateArgs(
                    cloudfront_default_certificate=True,
                ),
            ),
            opts=pulumi.ResourceOptions(parent=self, depends_on=[deps["policy"]]),
        )

    @property
    def outputs(self) -> PublicAccessOutputs:
        """Return the resolved public access outputs."""
        return self._outputs
