"""Pulumi stack entry point for build artifact CDN infrastructure."""

from __future__ import annotations

import logging

import pulumi
import structlog

from artifacts_cdn_infra.config import CloudProvider, StackConfig
from artifacts_cdn_infra.providers.aws.public_access import (
    AwsArtifactsPublicAccess,
    AwsArtifactsPublicAccessArgs,
)

logger: logging.Logger = logging.getLogger(__name__)


class ArtifactsCdnStack:
    """Orchestrates the public build artifact access component."""

    def __init__(self, config: StackConfig) -> None:
        """Initialise the stack with resolved configuration."""
        self._config: StackConfig = config

    def run(self) -> None:
        """Provision the stack and export its outputs."""
        logger.info(
            "stack_run_started",
            extra={
                "cloud_provider": self._config.cloud_provider.value,
                "environment": self._config.environment,
            },
        )
        if self._config.cloud_provider == CloudProvider.AWS:
            self._run_aws()
        else:
            raise NotImplementedError(
                f"Provider '{self._config.cloud_provider}' not yet implemented."
            )

    def _run_aws(self) -> None:
        config = self._config

        public_access = AwsArtifactsPublicAccess(
            f"build-artifacts-{config.environment}",
            AwsArtifactsPublicAccessArgs(
                build_bucket_arn=config.build_bucket_arn,
                edge_function_source=config.edge_function_source,
                price_class=config.price_class,
            ),
        )

        # Domain name where the build artifacts will be available.
        pulumi.export(
            "build_distribution_domain_name", public_access.outputs.distribution_domain_name
        )
        pulumi.export("build_distribution_id", public_access.outputs.distribution_id)
        pulumi.export(
            "edge_function_version_arn", public_access.outputs.edge_function_version_arn
        )


if __name__ == "__main__":
    structlog.configure(wrapper_class=structlog.make_filtering_bound_logger(logging.INFO))
    ArtifactsCdnStack(config=StackConfig.load()).run()
