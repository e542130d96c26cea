"""Provider-agnostic public artifact access (CDN in front of storage) interface."""

from __future__ import annotations

import logging
from typing import Protocol

import pulumi

logger: logging.Logger = logging.getLogger(__name__)


class PublicAccessOutputs:
    """Resolved outputs from a provisioned public artifact access component."""

    def __init__(
        self,
        distribution_domain_name: pulumi.Output[str],
        distribution_id: pulumi.Output[str],
        edge_function_version_arn: pulumi.Output[str],
    ) -> None:
        """Initialise public access outputs.

        Args:
            distribution_domain_name: Domain where build artifacts are served.
            distribution_id: Provider identifier of the CDN distribution.
            edge_function_version_arn: Immutable version of the URL rewriter.
        """
        self.distribution_domain_name: pulumi.Output[str] = distribution_domain_name
        self.distribution_id: pulumi.Output[str] = distribution_id
        self.edge_function_version_arn: pulumi.Output[str] = edge_function_version_arn


class ArtifactsPublicAccess(Protocol):
    """Provider-agnostic interface for serving a build bucket through a CDN."""

    @property
    def outputs(self) -> PublicAccessOutputs:
        """Return the resolved public access outputs."""
        ...
