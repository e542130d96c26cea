"""Pulumi entry point for build artifact CDN infrastructure."""
import logging

import structlog

from artifacts_cdn_infra.__main__ import ArtifactsCdnStack
from artifacts_cdn_infra.config import StackConfig

structlog.configure(wrapper_class=structlog.make_filtering_bound_logger(logging.INFO))
ArtifactsCdnStack(config=StackConfig.load()).run()
