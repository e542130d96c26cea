"""Typed configuration loaded from environment variables at startup."""

from __future__ import annotations

import logging
from enum import StrEnum
from pathlib import Path
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict

logger: logging.Logger = logging.getLogger(__name__)

DEFAULT_EDGE_FUNCTION_SOURCE: Path = Path(__file__).parent / "edge"


class CloudProvider(StrEnum):
    """Supported cloud provider deployment targets."""

    AWS = "aws"
    GCP = "gcp"
    AZURE = "azure"


class PriceClass(StrEnum):
    """CloudFront edge location price classes."""

    PRICE_CLASS_100 = "PriceClass_100"
    PRICE_CLASS_200 = "PriceClass_200"
    PRICE_CLASS_ALL = "PriceClass_All"


class StackConfig(BaseSettings):
    """Fully validated infrastructure stack configuration.

    All values are sourced from environment variables at startup.
    Raises ``ValidationError`` on missing or invalid values.
    """

    model_config = SettingsConfigDict(
        env_prefix="ARTIFACTS_CDN_",
        env_file=".env",
        env_file_encoding="utf-8",
    )

    build_bucket_arn: str
    cloud_provider: CloudProvider = CloudProvider.AWS
    environment: Literal["prod", "staging", "dev"] = "prod"
    price_class: PriceClass = PriceClass.PRICE_CLASS_100
    edge_function_source: Path = DEFAULT_EDGE_FUNCTION_SOURCE

    @classmethod
    def load(cls) -> StackConfig:
        """Load and validate configuration from the environment.

        Logs each resolved setting at DEBUG level.
        Raises ``pydantic.ValidationError`` on missing or invalid values.
        """
        config = cls()  # type: ignore[call-arg]  # env vars supply required fields
        logger.debug(
            "stack_config_loaded",
            extra={
                "cloud_provider": config.cloud_provider.value,
                "build_bucket_arn": config.build_bucket_arn,
                "environment": config.environment,
                "price_class": config.price_class.value,
            },
        )
        return config
