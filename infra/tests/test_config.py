"""Tests for the StackConfig environment-driven settings class."""
from __future__ import annotations

from pathlib import Path

import pydantic
import pytest

from artifacts_cdn_infra.config import (
    DEFAULT_EDGE_FUNCTION_SOURCE,
    CloudProvider,
    PriceClass,
    StackConfig,
)

BUCKET_ARN = "arn:aws:s3:::ci-build-artifacts"


def test_cloud_provider_values() -> None:
    """CloudProvider values match their environment spelling."""
    assert CloudProvider.AWS == "aws"
    assert CloudProvider.GCP == "gcp"
    assert CloudProvider.AZURE == "azure"


def test_price_class_values() -> None:
    """PriceClass values match CloudFront price class names."""
    assert PriceClass.PRICE_CLASS_100 == "PriceClass_100"
    assert PriceClass.PRICE_CLASS_ALL == "PriceClass_All"


def test_stack_config_load(monkeypatch: pytest.MonkeyPatch) -> None:
    """Only the bucket ARN is required; everything else has a default."""
    monkeypatch.setenv("ARTIFACTS_CDN_BUILD_BUCKET_ARN", BUCKET_ARN)
    config = StackConfig.load()
    assert config.build_bucket_arn == BUCKET_ARN
    assert config.cloud_provider == CloudProvider.AWS
    assert config.environment == "prod"
    assert config.price_class == PriceClass.PRICE_CLASS_100
    assert config.edge_function_source == DEFAULT_EDGE_FUNCTION_SOURCE


def test_stack_config_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    """Environment variables override every default."""
    monkeypatch.setenv("ARTIFACTS_CDN_BUILD_BUCKET_ARN", BUCKET_ARN)
    monkeypatch.setenv("ARTIFACTS_CDN_ENVIRONMENT", "staging")
    monkeypatch.setenv("ARTIFACTS_CDN_PRICE_CLASS", "PriceClass_All")
    monkeypatch.setenv("ARTIFACTS_CDN_EDGE_FUNCTION_SOURCE", "/opt/rewriter")
    config = StackConfig.load()
    assert config.environment == "staging"
    assert config.price_class == PriceClass.PRICE_CLASS_ALL
    assert config.edge_function_source == Path("/opt/rewriter")


def test_stack_config_requires_bucket_arn(monkeypatch: pytest.MonkeyPatch) -> None:
    """A missing bucket ARN is a validation error."""
    monkeypatch.delenv("ARTIFACTS_CDN_BUILD_BUCKET_ARN", raising=False)
    monkeypatch.chdir(Path(__file__).parent)
    with pytest.raises(pydantic.ValidationError):
        StackConfig.load()


def test_stack_config_rejects_unknown_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    """Only prod, staging and dev environments are accepted."""
    monkeypatch.setenv("ARTIFACTS_CDN_BUILD_BUCKET_ARN", BUCKET_ARN)
    monkeypatch.setenv("ARTIFACTS_CDN_ENVIRONMENT", "qa")
    with pytest.raises(pydantic.ValidationError):
        StackConfig.load()


def test_default_edge_function_source_contains_handler() -> None:
    """The packaged edge directory ships the rewriter handler."""
    assert (DEFAULT_EDGE_FUNCTION_SOURCE / "cf_url_rewriter.py").is_file()
