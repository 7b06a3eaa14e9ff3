"""Pytest configuration and shared fixtures"""

import os
from pathlib import Path

import pytest

from douyin_api.core.config import BrandingConfig, CacheConfig, DouyinConfig, TikHubConfig


@pytest.fixture(autouse=True)
def reset_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    """Reset environment variables before each test"""
    # Clear any APP_ prefixed environment variables
    for key in list(os.environ.keys()):
        if key.startswith("APP_"):
            monkeypatch.delenv(key, raising=False)


@pytest.fixture
def cache_config(tmp_path: Path) -> CacheConfig:
    """Cache config pointing at a temporary directory."""
    return CacheConfig(cache_dir=str(tmp_path / "cache"), ttl=3600, sweep_interval=0)


@pytest.fixture
def tikhub_config() -> TikHubConfig:
    return TikHubConfig(api_key="tikhub-test-key", base_url="https://api.tikhub.test")


@pytest.fixture
def douyin_config() -> DouyinConfig:
    return DouyinConfig()


@pytest.fixture
def branding_config() -> BrandingConfig:
    return BrandingConfig(title="Test API", disclaimer="仅供测试")
