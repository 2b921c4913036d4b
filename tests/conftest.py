"""Shared fixtures for hostingde-ctl tests."""

import pytest

from hostingde_ctl.adapter import decode
from hostingde_ctl.config import AppConfig
from hostingde_ctl.models import CanonicalRecord, ProviderRecord, RecordKind
from hostingde_ctl.normalize import normalize_record

ZONE = "example.com"


@pytest.fixture
def app_config():
    """Configuration without any environment access"""
    return AppConfig(
        api_key="test-key",
        base_url="https://api.test/",
        limit=10,
        timeout=5.0,
        verify_tls=True,
        default_record_ttl=3600,
        max_workers=2,
        log_level="DEBUG",
    )


@pytest.fixture
def desired():
    """Factory for normalised desired records"""

    def _make(kind, name=ZONE, target="", ttl=3600, **attrs):
        return normalize_record(CanonicalRecord(name=name, kind=RecordKind(kind), ttl=ttl, target=target, **attrs))

    return _make


@pytest.fixture
def fetched():
    """Factory for normalised records decoded from provider objects"""

    def _make(kind, content, name=ZONE, ttl=3600, priority=None, record_id="rec-1"):
        record = ProviderRecord(name=name, type=kind, ttl=ttl, content=content, priority=priority, id=record_id)
        return normalize_record(decode(ZONE, record))

    return _make
