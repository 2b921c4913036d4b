"""hosting.de provider: fetch, reconcile and build corrections for a zone."""

from __future__ import annotations

import fnmatch
import logging
from dataclasses import dataclass, field
from typing import Iterable, Mapping

from .adapter import decode
from .client import HostingdeClient
from .config import DEFAULT_BASE_URL
from .corrections import Correction, build_corrections
from .diffing import diff_records
from .models import CanonicalRecord, ConfigError, RecordKind, ZoneChanges
from .normalize import canonical_name, normalize_records

LOG = logging.getLogger("hostingde_ctl")


@dataclass(frozen=True)
class ProviderFeatures:
    """What the provider can and cannot manage."""

    can_create_domains: bool = False
    can_dual_host: bool = True
    officially_supported: bool = False
    can_use_txt_multi: bool = False
    can_get_zones: bool = True
    can_use_alias: bool = True
    can_use_caa: bool = True
    can_use_ptr: bool = True
    can_use_sshfp: bool = True
    can_use_srv: bool = True
    can_use_tlsa: bool = True
    can_auto_dnssec: bool = False
    cant_use_nopurge: bool = False


FEATURES = ProviderFeatures()


@dataclass
class ZonePlan:
    """Diff and corrections computed for one zone."""

    zone: str
    changes: ZoneChanges
    corrections: list[Correction] = field(default_factory=list)


def _matches_pattern(name: str, patterns: Iterable[str]) -> bool:
    """Return True if name matches any ignore pattern."""
    lowered = name.lower()
    return any(fnmatch.fnmatch(lowered, pattern.lower()) for pattern in patterns)


def filter_ignored(records: list[CanonicalRecord], patterns: list[str]) -> list[CanonicalRecord]:
    """Drop existing records whose owner matches an ignore pattern."""
    if not patterns:
        return records
    return [
        record
        for record in records
        if record.kind is RecordKind.SOA or not _matches_pattern(record.name, patterns)
    ]


class HostingdeProvider:
    """Reconciles zones hosted at hosting.de."""

    def __init__(self, client: HostingdeClient):
        self.client = client

    def get_zone_records(self, domain: str) -> list[CanonicalRecord]:
        """Return the decoded records of a zone."""
        snapshot = self.client.find_zone(domain)
        return [decode(domain, record) for record in snapshot.records]

    def get_nameservers(self, domain: str) -> list[str]:
        """Return the NS targets published at the zone apex."""
        records = normalize_records(self.get_zone_records(domain))
        apex = canonical_name(domain)
        return [record.target for record in records if record.kind is RecordKind.NS and record.name == apex]

    def plan_zone(
        self,
        domain: str,
        desired: Iterable[CanonicalRecord],
        ignore: list[str] | None = None,
    ) -> ZonePlan:
        """Diff the desired records against the live zone and build corrections.

        A zone config missing from the zone lookup is fetched by the
        correction when it runs, never here.
        """
        snapshot = self.client.find_zone(domain)
        existing = normalize_records(decode(domain, record) for record in snapshot.records)
        existing = filter_ignored(existing, ignore or [])
        changes = diff_records(domain, normalize_records(desired), existing)
        corrections = build_corrections(changes, snapshot.zone_config, updater=self.client)
        return ZonePlan(zone=domain, changes=changes, corrections=corrections)

    def get_domain_corrections(
        self,
        domain: str,
        desired: Iterable[CanonicalRecord],
        ignore: list[str] | None = None,
    ) -> list[Correction]:
        """Return the corrections that converge ``domain`` to ``desired``."""
        return self.plan_zone(domain, desired, ignore).corrections


def new_provider(settings: Mapping[str, str]) -> HostingdeProvider:
    """Build a provider from a settings mapping."""
    api_key = settings.get("apikey", "")
    if not api_key:
        raise ConfigError("missing apikey setting")
    base_url = settings.get("baseurl") or DEFAULT_BASE_URL
    try:
        limit = int(settings.get("limit") or 10)
    except ValueError as exc:
        raise ConfigError("limit setting can not be parsed to int") from exc
    try:
        timeout = float(settings.get("timeout") or 30)
    except ValueError as exc:
        raise ConfigError("timeout setting can not be parsed to a number") from exc
    verify_tls = (settings.get("verify_tls") or "true").lower() != "false"
    client = HostingdeClient(base_url, api_key, limit=limit, timeout=timeout, verify_tls=verify_tls)
    return HostingdeProvider(client)
