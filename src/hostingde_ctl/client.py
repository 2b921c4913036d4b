"""Thin client for the hosting.de DNS JSON API."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

import requests

from .corrections import format_api_errors
from .models import ApiError, ProviderRecord, ZoneLookupError

LOG = logging.getLogger("hostingde_ctl")


@dataclass
class ZoneSnapshot:
    """Records and write handle of one zone as fetched from the API."""

    name: str
    records: list[ProviderRecord] = field(default_factory=list)
    zone_config: dict[str, Any] = field(default_factory=dict)


class HostingdeClient:
    """Calls the ``dns/v1/json`` endpoints."""

    def __init__(
        self,
        base_url: str,
        api_key: str,
        limit: int = 10,
        timeout: float = 30.0,
        verify_tls: bool = True,
    ):
        """Store connection settings."""
        self.base_url = base_url if base_url.endswith("/") else f"{base_url}/"
        self.api_key = api_key
        self.limit = limit
        self.timeout = timeout
        self.verify_tls = verify_tls

    def _post(self, method: str, payload: dict[str, Any]) -> dict[str, Any]:
        """POST a request and return the decoded envelope."""
        url = f"{self.base_url}dns/v1/json/{method}"
        body = {"authToken": self.api_key, **payload}
        LOG.debug("POST %s", url)
        try:
            response = requests.post(url, json=body, timeout=self.timeout, verify=self.verify_tls)
            response.raise_for_status()
            return response.json()
        except requests.RequestException as exc:
            raise ApiError(f"{method} request failed: {exc}") from exc
        except ValueError as exc:
            raise ApiError(f"{method} returned invalid JSON: {exc}") from exc

    def _find_one(self, method: str, zone: str, what: str) -> dict[str, Any]:
        """Run a ``*Find`` call filtered by zone name; exactly one hit is accepted."""
        envelope = self._post(
            method,
            {
                "filter": {"field": "ZoneNameUnicode", "value": zone},
                "limit": self.limit,
                "page": 1,
            },
        )
        errors = envelope.get("errors") or []
        if errors or envelope.get("status") == "error":
            raise ApiError(f"{method} for {zone} failed:{format_api_errors(errors)}")
        result = envelope.get("response") or {}
        data = result.get("data") or []
        total = result.get("totalEntries", len(data))
        if total != 1 or len(data) != 1:
            if total == 0:
                raise ZoneLookupError(f"{what} for {zone} not found.")
            raise ZoneLookupError(f"{what} for {zone} is ambiguous ({total} matches).")
        return data[0]

    def find_zone(self, zone: str) -> ZoneSnapshot:
        """Return the records and zone config of ``zone``."""
        data = self._find_one("zonesFind", zone, "Zone")
        records = [ProviderRecord.from_api(item) for item in data.get("records") or []]
        LOG.info("Fetched %s records for %s", len(records), zone)
        return ZoneSnapshot(name=zone, records=records, zone_config=data.get("zoneConfig") or {})

    def find_zone_config(self, zone: str) -> dict[str, Any]:
        """Return the zone config object of ``zone``."""
        return self._find_one("zoneConfigsFind", zone, "ZoneConfig")

    def update_zone(
        self,
        zone_config: dict[str, Any],
        records_to_add: list[ProviderRecord],
        records_to_modify: list[ProviderRecord],
        records_to_delete: list[ProviderRecord],
    ) -> dict[str, Any]:
        """Send a batched ``zoneUpdate``; the envelope is returned unchecked."""
        return self._post(
            "zoneUpdate",
            {
                "zoneConfig": zone_config,
                "recordsToAdd": [record.to_api() for record in records_to_add],
                "recordsToModify": [record.to_api() for record in records_to_modify],
                "recordsToDelete": [record.to_api() for record in records_to_delete],
            },
        )
