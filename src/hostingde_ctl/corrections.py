"""Turn zone diffs into executable corrections."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Iterable, Protocol

from .adapter import encode
from .models import (
    ApplyError,
    CanonicalRecord,
    DiffError,
    HostingdeCtlError,
    ProviderHandle,
    ProviderRecord,
    RecordKind,
    ZoneChanges,
)

LOG = logging.getLogger("hostingde_ctl")


class ZoneUpdater(Protocol):
    """Remote operations needed to write a batch of record changes."""

    def find_zone_config(self, zone: str) -> dict[str, Any]:
        ...

    def update_zone(
        self,
        zone_config: dict[str, Any],
        records_to_add: list[ProviderRecord],
        records_to_modify: list[ProviderRecord],
        records_to_delete: list[ProviderRecord],
    ) -> dict[str, Any]:
        ...


def format_api_errors(errors: Iterable[dict[str, Any]]) -> str:
    """Render an API error list, one ``code: text`` per line."""
    return "".join(f"\n{error.get('code')}: {error.get('text')}" for error in errors)


@dataclass
class ZoneUpdate:
    """One batched zone update, ready to be sent."""

    zone: str
    zone_config: dict[str, Any]
    records_to_add: list[ProviderRecord] = field(default_factory=list)
    records_to_modify: list[ProviderRecord] = field(default_factory=list)
    records_to_delete: list[ProviderRecord] = field(default_factory=list)
    updater: ZoneUpdater | None = field(default=None, repr=False, compare=False)
    applied: bool = field(default=False, init=False, compare=False)

    def is_empty(self) -> bool:
        """Return True when there is nothing to send."""
        return not (self.records_to_add or self.records_to_modify or self.records_to_delete)

    def to_payload(self) -> dict[str, Any]:
        """Return the request body without performing any I/O."""
        return {
            "zoneConfig": self.zone_config,
            "recordsToAdd": [record.to_api() for record in self.records_to_add],
            "recordsToModify": [record.to_api() for record in self.records_to_modify],
            "recordsToDelete": [record.to_api() for record in self.records_to_delete],
        }

    def execute(self) -> None:
        """Send the update. A second call after success does nothing.

        The zone config is fetched here when the zone lookup did not carry
        one, so planning never needs the extra request. Every failure,
        expected or not, surfaces as ``ApplyError``.
        """
        if self.applied:
            LOG.info("Update for %s already applied; skipping.", self.zone)
            return
        if self.updater is None:
            raise ApplyError(f"No updater configured for zone {self.zone}.")
        try:
            self._send()
        except ApplyError:
            raise
        except HostingdeCtlError as exc:
            raise ApplyError(f"Updating zone {self.zone} failed: {exc}") from exc
        except Exception as exc:  # noqa: BLE001
            raise ApplyError(f"Updating zone {self.zone} failed unexpectedly: {exc!r}") from exc
        self.applied = True

    def _send(self) -> None:
        if not self.zone_config:
            LOG.info("Fetching zone config for %s", self.zone)
            self.zone_config = self.updater.find_zone_config(self.zone)
        LOG.info(
            "Sending update for %s: %s additions, %s modifications, %s deletions",
            self.zone,
            len(self.records_to_add),
            len(self.records_to_modify),
            len(self.records_to_delete),
        )
        response = self.updater.update_zone(
            self.zone_config,
            self.records_to_add,
            self.records_to_modify,
            self.records_to_delete,
        )
        if response is None:
            response = {}
        if not isinstance(response, dict):
            raise ApplyError(f"Updating zone {self.zone} failed: unexpected response {response!r}")
        errors = response.get("errors") or []
        if errors:
            raise ApplyError(f"Updating zone {self.zone} failed:{format_api_errors(errors)}")
        if response.get("status") == "error":
            raise ApplyError(f"Updating zone {self.zone} failed: response status is 'error'")


@dataclass
class Correction:
    """A described, deferred remote write."""

    description: str
    action: ZoneUpdate

    def execute(self) -> None:
        """Run the deferred action."""
        self.action.execute()


def _handle_of(record: CanonicalRecord) -> ProviderHandle:
    """Return the handle of a fetched record, which must carry a remote id."""
    if record.handle is None or not record.handle.record_id:
        raise DiffError(f"{record.describe()} has no remote identifier.")
    return record.handle


def _describe(update: ZoneUpdate) -> str:
    lines = [
        f"Updating zone {update.zone} ({len(update.records_to_add)} to add, "
        f"{len(update.records_to_modify)} to modify, {len(update.records_to_delete)} to delete)"
    ]
    for sign, records in (("+", update.records_to_add), ("~", update.records_to_modify), ("-", update.records_to_delete)):
        for record in records:
            priority = f" {record.priority}" if record.priority is not None else ""
            lines.append(f" {sign} {record.type} {record.name}{priority} {record.content} (ttl {record.ttl})")
    return "\n".join(lines)


def build_corrections(
    changes: ZoneChanges,
    zone_config: dict[str, Any],
    updater: ZoneUpdater | None = None,
) -> list[Correction]:
    """Return the corrections that converge a zone, in execution order.

    Additions and modifications are encoded from the desired record;
    modifications and deletions carry the existing record's remote id.
    """
    update = ZoneUpdate(zone=changes.zone, zone_config=zone_config, updater=updater)
    for entry in changes.creates:
        if entry.desired.kind is not RecordKind.SOA:
            update.records_to_add.append(encode(entry.desired))
    for entry in changes.modifies:
        if entry.desired.kind is not RecordKind.SOA:
            update.records_to_modify.append(encode(entry.desired, _handle_of(entry.existing)))
    for entry in changes.deletes:
        if entry.existing.kind is not RecordKind.SOA:
            update.records_to_delete.append(encode(entry.existing, _handle_of(entry.existing)))

    if update.is_empty():
        LOG.info("No changes for %s.", changes.zone)
        return []
    return [Correction(description=_describe(update), action=update)]


def execute_corrections(corrections: Iterable[Correction]) -> int:
    """Run corrections in order, stopping at the first failure."""
    count = 0
    for correction in corrections:
        LOG.info("Executing: %s", correction.description.splitlines()[0])
        correction.execute()
        count += 1
    return count
