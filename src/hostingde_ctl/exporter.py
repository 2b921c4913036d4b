"""Utilities to serialise zone state into declarative formats."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import yaml

from .models import CanonicalRecord, RecordKind


def _owner_for_zone(name: str, zone: str) -> str:
    """Return the owner label relative to the zone."""
    if name == zone:
        return "@"
    suffix = f".{zone}"
    if name.endswith(suffix):
        return name[: -len(suffix)]
    return f"{name}."


def _record_to_dict(record: CanonicalRecord, zone: str) -> dict[str, Any]:
    """Convert a record into the desired-state YAML shape."""
    entry: dict[str, Any] = {
        "name": _owner_for_zone(record.name, zone),
        "type": record.kind.value,
        "ttl": record.ttl,
    }
    if record.kind is RecordKind.MX:
        entry["priority"] = record.mx_preference
        entry["value"] = record.target
    elif record.kind is RecordKind.SRV:
        entry["priority"] = record.srv_priority
        entry["value"] = f"{record.srv_weight} {record.srv_port} {record.target}"
    elif record.kind is RecordKind.CAA:
        entry["value"] = f'{record.caa_flag} {record.caa_tag} "{record.target}"'
    elif record.kind is RecordKind.TXT and len(record.txt_values) > 1:
        entry["values"] = list(record.txt_values)
    else:
        entry["value"] = record.target
    return entry


def zone_records_to_dict(zone: str, records: list[CanonicalRecord]) -> dict[str, Any]:
    """Create a dictionary describing the zone, SOA excluded."""
    ordered = sorted(
        (record for record in records if record.kind is not RecordKind.SOA),
        key=lambda rec: (_owner_for_zone(rec.name, zone), rec.kind.value, rec.target),
    )
    return {"zone": zone, "records": [_record_to_dict(record, zone) for record in ordered]}


def zone_records_to_yaml(zone: str, records: list[CanonicalRecord]) -> str:
    """Return YAML representation of a zone."""
    return yaml.safe_dump(zone_records_to_dict(zone, records), sort_keys=False)


def zone_records_to_json(zone: str, records: list[CanonicalRecord]) -> str:
    """Return JSON representation of a zone."""
    return json.dumps(zone_records_to_dict(zone, records), indent=2)


def write_zone_state(path: Path, content: str) -> None:
    """Write content to the given path, creating parent directories."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
