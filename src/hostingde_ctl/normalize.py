"""Canonicalise record sets before they are compared."""

from __future__ import annotations

import dataclasses
import ipaddress
from typing import Any, Iterable

import dns.exception
import dns.name

from .models import HOSTNAME_KINDS, CanonicalRecord, ConversionError, RecordKind


def canonical_name(name: str) -> str:
    """Return the lower-case punycode form of a name without the root dot."""
    stripped = name.strip().rstrip(".")
    if not stripped:
        return ""
    try:
        text = dns.name.from_unicode(stripped).to_text(omit_final_dot=True)
    except dns.exception.DNSException as exc:
        raise ConversionError(f"Invalid domain name {name!r}: {exc}") from exc
    return text.lower()


def _to_fqdn(name: str) -> str:
    """Return the trailing-dot form of a domain-name target."""
    return f"{canonical_name(name)}."


def _compact_address(value: str) -> str:
    """Return the compressed textual form of an IP address, if it is one."""
    try:
        return ipaddress.ip_address(value.strip()).compressed
    except ValueError:
        return value


def normalize_record(record: CanonicalRecord) -> CanonicalRecord:
    """Return ``record`` with comparison-irrelevant formatting removed."""
    changes: dict[str, Any] = {"name": canonical_name(record.name)}
    if record.kind in HOSTNAME_KINDS:
        changes["target"] = _to_fqdn(record.target)
    elif record.kind in {RecordKind.A, RecordKind.AAAA}:
        changes["target"] = _compact_address(record.target)
    elif record.kind is RecordKind.TXT:
        values = tuple(sorted(set(record.txt_values or (record.target,))))
        changes["txt_values"] = values
        changes["target"] = values[0]
    return dataclasses.replace(record, **changes)


def normalize_records(records: Iterable[CanonicalRecord]) -> list[CanonicalRecord]:
    """Normalise every record, keeping the enumeration order."""
    return [normalize_record(record) for record in records]
