"""Diff utilities for DNS record sets."""

from __future__ import annotations

import logging
from collections import defaultdict
from typing import Dict, Iterable, List, Tuple

from .adapter import encode
from .models import (
    SINGLETON_KINDS,
    CanonicalRecord,
    ChangeKind,
    DiffEntry,
    DiffError,
    DiffKey,
    ProviderRecord,
    RecordKind,
    ZoneChanges,
)

LOG = logging.getLogger("hostingde_ctl")

GroupKey = Tuple[str, RecordKind]


def _group_records(records: Iterable[CanonicalRecord]) -> Dict[GroupKey, List[CanonicalRecord]]:
    """Index records by owner/kind, keeping enumeration order. SOA is skipped."""
    groups: Dict[GroupKey, List[CanonicalRecord]] = defaultdict(list)
    for record in records:
        if record.kind is RecordKind.SOA:
            continue
        groups[(record.name, record.kind)].append(record)
    return groups


def _check_desired(key: GroupKey, records: List[CanonicalRecord], encoded: List[ProviderRecord]) -> None:
    """Reject desired groups that cannot be told apart or cannot coexist."""
    name, kind = key
    if kind in SINGLETON_KINDS and len(records) > 1:
        raise DiffError(f"{kind.value} {name} is defined {len(records)} times; only one is allowed.")
    seen = set()
    for item in encoded:
        fingerprint = (item.content, item.priority)
        if fingerprint in seen:
            raise DiffError(f"Duplicate desired {kind.value} record {name} with content {item.content!r}.")
        seen.add(fingerprint)


def _same_state(desired: ProviderRecord, existing: ProviderRecord) -> bool:
    """Return True when the mutable attributes match."""
    return (
        desired.ttl == existing.ttl
        and desired.content == existing.content
        and desired.priority == existing.priority
    )


def _pair_group(
    key: GroupKey,
    desired: List[CanonicalRecord],
    existing: List[CanonicalRecord],
) -> List[DiffEntry]:
    """Pair desired and existing records of one owner/kind group.

    Identical content is paired first, the remainder positionally; whatever is
    left over becomes a create or a delete.
    """
    desired_enc = [encode(record) for record in desired]
    existing_enc = [encode(record) for record in existing]
    _check_desired(key, desired, desired_enc)

    pairs: List[Tuple[int, int]] = []
    taken: set[int] = set()
    matched: set[int] = set()
    for d_idx, d_rec in enumerate(desired_enc):
        for e_idx, e_rec in enumerate(existing_enc):
            if e_idx not in taken and e_rec.content == d_rec.content:
                pairs.append((d_idx, e_idx))
                taken.add(e_idx)
                matched.add(d_idx)
                break

    rest_desired = [idx for idx in range(len(desired)) if idx not in matched]
    rest_existing = [idx for idx in range(len(existing)) if idx not in taken]
    pairs.extend(zip(rest_desired, rest_existing))

    name, kind = key
    entries: List[DiffEntry] = []
    for d_idx, e_idx in pairs:
        change = ChangeKind.UNCHANGED if _same_state(desired_enc[d_idx], existing_enc[e_idx]) else ChangeKind.MODIFY
        entries.append(
            DiffEntry(
                key=DiffKey(name, kind, len(entries)),
                change=change,
                desired=desired[d_idx],
                existing=existing[e_idx],
            )
        )
    for d_idx in rest_desired[len(rest_existing):]:
        slot_key = DiffKey(name, kind, len(entries))
        entries.append(DiffEntry(key=slot_key, change=ChangeKind.CREATE, desired=desired[d_idx]))
    for e_idx in rest_existing[len(rest_desired):]:
        slot_key = DiffKey(name, kind, len(entries))
        entries.append(DiffEntry(key=slot_key, change=ChangeKind.DELETE, existing=existing[e_idx]))
    return entries


def diff_records(
    zone: str,
    desired: Iterable[CanonicalRecord],
    existing: Iterable[CanonicalRecord],
) -> ZoneChanges:
    """Classify normalised desired records against normalised existing ones."""
    desired_map = _group_records(desired)
    existing_map = _group_records(existing)
    changes = ZoneChanges(zone=zone)

    for key in sorted(set(desired_map) | set(existing_map), key=lambda k: (k[0], k[1].value)):
        for entry in _pair_group(key, desired_map.get(key, []), existing_map.get(key, [])):
            if entry.change is not ChangeKind.UNCHANGED:
                record = entry.desired or entry.existing
                LOG.debug("%s %s", entry.change.value, record.describe())
            changes.entries.append(entry)

    LOG.info(
        "Diff for %s: %s creates, %s modifies, %s deletes, %s unchanged",
        zone,
        len(changes.creates),
        len(changes.modifies),
        len(changes.deletes),
        len(changes.unchanged),
    )
    return changes
