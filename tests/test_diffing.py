"""
Tests for the diff engine
"""
from collections import Counter

import pytest

from hostingde_ctl.diffing import diff_records
from hostingde_ctl.models import ChangeKind, DiffError, RecordKind

ZONE = "example.com"


def _key_union_size(desired, existing):
    """Size of the union of (name, kind, slot) identity keys, SOA excluded"""
    d = Counter((r.name, r.kind) for r in desired if r.kind is not RecordKind.SOA)
    e = Counter((r.name, r.kind) for r in existing if r.kind is not RecordKind.SOA)
    return sum(max(d[key], e[key]) for key in set(d) | set(e))


def test_mx_create_when_zone_empty(desired):
    """A desired MX with nothing published is a single create"""
    mx = desired("MX", target="mail.example.com.", mx_preference=10)
    changes = diff_records(ZONE, [mx], [])
    assert [entry.change for entry in changes.entries] == [ChangeKind.CREATE]
    assert changes.creates[0].desired == mx
    assert changes.creates[0].existing is None


def test_srv_matching_trimmed_content_is_unchanged(desired, fetched):
    """Pre-trimmed provider content does not cause a spurious modify"""
    srv = desired(
        "SRV",
        name="_sip._tcp.example.com",
        target="sip.example.com.",
        srv_priority=10,
        srv_weight=5,
        srv_port=5060,
    )
    live = fetched("SRV", "5 5060 sip.example.com", name="_sip._tcp.example.com", priority=10)
    changes = diff_records(ZONE, [srv], [live])
    assert [entry.change for entry in changes.entries] == [ChangeKind.UNCHANGED]


def test_txt_content_match_then_leftover_delete(desired, fetched):
    """One matching TXT stays, the other published value is deleted"""
    existing = [fetched("TXT", "first", record_id="t1"), fetched("TXT", "second", record_id="t2")]
    changes = diff_records(ZONE, [desired("TXT", target="second")], existing)
    assert len(changes.unchanged) == 1
    assert changes.unchanged[0].existing.record_id == "t2"
    assert len(changes.deletes) == 1
    assert changes.deletes[0].existing.record_id == "t1"
    assert changes.creates == []


def test_reordered_values_are_unchanged(desired, fetched):
    wanted = [desired("A", target="192.0.2.1"), desired("A", target="192.0.2.2")]
    live = [fetched("A", "192.0.2.2", record_id="a2"), fetched("A", "192.0.2.1", record_id="a1")]
    changes = diff_records(ZONE, wanted, live)
    assert not changes.has_changes()
    assert len(changes.unchanged) == 2


def test_positional_pairing_produces_modify(desired, fetched):
    """Unmatched records pair up in enumeration order"""
    changes = diff_records(ZONE, [desired("A", target="192.0.2.9")], [fetched("A", "192.0.2.1")])
    assert len(changes.modifies) == 1
    entry = changes.modifies[0]
    assert entry.desired.target == "192.0.2.9"
    assert entry.existing.target == "192.0.2.1"


def test_ttl_change_is_modify(desired, fetched):
    changes = diff_records(ZONE, [desired("A", target="192.0.2.1", ttl=60)], [fetched("A", "192.0.2.1", ttl=3600)])
    assert [entry.change for entry in changes.entries] == [ChangeKind.MODIFY]


def test_mx_preference_change_is_modify(desired, fetched):
    changes = diff_records(
        ZONE,
        [desired("MX", target="mail.example.com.", mx_preference=20)],
        [fetched("MX", "mail.example.com", priority=10)],
    )
    assert [entry.change for entry in changes.entries] == [ChangeKind.MODIFY]


def test_extra_desired_records_become_creates(desired, fetched):
    wanted = [desired("A", target="192.0.2.1"), desired("A", target="192.0.2.2"), desired("A", target="192.0.2.3")]
    live = [fetched("A", "192.0.2.2", record_id="a2"), fetched("A", "192.0.2.9", record_id="a9")]
    changes = diff_records(ZONE, wanted, live)
    assert len(changes.unchanged) == 1
    assert len(changes.modifies) == 1
    assert len(changes.creates) == 1
    assert changes.modifies[0].desired.target == "192.0.2.1"
    assert changes.modifies[0].existing.record_id == "a9"
    assert changes.creates[0].desired.target == "192.0.2.3"


def test_self_diff_is_empty(desired, fetched):
    records = [
        fetched("A", "192.0.2.1", name="www.example.com"),
        fetched("MX", "mail.example.com", priority=10),
        fetched("TXT", "v=spf1 -all"),
        fetched("CAA", '0 issue "letsencrypt.org"'),
    ]
    changes = diff_records(ZONE, records, records)
    assert not changes.has_changes()
    assert changes.total() == 0


def test_soa_never_classified(desired, fetched):
    wanted = [desired("SOA", target="ns1.example.com. hostmaster.example.com. 2 3 4 5 6")]
    live = [fetched("SOA", "ns1.hosting.de. hostmaster.hosting.de. 1 2 3 4 5")]
    changes = diff_records(ZONE, wanted, live)
    assert changes.entries == []


def test_empty_sets():
    changes = diff_records(ZONE, [], [])
    assert changes.entries == []
    assert not changes.has_changes()


def test_entry_count_matches_identity_keys(desired, fetched):
    wanted = [
        desired("A", target="192.0.2.1"),
        desired("A", target="192.0.2.2"),
        desired("TXT", target="x"),
        desired("CNAME", name="www.example.com", target="example.com."),
    ]
    live = [
        fetched("A", "192.0.2.3"),
        fetched("TXT", "x"),
        fetched("TXT", "y"),
        fetched("NS", "ns1.hosting.de"),
        fetched("SOA", "ns1.hosting.de. hostmaster.hosting.de. 1 2 3 4 5"),
    ]
    changes = diff_records(ZONE, wanted, live)
    assert len(changes.entries) == _key_union_size(wanted, live)
    assert len({entry.key for entry in changes.entries}) == len(changes.entries)


def test_duplicate_desired_records_rejected(desired):
    wanted = [desired("A", target="192.0.2.1"), desired("A", target="192.0.2.1")]
    with pytest.raises(DiffError, match="Duplicate"):
        diff_records(ZONE, wanted, [])


def test_multiple_cnames_rejected(desired):
    wanted = [
        desired("CNAME", name="www.example.com", target="a.example.com."),
        desired("CNAME", name="www.example.com", target="b.example.com."),
    ]
    with pytest.raises(DiffError, match="only one"):
        diff_records(ZONE, wanted, [])
