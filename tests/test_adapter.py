"""
Tests for the canonical <-> hosting.de record mapping
"""
import pytest

from hostingde_ctl.adapter import decode, encode
from hostingde_ctl.models import (
    CanonicalRecord,
    ConversionError,
    ProviderHandle,
    ProviderRecord,
    RecordKind,
)
from hostingde_ctl.normalize import normalize_record

ZONE = "example.com"

CANONICAL = [
    CanonicalRecord(name="www.example.com", kind=RecordKind.A, ttl=300, target="192.0.2.1"),
    CanonicalRecord(name="www.example.com", kind=RecordKind.AAAA, ttl=300, target="2001:db8::1"),
    CanonicalRecord(name="example.com", kind=RecordKind.NS, ttl=86400, target="ns1.hosting.de."),
    CanonicalRecord(name="www.example.com", kind=RecordKind.CNAME, ttl=300, target="example.com."),
    CanonicalRecord(name="example.com", kind=RecordKind.ALIAS, ttl=300, target="lb.example.net."),
    CanonicalRecord(name="example.com", kind=RecordKind.MX, ttl=300, target="mail.example.com.", mx_preference=10),
    CanonicalRecord(
        name="_sip._tcp.example.com",
        kind=RecordKind.SRV,
        ttl=300,
        target="sip.example.com.",
        srv_priority=10,
        srv_weight=5,
        srv_port=5060,
    ),
    CanonicalRecord(
        name="example.com", kind=RecordKind.CAA, ttl=300, target="letsencrypt.org", caa_flag=0, caa_tag="issue"
    ),
    CanonicalRecord(name="_25._tcp.mail.example.com", kind=RecordKind.TLSA, ttl=300, target="3 1 1 abcdef"),
    CanonicalRecord(name="host.example.com", kind=RecordKind.SSHFP, ttl=300, target="1 1 123456789abcdef"),
    CanonicalRecord(name="1.2.0.192.in-addr.arpa", kind=RecordKind.PTR, ttl=300, target="host.example.com"),
    CanonicalRecord(
        name="example.com", kind=RecordKind.TXT, ttl=300, target="v=spf1 mx -all", txt_values=("v=spf1 mx -all",)
    ),
    CanonicalRecord(
        name="example.com",
        kind=RecordKind.SOA,
        ttl=86400,
        target="ns1.hosting.de. hostmaster.hosting.de. 2024010101 86400 7200 3600000 900",
    ),
]


def test_every_kind_has_a_round_trip_case():
    """Cover the complete kind enumeration"""
    assert {record.kind for record in CANONICAL} == set(RecordKind)


@pytest.mark.parametrize("record", CANONICAL, ids=lambda r: r.kind.value)
def test_decode_encode_round_trip(record):
    """Decoding the encoded form reproduces the canonical record"""
    assert normalize_record(record) == record
    assert decode(ZONE, encode(record)) == record


@pytest.mark.parametrize(
    "provider_record",
    [
        ProviderRecord(name="example.com", type="MX", ttl=300, content="mail.example.com", priority=10, id="r1"),
        ProviderRecord(name="_sip._tcp.example.com", type="SRV", ttl=300, content="5 5060 sip.example.com", priority=1, id="r2"),
        ProviderRecord(name="example.com", type="CAA", ttl=300, content='0 issue "letsencrypt.org"', id="r3"),
        ProviderRecord(name="www.example.com", type="CNAME", ttl=300, content="example.com", id="r4"),
        ProviderRecord(name="example.com", type="TXT", ttl=300, content="hello world", id="r5"),
        ProviderRecord(name="www.example.com", type="A", ttl=300, content="192.0.2.1", id="r6"),
    ],
    ids=lambda r: r.type,
)
def test_encode_decode_reproduces_provider_record(provider_record):
    """Re-encoding a fetched record with its handle gives the same object back"""
    canonical = decode(ZONE, provider_record)
    assert encode(canonical, canonical.handle) == provider_record


def test_mx_encode_strips_dot_and_sets_priority():
    """MX targets lose the trailing dot; preference goes to priority"""
    record = CanonicalRecord(name="example.com", kind=RecordKind.MX, ttl=3600, target="mail.example.com.", mx_preference=10)
    encoded = encode(record)
    assert encoded.priority == 10
    assert encoded.content == "mail.example.com"
    assert encoded.id is None


def test_srv_content_order():
    """SRV packs weight, port and target; priority stays separate"""
    record = CanonicalRecord(
        name="_sip._tcp.example.com",
        kind=RecordKind.SRV,
        ttl=60,
        target="sip.example.com.",
        srv_priority=20,
        srv_weight=5,
        srv_port=5060,
    )
    encoded = encode(record)
    assert encoded.content == "5 5060 sip.example.com"
    assert encoded.priority == 20


def test_encode_attaches_id_only_with_handle():
    """Create path has no id, modify/delete path reuses the remote id"""
    record = CanonicalRecord(name="www.example.com", kind=RecordKind.A, ttl=300, target="192.0.2.1")
    original = ProviderRecord(name="www.example.com", type="A", ttl=300, content="192.0.2.9", id="abc")
    assert encode(record).id is None
    assert encode(record, ProviderHandle(record_id="abc", record=original)).id == "abc"


def test_decode_populates_handle():
    """Fetched records carry a typed back-reference"""
    original = ProviderRecord(name="www.example.com", type="A", ttl=300, content="192.0.2.1", id="abc")
    record = decode(ZONE, original)
    assert record.record_id == "abc"
    assert record.handle.record is original


def test_decode_hostname_appends_dot():
    original = ProviderRecord(name="example.com", type="NS", ttl=300, content="ns1.hosting.de")
    assert decode(ZONE, original).target == "ns1.hosting.de."


def test_decode_apex_shorthand_uses_domain():
    original = ProviderRecord(name="@", type="A", ttl=300, content="192.0.2.1")
    assert decode(ZONE, original).name == ZONE


def test_decode_srv_with_two_fields_fails():
    """No silent zero-fill for short SRV content"""
    original = ProviderRecord(name="_sip._tcp.example.com", type="SRV", ttl=300, content="5 5060", priority=10)
    with pytest.raises(ConversionError, match="expected 3"):
        decode(ZONE, original)


def test_decode_caa_with_missing_value_fails():
    original = ProviderRecord(name="example.com", type="CAA", ttl=300, content="0 issue")
    with pytest.raises(ConversionError):
        decode(ZONE, original)


def test_decode_srv_non_numeric_port_fails():
    original = ProviderRecord(name="_sip._tcp.example.com", type="SRV", ttl=300, content="5 sip sip.example.com", priority=1)
    with pytest.raises(ConversionError, match="port"):
        decode(ZONE, original)


def test_decode_mx_without_priority_fails():
    original = ProviderRecord(name="example.com", type="MX", ttl=300, content="mail.example.com")
    with pytest.raises(ConversionError, match="priority"):
        decode(ZONE, original)


def test_decode_unknown_type_fails():
    original = ProviderRecord(name="example.com", type="HINFO", ttl=300, content="x y")
    with pytest.raises(ConversionError, match="Unsupported"):
        decode(ZONE, original)


def test_encode_mx_without_preference_fails():
    record = CanonicalRecord(name="example.com", kind=RecordKind.MX, ttl=300, target="mail.example.com.")
    with pytest.raises(ConversionError, match="mx_preference"):
        encode(record)


def test_encode_multi_string_txt_fails():
    record = CanonicalRecord(name="example.com", kind=RecordKind.TXT, ttl=300, target="a", txt_values=("a", "b"))
    with pytest.raises(ConversionError):
        encode(record)
