"""Mapping between canonical records and hosting.de record objects.

Every record kind has exactly one encoder and one decoder. The ``content``
string of a hosting.de record packs the kind specific sub-fields in a fixed
order, separated by single spaces:

    SRV    weight port target        priority -> SRV priority
    CAA    flag tag "value"
    MX     target                    priority -> preference
    NS, CNAME, ALIAS    target
    other  target, verbatim

Domain-name targets are stored without the trailing dot on the provider side.
"""

from __future__ import annotations

from typing import Any, Callable, Dict, Optional, Tuple

from .models import CanonicalRecord, ConversionError, ProviderHandle, ProviderRecord, RecordKind

Encoded = Tuple[str, Optional[int]]
Encoder = Callable[[CanonicalRecord], Encoded]
Decoder = Callable[[ProviderRecord], Dict[str, Any]]


def _strip_dot(name: str) -> str:
    """Drop the trailing root dot of a domain name."""
    if len(name) > 1 and name.endswith("."):
        return name[:-1]
    return name


def _add_dot(name: str) -> str:
    """Return the name in trailing-dot FQDN form."""
    return name if name.endswith(".") else f"{name}."


def _fields(record: ProviderRecord, count: int, maxsplit: int = -1) -> list[str]:
    """Split content into exactly ``count`` fields."""
    parts = record.content.split(None, maxsplit)
    if len(parts) != count:
        raise ConversionError(
            f"{record.type} record {record.name} content {record.content!r} "
            f"has {len(parts)} fields, expected {count}."
        )
    return parts


def _as_int(record: ProviderRecord, field_name: str, value: Any) -> int:
    """Parse a numeric sub-field."""
    if value is None:
        raise ConversionError(f"{record.type} record {record.name} is missing {field_name}.")
    try:
        return int(value)
    except (TypeError, ValueError) as exc:
        raise ConversionError(
            f"{record.type} record {record.name} has non-numeric {field_name} {value!r}."
        ) from exc


def _require(record: CanonicalRecord, *names: str) -> None:
    """Ensure kind specific attributes are present before encoding."""
    missing = [name for name in names if getattr(record, name) is None]
    if missing:
        raise ConversionError(f"{record.kind.value} record {record.name} is missing {', '.join(missing)}.")


# Encoders


def _encode_verbatim(record: CanonicalRecord) -> Encoded:
    return record.target, None


def _encode_hostname(record: CanonicalRecord) -> Encoded:
    return _strip_dot(record.target), None


def _encode_mx(record: CanonicalRecord) -> Encoded:
    _require(record, "mx_preference")
    return _strip_dot(record.target), record.mx_preference


def _encode_srv(record: CanonicalRecord) -> Encoded:
    _require(record, "srv_priority", "srv_weight", "srv_port")
    content = f"{record.srv_weight} {record.srv_port} {_strip_dot(record.target)}"
    return content, record.srv_priority


def _encode_caa(record: CanonicalRecord) -> Encoded:
    _require(record, "caa_flag", "caa_tag")
    return f'{record.caa_flag} {record.caa_tag} "{record.target}"', None


def _encode_txt(record: CanonicalRecord) -> Encoded:
    values = record.txt_values or (record.target,)
    if len(values) > 1:
        raise ConversionError(f"TXT record {record.name} has {len(values)} strings; hosting.de stores one.")
    return values[0], None


# Decoders


def _decode_verbatim(record: ProviderRecord) -> Dict[str, Any]:
    return {"target": record.content}


def _decode_hostname(record: ProviderRecord) -> Dict[str, Any]:
    (target,) = _fields(record, 1)
    return {"target": _add_dot(target)}


def _decode_mx(record: ProviderRecord) -> Dict[str, Any]:
    (target,) = _fields(record, 1)
    return {
        "target": _add_dot(target),
        "mx_preference": _as_int(record, "priority", record.priority),
    }


def _decode_srv(record: ProviderRecord) -> Dict[str, Any]:
    weight, port, target = _fields(record, 3)
    return {
        "target": _add_dot(target),
        "srv_priority": _as_int(record, "priority", record.priority),
        "srv_weight": _as_int(record, "weight", weight),
        "srv_port": _as_int(record, "port", port),
    }


def _decode_caa(record: ProviderRecord) -> Dict[str, Any]:
    flag, tag, value = _fields(record, 3, maxsplit=2)
    return {
        "target": value.strip('"'),
        "caa_flag": _as_int(record, "flag", flag),
        "caa_tag": tag,
    }


def _decode_txt(record: ProviderRecord) -> Dict[str, Any]:
    return {"target": record.content, "txt_values": (record.content,)}


_ENCODERS: Dict[RecordKind, Encoder] = {
    RecordKind.A: _encode_verbatim,
    RecordKind.AAAA: _encode_verbatim,
    RecordKind.NS: _encode_hostname,
    RecordKind.CNAME: _encode_hostname,
    RecordKind.ALIAS: _encode_hostname,
    RecordKind.MX: _encode_mx,
    RecordKind.SRV: _encode_srv,
    RecordKind.CAA: _encode_caa,
    RecordKind.TLSA: _encode_verbatim,
    RecordKind.SSHFP: _encode_verbatim,
    RecordKind.PTR: _encode_verbatim,
    RecordKind.TXT: _encode_txt,
    RecordKind.SOA: _encode_verbatim,
}

_DECODERS: Dict[RecordKind, Decoder] = {
    RecordKind.A: _decode_verbatim,
    RecordKind.AAAA: _decode_verbatim,
    RecordKind.NS: _decode_hostname,
    RecordKind.CNAME: _decode_hostname,
    RecordKind.ALIAS: _decode_hostname,
    RecordKind.MX: _decode_mx,
    RecordKind.SRV: _decode_srv,
    RecordKind.CAA: _decode_caa,
    RecordKind.TLSA: _decode_verbatim,
    RecordKind.SSHFP: _decode_verbatim,
    RecordKind.PTR: _decode_verbatim,
    RecordKind.TXT: _decode_txt,
    RecordKind.SOA: _decode_verbatim,
}


def _check_tables() -> None:
    """Fail at import time if a kind lacks an encoder or decoder."""
    for table_name, table in (("encoder", _ENCODERS), ("decoder", _DECODERS)):
        missing = sorted(kind.value for kind in RecordKind if kind not in table)
        if missing:
            raise RuntimeError(f"No {table_name} for record kinds: {', '.join(missing)}")


_check_tables()


def encode(record: CanonicalRecord, handle: ProviderHandle | None = None) -> ProviderRecord:
    """Return the hosting.de form of a canonical record.

    The remote identifier is attached only when ``handle`` is given, which is
    the case for modifications and deletions.
    """
    content, priority = _ENCODERS[record.kind](record)
    return ProviderRecord(
        name=record.name,
        type=record.kind.value,
        ttl=record.ttl,
        content=content,
        priority=priority,
        id=handle.record_id if handle and handle.record_id else None,
    )


def decode(domain: str, record: ProviderRecord) -> CanonicalRecord:
    """Return the canonical form of a fetched hosting.de record."""
    kind = RecordKind.parse(record.type)
    name = record.name
    if name in {"", "@"}:
        name = domain
    fields = _DECODERS[kind](record)
    return CanonicalRecord(
        name=name,
        kind=kind,
        ttl=record.ttl,
        handle=ProviderHandle(record_id=record.id, record=record),
        **fields,
    )
