"""Core data models used by hostingde-ctl."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterator


class RecordKind(str, Enum):
    """Record types understood by the reconciler."""

    A = "A"
    AAAA = "AAAA"
    NS = "NS"
    CNAME = "CNAME"
    ALIAS = "ALIAS"
    MX = "MX"
    SRV = "SRV"
    CAA = "CAA"
    TLSA = "TLSA"
    SSHFP = "SSHFP"
    PTR = "PTR"
    TXT = "TXT"
    SOA = "SOA"

    @classmethod
    def parse(cls, value: str) -> "RecordKind":
        """Return the kind for a type string, raising ConversionError if unknown."""
        try:
            return cls(value.strip().upper())
        except ValueError as exc:
            raise ConversionError(f"Unsupported record type {value!r}.") from exc


# Kinds whose target is a domain name rather than opaque data.
HOSTNAME_KINDS = frozenset({RecordKind.NS, RecordKind.CNAME, RecordKind.ALIAS, RecordKind.MX, RecordKind.SRV})

# Kinds that may hold at most one record per owner name.
SINGLETON_KINDS = frozenset({RecordKind.CNAME, RecordKind.ALIAS})


@dataclass
class ProviderRecord:
    """A record as the hosting.de API represents it."""

    name: str
    type: str
    ttl: int
    content: str
    priority: int | None = None
    id: str | None = None

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> "ProviderRecord":
        """Build a record from an API record object."""
        priority = data.get("priority")
        return cls(
            name=data["name"],
            type=data["type"],
            ttl=int(data["ttl"]),
            content=data.get("content", ""),
            priority=int(priority) if priority is not None else None,
            id=data.get("id") or None,
        )

    def to_api(self) -> dict[str, Any]:
        """Return the API record object, omitting unset fields."""
        payload: dict[str, Any] = {
            "name": self.name,
            "type": self.type,
            "ttl": self.ttl,
            "content": self.content,
        }
        if self.priority is not None:
            payload["priority"] = self.priority
        if self.id:
            payload["id"] = self.id
        return payload


@dataclass(frozen=True)
class ProviderHandle:
    """Back-reference from a decoded record to the provider object it came from."""

    record_id: str | None
    record: ProviderRecord = field(repr=False, compare=False)


@dataclass(frozen=True)
class CanonicalRecord:
    """Provider-agnostic representation of a DNS resource record."""

    name: str
    kind: RecordKind
    ttl: int
    target: str
    mx_preference: int | None = None
    srv_priority: int | None = None
    srv_weight: int | None = None
    srv_port: int | None = None
    caa_flag: int | None = None
    caa_tag: str | None = None
    txt_values: tuple[str, ...] = ()
    handle: ProviderHandle | None = field(default=None, compare=False, repr=False)

    @property
    def record_id(self) -> str | None:
        """Return the remote identifier, if this record was fetched."""
        return self.handle.record_id if self.handle else None

    def describe(self) -> str:
        """Return a short human readable form."""
        details = []
        if self.kind is RecordKind.MX:
            details.append(str(self.mx_preference))
        elif self.kind is RecordKind.SRV:
            details.extend(str(v) for v in (self.srv_priority, self.srv_weight, self.srv_port))
        elif self.kind is RecordKind.CAA:
            details.extend([str(self.caa_flag), str(self.caa_tag)])
        details.append(self.target)
        return f"{self.kind.value} {self.name} {' '.join(details)} (ttl {self.ttl})"


class ChangeKind(str, Enum):
    """Classification of a diff entry."""

    CREATE = "create"
    DELETE = "delete"
    MODIFY = "modify"
    UNCHANGED = "unchanged"


@dataclass(frozen=True)
class DiffKey:
    """Identity of a diff entry: owner, kind and slot within the group."""

    name: str
    kind: RecordKind
    slot: int


@dataclass(frozen=True)
class DiffEntry:
    """Pairs at most one desired and one existing record."""

    key: DiffKey
    change: ChangeKind
    desired: CanonicalRecord | None = None
    existing: CanonicalRecord | None = None


@dataclass
class ZoneChanges:
    """All diff entries for one zone."""

    zone: str
    entries: list[DiffEntry] = field(default_factory=list)

    def _of(self, change: ChangeKind) -> list[DiffEntry]:
        return [entry for entry in self.entries if entry.change is change]

    @property
    def creates(self) -> list[DiffEntry]:
        return self._of(ChangeKind.CREATE)

    @property
    def deletes(self) -> list[DiffEntry]:
        return self._of(ChangeKind.DELETE)

    @property
    def modifies(self) -> list[DiffEntry]:
        return self._of(ChangeKind.MODIFY)

    @property
    def unchanged(self) -> list[DiffEntry]:
        return self._of(ChangeKind.UNCHANGED)

    def iter_changes(self) -> Iterator[DiffEntry]:
        """Yield the entries that require a remote write."""
        for entry in self.entries:
            if entry.change is not ChangeKind.UNCHANGED:
                yield entry

    def has_changes(self) -> bool:
        """Return True when the diff contains meaningful changes."""
        return any(True for _ in self.iter_changes())

    def total(self) -> int:
        """Return the total number of change entries."""
        return sum(1 for _ in self.iter_changes())


class HostingdeCtlError(Exception):
    """Base exception for hostingde-ctl."""


class ConfigError(HostingdeCtlError):
    """Raised when configuration is missing or invalid."""


class ValidationError(HostingdeCtlError):
    """Raised when desired-state YAML is invalid."""


class ZoneLookupError(HostingdeCtlError, LookupError):
    """Raised when a zone or zone config does not match exactly once."""


class ConversionError(HostingdeCtlError):
    """Raised when a record cannot be mapped between representations."""


class DiffError(HostingdeCtlError):
    """Raised when the record sets to compare are contradictory."""


class ApiError(HostingdeCtlError):
    """Raised when the hosting.de API call fails."""


class ApplyError(HostingdeCtlError):
    """Raised when a zone update fails."""
