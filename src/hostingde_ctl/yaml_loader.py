"""Load and validate desired-state YAML files."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml
from jinja2 import Environment, FileSystemLoader, StrictUndefined
from pydantic import BaseModel, Field, field_validator

from .config import AppConfig
from .models import HOSTNAME_KINDS, CanonicalRecord, ConversionError, RecordKind, ValidationError


class RecordSpec(BaseModel):
    """Schema for a desired DNS record."""

    name: str
    type: str
    value: str | None = None
    values: list[str] = Field(default_factory=list, description="TXT strings")
    ttl: int | None = Field(default=None, ge=0)
    priority: int | None = Field(default=None, ge=0, description="Priority for MX/SRV records")

    @field_validator("type")
    @classmethod
    def _known_type(cls, value: str) -> str:
        """Normalise RR type to uppercase and reject unknown types."""
        try:
            return RecordKind.parse(value).value
        except ConversionError as exc:
            raise ValueError(str(exc)) from exc


class ZoneSpec(BaseModel):
    """Schema for the YAML document."""

    zone: str | None = None
    default_ttl: int | None = Field(default=None, ge=0)
    records: list[RecordSpec]
    ignore: list[str] = Field(default_factory=list)


@dataclass
class DesiredZone:
    """Desired zone material produced from YAML."""

    zone: str
    records: list[CanonicalRecord] = field(default_factory=list)
    ignore: list[str] = field(default_factory=list)
    default_ttl: int | None = None


def _normalise_owner(name: str, origin: str) -> str:
    """Return the absolute owner name (no trailing dot) for a possibly relative name."""
    stripped = name.strip()
    if stripped in {"", "@", "."}:
        return origin
    if stripped.endswith("."):
        return stripped[:-1]
    return f"{stripped}.{origin}"


def _absolute_target(value: str, origin: str) -> str:
    """Resolve a domain-name target relative to the origin."""
    cleaned = value.strip()
    if cleaned.endswith("."):
        return cleaned
    if cleaned == "@":
        return f"{origin}."
    return f"{cleaned}.{origin}."


def _int_field(record: RecordSpec, label: str, raw: str) -> int:
    try:
        return int(raw)
    except ValueError as exc:
        raise ValidationError(f"{record.type} record {record.name}: {label} must be an integer, got {raw!r}.") from exc


def _build_record(record: RecordSpec, origin: str, ttl: int) -> CanonicalRecord:
    """Turn a validated record entry into a canonical record."""
    kind = RecordKind(record.type)
    owner = _normalise_owner(record.name, origin)
    if kind is RecordKind.TXT:
        values = list(record.values)
        if record.value is not None:
            values.insert(0, record.value)
        if not values:
            raise ValidationError(f"TXT record {record.name} needs 'value' or 'values'.")
        return CanonicalRecord(name=owner, kind=kind, ttl=ttl, target=values[0], txt_values=tuple(values))

    if record.value is None:
        raise ValidationError(f"{kind.value} record {record.name} needs a 'value'.")
    value = record.value.strip()

    if kind in {RecordKind.MX, RecordKind.SRV} and record.priority is None:
        raise ValidationError(f"{kind.value} record {record.name} needs a 'priority'.")
    if kind is RecordKind.MX:
        return CanonicalRecord(
            name=owner,
            kind=kind,
            ttl=ttl,
            target=_absolute_target(value, origin),
            mx_preference=record.priority,
        )
    if kind is RecordKind.SRV:
        parts = value.split()
        if len(parts) != 3:
            raise ValidationError("SRV record value must include weight, port, and target.")
        return CanonicalRecord(
            name=owner,
            kind=kind,
            ttl=ttl,
            target=_absolute_target(parts[2], origin),
            srv_priority=record.priority,
            srv_weight=_int_field(record, "weight", parts[0]),
            srv_port=_int_field(record, "port", parts[1]),
        )
    if kind is RecordKind.CAA:
        parts = value.split(None, 2)
        if len(parts) != 3:
            raise ValidationError("CAA record value must include flag, tag, and value.")
        return CanonicalRecord(
            name=owner,
            kind=kind,
            ttl=ttl,
            target=parts[2].strip('"'),
            caa_flag=_int_field(record, "flag", parts[0]),
            caa_tag=parts[1],
        )
    if kind in HOSTNAME_KINDS:
        value = _absolute_target(value, origin)
    return CanonicalRecord(name=owner, kind=kind, ttl=ttl, target=value)


def _render_yaml(path: Path, extra_context: dict[str, Any] | None = None) -> str:
    """Render a YAML file through Jinja2."""
    env = Environment(
        loader=FileSystemLoader(str(path.parent)),
        undefined=StrictUndefined,
        autoescape=False,
        keep_trailing_newline=True,
    )
    template = env.get_template(path.name)
    context = {"env": os.environ}
    if extra_context:
        context.update(extra_context)
    return template.render(**context)


def load_desired_zone(
    path: Path,
    config: AppConfig,
    zone_hint: str | None = None,
    template_vars: dict[str, Any] | None = None,
) -> DesiredZone:
    """Load a desired zone YAML and turn it into canonical records."""
    rendered = _render_yaml(path, template_vars)
    try:
        data = yaml.safe_load(rendered) or {}
    except yaml.YAMLError as exc:  # noqa: BLE001
        raise ValidationError(f"Failed to parse YAML: {exc}") from exc

    try:
        spec = ZoneSpec(**data)
    except Exception as exc:  # noqa: BLE001
        raise ValidationError(f"YAML validation error: {exc}") from exc

    origin = (spec.zone or zone_hint or "").strip().rstrip(".").lower()
    if not origin:
        raise ValidationError("Zone name is required via YAML 'zone' or --zone flag.")

    default_ttl = config.default_record_ttl if spec.default_ttl is None else spec.default_ttl
    records = [
        _build_record(record, origin, default_ttl if record.ttl is None else record.ttl)
        for record in spec.records
    ]
    return DesiredZone(zone=origin, records=records, ignore=spec.ignore, default_ttl=default_ttl)
