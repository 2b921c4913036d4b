"""High-level orchestration for hostingde-ctl."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Sequence

from .config import AppConfig
from .corrections import execute_corrections
from .models import CanonicalRecord, HostingdeCtlError
from .normalize import normalize_records
from .provider import HostingdeProvider, ZonePlan
from .yaml_loader import DesiredZone, load_desired_zone

LOG = logging.getLogger("hostingde_ctl")


@dataclass
class PlanResult:
    """Holds everything needed to apply a change to one zone.

    When planning failed, ``error`` is set and ``plan`` is None.
    """

    zone: str
    desired: DesiredZone | None = None
    plan: ZonePlan | None = None
    error: HostingdeCtlError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def has_changes(self) -> bool:
        return self.plan is not None and bool(self.plan.corrections)


@dataclass
class ApplyResult:
    """Outcome of applying one zone's corrections."""

    zone: str
    executed: int
    error: HostingdeCtlError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


class ZoneController:
    """Coordinates plan/apply operations."""

    def __init__(self, config: AppConfig, provider: HostingdeProvider):
        """Store configuration and the provider used for every zone."""
        self.config = config
        self.provider = provider

    def plan_zone(
        self,
        desired_path: Path,
        zone: str | None = None,
        template_vars: dict[str, Any] | None = None,
    ) -> PlanResult:
        """Compute the corrections between desired YAML and the live zone.

        Loading, lookup, conversion and diff errors are recorded on the result
        instead of raised, so one broken zone never hides the others.
        """
        label = zone or str(desired_path)
        desired = None
        try:
            desired = load_desired_zone(desired_path, self.config, zone_hint=zone, template_vars=template_vars)
            label = desired.zone
            plan = self.provider.plan_zone(desired.zone, desired.records, ignore=desired.ignore)
        except HostingdeCtlError as exc:
            LOG.error("Planning failed for %s: %s", label, exc)
            return PlanResult(zone=label, desired=desired, error=exc)
        return PlanResult(zone=desired.zone, desired=desired, plan=plan)

    def plan(
        self,
        desired_paths: Sequence[Path],
        zone: str | None = None,
        template_vars: dict[str, Any] | None = None,
    ) -> list[PlanResult]:
        """Plan every desired file; zones are independent and run in parallel."""
        if len(desired_paths) == 1:
            return [self.plan_zone(desired_paths[0], zone, template_vars)]
        with ThreadPoolExecutor(max_workers=self.config.max_workers) as pool:
            return list(pool.map(lambda path: self.plan_zone(path, zone, template_vars), desired_paths))

    def apply(self, plans: Sequence[PlanResult], assume_yes: bool = False) -> list[ApplyResult]:
        """Execute the corrections of every changed zone.

        Zones that failed to plan are skipped. A failure stops the remaining
        corrections of its own zone only.
        """
        changed = [plan for plan in plans if plan.has_changes()]
        if not changed:
            LOG.info("No changes detected; nothing to apply.")
            return []
        if not assume_yes and not _confirm([plan.zone for plan in changed]):
            LOG.info("Apply aborted by user.")
            return []
        with ThreadPoolExecutor(max_workers=self.config.max_workers) as pool:
            results = list(pool.map(_apply_zone, changed))
        for result in results:
            if result.ok:
                LOG.info("Apply complete for %s", result.zone)
        return results

    def pull(self, zone: str) -> list[CanonicalRecord]:
        """Fetch and normalise the current records of a zone."""
        return normalize_records(self.provider.get_zone_records(zone))

    def nameservers(self, zone: str) -> list[str]:
        """Return the NS targets of a zone."""
        return self.provider.get_nameservers(zone)


def configure_logging(level: str) -> None:
    """Configure logging output."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )


def _apply_zone(plan: PlanResult) -> ApplyResult:
    """Run one zone's corrections in order, recording the first failure."""
    corrections = plan.plan.corrections
    try:
        executed = execute_corrections(corrections)
    except HostingdeCtlError as exc:
        done = sum(1 for correction in corrections if correction.action.applied)
        LOG.error("Apply failed for %s after %s corrections: %s", plan.zone, done, exc)
        return ApplyResult(zone=plan.zone, executed=done, error=exc)
    return ApplyResult(zone=plan.zone, executed=executed)


def _confirm(zones: list[str]) -> bool:
    """Prompt the operator to confirm apply."""
    prompt = f"Apply changes to {', '.join(zones)}? [y/N]: "
    response = input(prompt).strip().lower()  # noqa: S322
    return response in {"y", "yes"}
