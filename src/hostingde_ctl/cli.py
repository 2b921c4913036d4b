"""Command-line entry point for hostingde-ctl."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

from .config import load_config
from .controller import ApplyResult, PlanResult, ZoneController, configure_logging
from .exporter import write_zone_state, zone_records_to_json, zone_records_to_yaml
from .models import HostingdeCtlError
from .registry import default_registry


def _build_parser() -> argparse.ArgumentParser:
    """Create the CLI parser."""
    parser = argparse.ArgumentParser(description="Manage hosting.de DNS zones declaratively.")
    parser.add_argument("--log-level", help="Override log level (default from config).")
    parser.add_argument("--provider", default="HOSTINGDE", help="Provider type to use.")

    subparsers = parser.add_subparsers(dest="command", required=True)
    plan_parser = subparsers.add_parser("plan", help="Show corrections without applying them.")
    _register_common_arguments(plan_parser)
    plan_parser.add_argument("--json", help="Optional path to write the planned updates as JSON.")

    apply_parser = subparsers.add_parser("apply", help="Apply corrections to the zones.")
    _register_common_arguments(apply_parser)
    apply_parser.add_argument("--yes", action="store_true", help="Skip confirmation prompt.")

    pull_parser = subparsers.add_parser("pull", help="Fetch current zone records from hosting.de.")
    pull_parser.add_argument("--zone", required=True, help="Zone name to pull.")
    pull_parser.add_argument("--output", help="Path to write the exported state (default stdout).")
    pull_parser.add_argument(
        "--format",
        choices=["yaml", "json"],
        default="yaml",
        help="Serialization format for the exported state.",
    )

    ns_parser = subparsers.add_parser("nameservers", help="List the NS records of a zone.")
    ns_parser.add_argument("--zone", required=True, help="Zone name to inspect.")

    return parser


def _register_common_arguments(subparser: argparse.ArgumentParser) -> None:
    """Register arguments shared by plan/apply."""
    subparser.add_argument(
        "--desired",
        required=True,
        action="append",
        help="Path to a desired-state YAML file. Can be repeated, one zone per file.",
    )
    subparser.add_argument("--zone", help="Zone name (overrides YAML when a single file is given).")
    subparser.add_argument(
        "-e",
        "--var",
        action="append",
        help="Template variable in KEY=VALUE form. Can be repeated.",
    )


def _parse_template_vars(values: list[str] | None) -> dict[str, str]:
    """Convert KEY=VALUE pairs into a dict."""
    result: dict[str, str] = {}
    if not values:
        return result
    for value in values:
        if "=" not in value:
            raise HostingdeCtlError(f"Invalid template var '{value}', expected KEY=VALUE.")
        key, val = value.split("=", 1)
        result[key] = val
    return result


def _emit_plans(plans: list[PlanResult], json_path: str | None = None) -> None:
    """Print each zone's corrections, optionally writing JSON.

    Zones that failed to plan are reported on stderr.
    """
    for plan in plans:
        if not plan.ok:
            print(f"Error: {plan.zone}: {plan.error}", file=sys.stderr)
            continue
        changes = plan.plan.changes
        print(f"Zone: {plan.zone}")
        print(
            f"Create: {len(changes.creates)}  Modify: {len(changes.modifies)}  "
            f"Delete: {len(changes.deletes)}  Unchanged: {len(changes.unchanged)}"
        )
        if not plan.has_changes():
            print("No changes detected.")
        for correction in plan.plan.corrections:
            print(correction.description)
    if json_path:
        payload = []
        for plan in plans:
            if not plan.ok:
                payload.append({"zone": plan.zone, "error": str(plan.error)})
                continue
            corrections = [
                {"description": correction.description, "update": correction.action.to_payload()}
                for correction in plan.plan.corrections
            ]
            payload.append({"zone": plan.zone, "corrections": corrections})
        Path(json_path).write_text(json.dumps(payload, indent=2), encoding="utf-8")
        print(f"Wrote plan JSON to {json_path}")


def _run_plan(controller: ZoneController, args: argparse.Namespace) -> list[PlanResult]:
    """Execute the plan command."""
    desired_paths = [Path(path) for path in args.desired]
    zone = args.zone if len(desired_paths) == 1 else None
    plans = controller.plan(desired_paths, zone=zone, template_vars=_parse_template_vars(args.var))
    _emit_plans(plans, getattr(args, "json", None))
    return plans


def _run_apply(controller: ZoneController, args: argparse.Namespace) -> tuple[list[PlanResult], list[ApplyResult]]:
    """Execute the apply command for every zone that planned cleanly."""
    plans = _run_plan(controller, args)
    results = controller.apply(plans, assume_yes=args.yes)
    for result in results:
        if not result.ok:
            print(f"Error: {result.zone}: {result.error}", file=sys.stderr)
    return plans, results


def _exit_on_failures(plans: list[PlanResult], results: list[ApplyResult] | None = None) -> None:
    """Exit with status 2 when any zone failed to plan or apply."""
    if any(not plan.ok for plan in plans) or any(not result.ok for result in results or []):
        sys.exit(2)


def _run_pull(controller: ZoneController, args: argparse.Namespace) -> None:
    """Execute the pull command."""
    zone = args.zone.rstrip(".")
    records = controller.pull(zone)
    if args.format == "json":
        content = zone_records_to_json(zone, records)
    else:
        content = zone_records_to_yaml(zone, records)
    if args.output:
        write_zone_state(Path(args.output), content)
        print(f"Wrote zone state to {args.output}")
    else:
        print(content)


def _run_nameservers(controller: ZoneController, args: argparse.Namespace) -> None:
    """Execute the nameservers command."""
    for nameserver in controller.nameservers(args.zone.rstrip(".")):
        print(nameserver)


def main() -> None:
    """CLI entry point."""
    parser = _build_parser()
    args = parser.parse_args()
    try:
        config = load_config()
        configure_logging(args.log_level or config.log_level)
        provider = default_registry().create(args.provider, config.provider_settings())
        controller = ZoneController(config, provider)
        if args.command == "plan":
            _exit_on_failures(_run_plan(controller, args))
        elif args.command == "apply":
            _exit_on_failures(*_run_apply(controller, args))
        elif args.command == "pull":
            _run_pull(controller, args)
        elif args.command == "nameservers":
            _run_nameservers(controller, args)
        else:  # pragma: no cover - argparse ensures we never reach here
            parser.error(f"Unsupported command {args.command}")
    except HostingdeCtlError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(2)
    except Exception as exc:  # noqa: BLE001
        print(f"Unexpected error: {exc}", file=sys.stderr)
        sys.exit(3)


if __name__ == "__main__":
    main()
