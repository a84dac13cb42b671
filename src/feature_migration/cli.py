"""Command line interface for Base44 to REST API migration.

Commands:
  register <name> <description> [usage...]   Register a new feature
  generate <featureId>                       Generate migration script
  status <featureId> <status>                Update a feature's status
  list                                       List all features
  stats                                      Show migration statistics
  scan                                       Scan codebase for Base44 usage
  check                                      Check for new Base44 usage (CI)
"""
from __future__ import annotations

import argparse
import os
import sys
from typing import Any, Dict, List, Optional

from .config import load_config
from .detector import Base44Detector, DirectoryFileLister, FileLister, FixedFileLister
from .models import FeaturePriority, FeatureStatus
from .notifications import FeatureChangeNotifier
from .patterns import SOURCE_EXTENSIONS
from .registry import FeatureRegistry
from .store import FeatureStore
from .utils import set_package_log_level, setup_logging


log = setup_logging(__name__)

# Commands that change the ledger and must be written back to the state file
MUTATING_COMMANDS = {"register", "generate", "status", "scan"}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="feature-migrate",
        description="Track and generate migrations from the Base44 SDK to the REST API",
    )
    parser.add_argument("--config", help="Path to configuration file (default: config.yaml)")
    parser.add_argument("--state-file", help="Feature ledger JSON file (overrides config)")
    parser.add_argument("--verbose", "-v", action="store_true", help="Show debug logging")
    sub = parser.add_subparsers(dest="command")

    register = sub.add_parser("register", help="Register a new feature")
    register.add_argument("name")
    register.add_argument("description")
    register.add_argument("base44_usage", nargs="*", metavar="usage", help="Base44 usage strings")

    generate = sub.add_parser("generate", help="Generate migration script")
    generate.add_argument("feature_id")

    status = sub.add_parser("status", help="Update a feature's migration status")
    status.add_argument("feature_id")
    status.add_argument("status", choices=[s.value for s in FeatureStatus])

    sub.add_parser("list", help="List all features")
    sub.add_parser("stats", help="Show migration statistics")

    for name, help_text in [
        ("scan", "Scan codebase for Base44 usage"),
        ("check", "Check for new Base44 usage (CI)"),
    ]:
        cmd = sub.add_parser(name, help=help_text)
        cmd.add_argument("--path", help="Directory to scan (overrides config)")

    return parser


def build_file_lister(scan_config: Dict[str, Any]) -> FileLister:
    files = scan_config.get("files") or []
    if files:
        return FixedFileLister(files)
    return DirectoryFileLister(scan_config.get("extensions") or SOURCE_EXTENSIONS)


def cmd_register(registry: FeatureRegistry, args: argparse.Namespace) -> int:
    feature_id = registry.register_feature({
        "name": args.name,
        "description": args.description,
        "base44_usage": args.base44_usage,
        "rest_endpoints": [],
        "dependencies": [],
        "priority": FeaturePriority.MEDIUM,
        "status": FeatureStatus.DETECTED,
    })
    print(f"✅ Registered feature: {args.name} ({feature_id})")
    return 0


def cmd_generate(registry: FeatureRegistry, args: argparse.Namespace) -> int:
    script = registry.generate_migration_script(args.feature_id)
    if script:
        print("Generated migration script:")
        print(script)
    else:
        if registry.get_feature(args.feature_id) is None:
            log.warning("Unknown feature id: %s", args.feature_id)
        print("❌ No suitable template found")
    return 0


def cmd_status(registry: FeatureRegistry, args: argparse.Namespace) -> int:
    if registry.get_feature(args.feature_id) is None:
        log.warning("Unknown feature id: %s", args.feature_id)
    registry.update_feature_status(args.feature_id, args.status)
    print(f"Feature {args.feature_id}: {args.status}")
    return 0


def cmd_list(registry: FeatureRegistry, args: argparse.Namespace) -> int:
    features = registry.get_features()
    if not features:
        print("No features registered")
        return 0

    rows = [
        (f.id, f.name, f.status.value, f.priority.value, f.created_at.split("T")[0])
        for f in features
    ]
    headers = ("id", "name", "status", "priority", "created")
    widths = [max(len(str(row[i])) for row in rows + [headers]) for i in range(len(headers))]

    print("  ".join(h.ljust(w) for h, w in zip(headers, widths)))
    print("  ".join("-" * w for w in widths))
    for row in rows:
        print("  ".join(str(v).ljust(w) for v, w in zip(row, widths)))
    return 0


def cmd_stats(registry: FeatureRegistry, args: argparse.Namespace) -> int:
    stats = registry.get_migration_stats()
    print("📊 Migration Statistics:")
    print(f"   Total Features: {stats.total}")
    print(f"   Migrated: {stats.migrated}")
    print(f"   In Progress: {stats.in_progress}")
    print(f"   Failed: {stats.failed}")
    print(f"   Pending: {stats.pending}")
    return 0


def cmd_scan(detector: Base44Detector, args: argparse.Namespace) -> int:
    detector.generate_migration_suggestions(args.path)
    return 0


def cmd_check(detector: Base44Detector, args: argparse.Namespace) -> int:
    clean = detector.check_for_new_usage(args.path)
    return 0 if clean else 1


REGISTRY_COMMANDS = {
    "register": cmd_register,
    "generate": cmd_generate,
    "status": cmd_status,
    "list": cmd_list,
    "stats": cmd_stats,
}

DETECTOR_COMMANDS = {
    "scan": cmd_scan,
    "check": cmd_check,
}


def dispatch(args: argparse.Namespace, config: Dict[str, Any]) -> int:
    state_file = args.state_file or config["registry"]["state_file"]
    store = FeatureStore(state_file)
    registry = FeatureRegistry(features=store.load())

    notifier = FeatureChangeNotifier(config.get("notifications"))
    if notifier.enabled:
        registry.on_feature_change(notifier)

    if args.command in REGISTRY_COMMANDS:
        exit_code = REGISTRY_COMMANDS[args.command](registry, args)
    else:
        scan_config = config["scan"]
        detector = Base44Detector(
            registry,
            file_lister=build_file_lister(scan_config),
            base_path=scan_config.get("base_path") or "src",
        )
        exit_code = DETECTOR_COMMANDS[args.command](detector, args)

    if args.command in MUTATING_COMMANDS and not store.save(registry.get_features()):
        log.error("Failed to save feature ledger to %s", state_file)
    return exit_code


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 0

    try:
        config = load_config(args.config)
        level = "DEBUG" if args.verbose else os.getenv("LOG_LEVEL", config["logging"]["level"])
        set_package_log_level(level)
        return dispatch(args, config)
    except KeyboardInterrupt:
        log.info("Interrupted by user")
        return 130
    except Exception as e:
        print(f"Error: {e}")
        log.debug("Full traceback:", exc_info=True)
        return 1


def run() -> None:
    sys.exit(main())


if __name__ == "__main__":  # pragma: no cover
    run()
