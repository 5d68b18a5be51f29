"""Command-line interface for ordergraph-core."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from artifacts import generate_all_artifacts
from artifacts.store import StoreError
from ordering.detect import stale_reasons
from ordering.pipeline import run_sort
from rules.config import ConfigError, load_config
from scan.manifest import ManifestError
from scan.project import discover_units, open_store
from verify.verify import verify_orders


def _add_common_paths(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "root",
        nargs="?",
        default=".",
        help="Project root (default: .)",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="ordergraph")
    subparsers = parser.add_subparsers(dest="command", required=True)

    sort_parser = subparsers.add_parser(
        "sort", help="Sort units and write the new priorities"
    )
    _add_common_paths(sort_parser)
    sort_parser.add_argument(
        "--force",
        action="store_true",
        help="Sort even when the live priorities already satisfy every rule",
    )

    check_parser = subparsers.add_parser(
        "check", help="Exit 1 when a sort would be needed"
    )
    _add_common_paths(check_parser)

    verify_parser = subparsers.add_parser(
        "verify", help="Verify live priorities against declared rules"
    )
    _add_common_paths(verify_parser)

    cache_parser = subparsers.add_parser("cache", help="Write the runtime order cache")
    _add_common_paths(cache_parser)
    cache_parser.add_argument(
        "--out-dir",
        default=None,
        help="Output directory for the order cache (default: config output dir)",
    )

    return parser


def _resolve_output_dir(out_dir: str | None) -> Path | None:
    if out_dir is None:
        return None
    return Path(out_dir).expanduser().resolve()


def _handle_sort(root: Path, *, force: bool) -> int:
    config = load_config(root)
    units = discover_units(root, config)
    store = open_store(root, units, config)

    report = run_sort(units, store, force=force)
    if not report.sorted:
        sys.stdout.write("Doesn't need to sort\n")
        return 0

    store.save()
    for change in report.changes:
        sys.stdout.write(f"{change.module_id}: {change.previous} -> {change.assigned}\n")
    for diagnostic in report.diagnostics:
        if diagnostic.severity != "info":
            sys.stderr.write(f"{diagnostic.location()}: {diagnostic.message}\n")
    generate_all_artifacts(root=root, units=units, store=store, config=config, report=report)
    return 0


def _handle_check(root: Path) -> int:
    config = load_config(root)
    units = discover_units(root, config)
    store = open_store(root, units, config)

    reasons = list(stale_reasons(units, store))
    for reason in reasons:
        sys.stderr.write(f"{reason}\n")
    return 1 if reasons else 0


def _handle_verify(root: Path) -> int:
    config = load_config(root)
    units = discover_units(root, config)
    store = open_store(root, units, config)

    result = verify_orders(units, store)
    if not result.ok:
        for mismatch in result.fixed_mismatches:
            sys.stderr.write(
                f"fixed: {mismatch.module_id} declares {mismatch.fixed_order} "
                f"but is at {mismatch.actual}\n"
            )
        for violation in result.ordering_violations:
            sys.stderr.write(f"ordering: {violation.describe()}\n")
        return 1
    return 0


def _handle_cache(root: Path, out_dir: str | None) -> int:
    config = load_config(root)
    units = discover_units(root, config)
    store = open_store(root, units, config)

    generate_all_artifacts(
        root=root,
        units=units,
        store=store,
        out_dir=_resolve_output_dir(out_dir),
        config=config,
    )
    return 0


def _configure_logging(root: Path) -> None:
    try:
        level = load_config(root).logging_level
    except ConfigError:
        level = logging.WARNING
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    root = Path(args.root).expanduser().resolve()
    _configure_logging(root)

    try:
        if args.command == "sort":
            return _handle_sort(root, force=args.force)

        if args.command == "check":
            return _handle_check(root)

        if args.command == "verify":
            return _handle_verify(root)

        if args.command == "cache":
            return _handle_cache(root, args.out_dir)
    except (ConfigError, ManifestError, StoreError) as exc:
        sys.stderr.write(f"error: {exc}\n")
        return 2

    raise AssertionError


if __name__ == "__main__":
    raise SystemExit(main())
