"""
Command-line interface for the item loader.

Provides CLI commands for offline runs and inspection:
- load: Run the pipeline against a JSON template table and save the result
- inspect: Print the clone request one definition file would produce
- gen-id: Print the internal id for one or more external ids
- verify-ledger: Check the last event of a run ledger
- config: Show configuration sources and resolved paths

Usage:
    item-loader load --templates templates/items.json [--mod-root PATH] [--output DIR]
    item-loader inspect db/items/coin01.json [--mod-root PATH]
    item-loader gen-id coin01 coin02
    item-loader verify-ledger 20260227T142301000000Z
    item-loader config

Environment Variables:
    ITEM_LOADER_MOD_ROOT: Mod root directory (default: current directory)
    ITEM_LOADER_LOG_LEVEL: Log level (default: INFO)
    ITEM_LOADER_LEDGER_ENABLED: Record run outcomes to the ledger (default: true)
"""

import argparse
import dataclasses
import json
import sys
from pathlib import Path

import yaml

from item_loader.config import PathSettings, config


def _paths_for(args: argparse.Namespace) -> PathSettings:
    """Return configured paths, with ``--mod-root`` applied when given."""
    mod_root = getattr(args, "mod_root", None)
    if mod_root:
        return dataclasses.replace(config.paths, mod_root=mod_root)
    return config.paths


def cmd_load(args: argparse.Namespace) -> int:
    """
    Load every definition under the mod root into a JSON item database.

    The run itself never fails on bad definitions; those are logged and
    counted.  A non-zero exit code means the run could not start (for
    example, the template table is unreadable) or crashed.

    Returns:
        0 on a completed run, 1 on error
    """
    from item_loader.bundles import check_bundle_files
    from item_loader.host import JsonItemDatabase, TemplateItemCloner
    from item_loader.ledger import JsonlRunLedger
    from item_loader.logging_setup import configure_logging
    from item_loader.pipeline import load_items
    from item_loader.sources import LocaleDirectory, ManifestFile

    configure_logging(config.logging)
    paths = _paths_for(args)

    try:
        database = JsonItemDatabase.from_file(args.templates)
        manifest = ManifestFile(paths.manifest_file)
        ledger = None
        if config.ledger.enabled and not args.no_ledger:
            ledger = JsonlRunLedger(paths.ledger_path)

        summary = load_items(
            paths.items_path,
            cloner=TemplateItemCloner(database),
            manifest=manifest,
            locales=LocaleDirectory(paths.locales_path),
            ledger=ledger,
            settings=config.defaults,
        )
        check_bundle_files(paths.bundles_path, manifest)

        output_dir = Path(args.output) if args.output else Path(paths.mod_root) / "build"
        database.save(output_dir)
    except Exception as e:
        print(f"Error loading items: {e}", file=sys.stderr)
        return 1

    print(
        f"Processed {summary.processed} definitions: "
        f"{summary.succeeded} created, {summary.failed} failed, {summary.skipped} skipped."
    )
    if ledger is not None:
        print(f"Run ledger: {ledger.path}")
    print(f"Item database written to {output_dir}")
    return 0


def cmd_inspect(args: argparse.Namespace) -> int:
    """
    Print the clone request for one definition file as YAML.

    Nothing is cloned; this is a dry run of the resolution steps.

    Returns:
        0 on success (including a skipped definition), 1 if the file is unreadable
    """
    from item_loader.pipeline import process_document
    from item_loader.sources import LocaleDirectory, ManifestFile

    paths = _paths_for(args)

    try:
        with open(args.file, encoding="utf-8-sig") as fh:
            raw = json.load(fh)
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        print(f"Error reading {args.file}: {e}", file=sys.stderr)
        return 1

    request = process_document(
        raw,
        manifest=ManifestFile(paths.manifest_file),
        locales=LocaleDirectory(paths.locales_path),
        settings=config.defaults,
    )
    if request is None:
        print(f"{args.file}: no _id field, definition would be skipped.")
        return 0

    print(yaml.safe_dump(dataclasses.asdict(request), sort_keys=False, allow_unicode=True), end="")
    return 0


def cmd_gen_id(args: argparse.Namespace) -> int:
    """Print ``<external_id> <internal_id>`` for each argument."""
    from item_loader.core.ids import generate_internal_id

    for external_id in args.external_ids:
        print(f"{external_id} {generate_internal_id(external_id)}")
    return 0


def cmd_verify_ledger(args: argparse.Namespace) -> int:
    """
    Verify the last event of a run ledger.

    Returns:
        0 if the ledger is ok or empty, 1 if it is corrupt
    """
    from item_loader.ledger import verify_run_ledger

    paths = _paths_for(args)
    result = verify_run_ledger(paths.ledger_path, args.run_id)

    if result.status == "corrupt":
        print(f"Ledger {args.run_id} is corrupt: {result.error_detail}", file=sys.stderr)
        return 1
    if result.status == "empty":
        print(f"Ledger {args.run_id} is empty.")
    else:
        print(f"Ledger {args.run_id} OK, last event: {result.last_event_id}")
    return 0


def cmd_config(args: argparse.Namespace) -> int:
    """Print where configuration was loaded from and the resolved paths."""
    from item_loader.config import get_config_status

    print(yaml.safe_dump(get_config_status(), sort_keys=False), end="")
    return 0


def _add_mod_root_argument(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--mod-root",
        help="Mod root directory (default: ITEM_LOADER_MOD_ROOT or current directory)",
    )


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser with all subcommands."""
    parser = argparse.ArgumentParser(
        prog="item-loader",
        description="Item Loader - deterministic item definitions for a host item table",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # load command
    load_parser = subparsers.add_parser(
        "load",
        help="Load item definitions into a JSON item database",
        description=(
            "Clone every definition under the mod's items directory from a JSON "
            "template table, then write items, handbook and locales to the output directory."
        ),
    )
    load_parser.add_argument(
        "--templates",
        "-t",
        required=True,
        help="Path to the template table (items.json) to clone from",
    )
    _add_mod_root_argument(load_parser)
    load_parser.add_argument("--output", "-o", help="Output directory (default: <mod-root>/build)")
    load_parser.add_argument(
        "--no-ledger",
        action="store_true",
        help="Do not record run outcomes to the ledger",
    )
    load_parser.set_defaults(func=cmd_load)

    # inspect command
    inspect_parser = subparsers.add_parser(
        "inspect",
        help="Print the clone request for one definition file",
    )
    inspect_parser.add_argument("file", help="Definition file to resolve")
    _add_mod_root_argument(inspect_parser)
    inspect_parser.set_defaults(func=cmd_inspect)

    # gen-id command
    gen_id_parser = subparsers.add_parser(
        "gen-id",
        help="Print the internal id for external ids",
    )
    gen_id_parser.add_argument("external_ids", nargs="+", metavar="EXTERNAL_ID")
    gen_id_parser.set_defaults(func=cmd_gen_id)

    # verify-ledger command
    verify_parser = subparsers.add_parser(
        "verify-ledger",
        help="Check the last event of a run ledger",
    )
    verify_parser.add_argument("run_id", help="Run id (ledger file stem)")
    _add_mod_root_argument(verify_parser)
    verify_parser.set_defaults(func=cmd_verify_ledger)

    # config command
    config_parser = subparsers.add_parser("config", help="Show configuration status")
    config_parser.set_defaults(func=cmd_config)

    return parser


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the CLI."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
