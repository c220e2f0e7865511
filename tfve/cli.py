"""CLI entry point for tfve."""

from __future__ import annotations

import argparse
import sys

import requests

from tfve import __version__
from tfve.client import TerraformClient
from tfve.discovery import discover_workspaces, format_workspaces
from tfve.errors import TfveError
from tfve.export_list import read_export_list
from tfve.logging_utils import setup_logging
from tfve.models import DEFAULT_BASE_URL, ENV_BASE_URL, ENV_ORGANIZATION, ENV_TOKEN, ConnectionSettings
from tfve.outputs import format_outputs, load_outputs
from tfve.sync import Synchronizer


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="tfve",
        description="Export Terraform output values to variables of HCP Terraform workspaces.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=f"""
Environment:
    {ENV_ORGANIZATION} - Organization name (required)
    {ENV_TOKEN}             - API token (required)
    {ENV_BASE_URL}          - API base URL (default: {DEFAULT_BASE_URL})

Export list format (one variable per line, '#' starts a comment):
    <output name>,<variable name>[,<description>]

Examples:
    # Export outputs to two workspaces, refusing to overwrite
    terraform output -json > outputs.json
    tfve -t network-prod,app-prod outputs.json export_list.txt

    # Overwrite variables that already exist
    tfve -t app-prod --allow-update outputs.json export_list.txt

    # Show the workspaces visible to the token
    tfve --show-workspaces
""",
    )
    parser.add_argument("output_values_file", nargs="?", help="Output values file (`terraform output -json`)")
    parser.add_argument("export_list", nargs="?", help="Export list file")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "-b", "--base-url", default=None, help=f"API base URL (default: from {ENV_BASE_URL} env or {DEFAULT_BASE_URL})"
    )
    parser.add_argument(
        "-t",
        "--target-workspaces",
        default=None,
        metavar="NAME1,NAME2,...",
        help="Comma separated workspace names. Required unless a --show-* flag is set.",
    )
    parser.add_argument("-u", "--allow-update", action="store_true", help="Allow update of existing variables")
    parser.add_argument("--dry-run", action="store_true", help="Show what would be done without making changes")
    parser.add_argument("-w", "--show-workspaces", action="store_true", help="Show available workspaces and exit")
    parser.add_argument("-s", "--show-outputs", action="store_true", help="Show loaded output values and exit")
    parser.add_argument(
        "--json", action="store_true", dest="json_output", help="Output results as JSON lines (to stderr)"
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    return parser


def validate_args(parser: argparse.ArgumentParser, args: argparse.Namespace) -> None:
    if args.show_workspaces:
        conflicting = [
            flag
            for flag, value in (
                ("OUTPUT_VALUES_FILE", args.output_values_file),
                ("--target-workspaces", args.target_workspaces),
                ("--allow-update", args.allow_update),
                ("--show-outputs", args.show_outputs),
            )
            if value
        ]
        if conflicting:
            parser.error(f"--show-workspaces cannot be used with {', '.join(conflicting)}")
        return
    if args.show_outputs:
        if not args.output_values_file:
            parser.error("--show-outputs requires OUTPUT_VALUES_FILE")
        return
    if not args.output_values_file or not args.export_list:
        parser.error("OUTPUT_VALUES_FILE and EXPORT_LIST are required")
    if not args.target_workspaces:
        parser.error("--target-workspaces is required")
    if not parse_workspace_names(args.target_workspaces):
        parser.error("--target-workspaces has no workspace names")


def parse_workspace_names(value: str) -> list[str]:
    """Split the comma separated workspace list, keeping order and dropping blanks and repeats."""
    names: list[str] = []
    for name in value.split(","):
        name = name.strip()
        if name and name not in names:
            names.append(name)
    return names


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    validate_args(parser, args)

    # Setup logging
    logger = setup_logging(json_mode=args.json_output, verbose=args.verbose)

    if args.show_outputs:
        try:
            outputs = load_outputs(args.output_values_file)
        except (OSError, TfveError) as e:
            logger.error(str(e))
            return 1
        print(format_outputs(outputs))
        return 0

    # Get settings
    try:
        settings = ConnectionSettings.from_env(base_url=args.base_url)
    except KeyError as e:
        logger.error(f"{e.args[0]} environment variable is not set.")
        return 1

    client = TerraformClient(settings, dry_run=args.dry_run)

    if args.show_workspaces:
        try:
            workspaces = discover_workspaces(client)
        except requests.RequestException as e:
            logger.error(f"Failed to list workspaces: {e}")
            return 1
        print(format_workspaces(workspaces))
        return 0

    # Read inputs; nothing is sent if either file is broken
    try:
        outputs = load_outputs(args.output_values_file)
        directives = read_export_list(args.export_list)
    except (OSError, TfveError) as e:
        logger.error(str(e))
        return 1

    if not directives:
        logger.warning("No entry found in export list.")
        return 0

    workspace_names = parse_workspace_names(args.target_workspaces)
    logger.info(
        f"Exporting {len(directives)} variables from {len(outputs)} outputs "
        f"to {len(workspace_names)} workspaces in '{settings.organization}'"
    )
    if args.dry_run:
        logger.info("DRY-RUN MODE - no changes will be made")

    synchronizer = Synchronizer(client, outputs, allow_update=args.allow_update)
    try:
        synchronizer.run(directives, workspace_names)
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 130

    # Summary
    results = synchronizer.results
    created = sum(1 for r in results if r.action in ("created", "would_create"))
    updated = sum(1 for r in results if r.action in ("updated", "would_update"))
    conflicts = sum(1 for r in results if r.action == "conflict")
    missing = sum(1 for r in results if r.action == "missing_output")
    errors = sum(1 for r in results if r.action == "error")

    logger.info(
        f"Done: {created} {'would be created' if args.dry_run else 'created'}, "
        f"{updated} {'would be updated' if args.dry_run else 'updated'}, "
        f"{conflicts} conflicts, {missing} missing outputs, {errors} errors"
    )

    # Exit code: non-zero if anything failed
    return 1 if synchronizer.failed else 0


if __name__ == "__main__":
    sys.exit(main())
