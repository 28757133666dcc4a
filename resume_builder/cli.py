"""``resume-builder`` operator CLI."""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import List, Optional

import yaml
from rich.console import Console
from rich.table import Table

from . import __version__
from .config import PRIMARY_DATA_FILE, Settings, get_pii_directory, load_settings, resolve_log_level
from .domain.cvdata import validate_cv_data
from .errors import ResumeBuilderError
from .multi_resume.manager import MultiResumeManager
from .multi_resume.models import ResumeListOptions, ScanResult
from .observability import configure_logging
from .storage.file_system_manager import FileSystemManager
from .storage.unified_file_manager import BACKUPS_DIR, DIFFS_DIR, UnifiedFileManager

console = Console()
logger = logging.getLogger(__name__)

_SKIPPED_DIRS = {BACKUPS_DIR, DIFFS_DIR}


def _print_scan(result: ScanResult) -> None:
    table = Table(title="Index scan", show_header=True, header_style="bold cyan")
    table.add_column("Scanned", justify="right")
    table.add_column("Added", justify="right")
    table.add_column("Updated", justify="right")
    table.add_column("Removed", justify="right")
    table.add_row(str(result.scanned), str(result.added), str(result.updated), str(result.removed))
    console.print(table)
    for error in result.errors:
        console.print(f"⚠️ {error}", style="yellow")


def cmd_init(settings: Settings, args: argparse.Namespace) -> int:
    manager = MultiResumeManager(settings.pii_path)
    result = manager.initialize()
    console.print(f"✓ Multi-resume tree ready at {manager.resumes_dir}", style="green")
    _print_scan(result)
    return 0


def cmd_scan(settings: Settings, args: argparse.Namespace) -> int:
    result = MultiResumeManager(settings.pii_path).scan_and_update_index()
    _print_scan(result)
    return 1 if result.errors else 0


def _yaml_files(root: Path) -> List[Path]:
    return sorted(
        path
        for path in root.rglob("*")
        if path.is_file()
        and path.suffix in (".yml", ".yaml")
        and not _SKIPPED_DIRS.intersection(path.relative_to(root).parts[:-1])
    )


def cmd_health(settings: Settings, args: argparse.Namespace) -> int:
    """Parse every YAML file under the data root."""
    root = get_pii_directory(settings.pii_path)
    failures = 0
    checked = 0

    for path in _yaml_files(root):
        checked += 1
        relative = path.relative_to(root).as_posix()
        try:
            with open(path, encoding="utf-8") as f:
                document = yaml.safe_load(f)
        except (yaml.YAMLError, UnicodeDecodeError) as exc:
            failures += 1
            console.print(f"❌ {relative}: {exc}", style="red", markup=False)
            continue

        if path.name == PRIMARY_DATA_FILE:
            for problem in validate_cv_data(document):
                console.print(f"⚠️ {relative}: {problem}", style="yellow", markup=False)
        if args.verbose:
            console.print(f"✓ {relative}", style="dim")

    if failures:
        console.print(f"{failures} of {checked} YAML files are invalid", style="red")
        return 1
    console.print(f"✓ {checked} YAML files parsed cleanly", style="green")
    return 0


def cmd_status(settings: Settings, args: argparse.Namespace) -> int:
    manager = FileSystemManager(settings.pii_path, changelog_limit=settings.changelog_limit)
    stats = manager.get_file_stats()

    table = Table(title=f"{PRIMARY_DATA_FILE} status", show_header=True, header_style="bold cyan")
    table.add_column("File")
    table.add_column("Exists")
    table.add_column("Size", justify="right")
    table.add_column("Modified")
    table.add_row(
        "main",
        "yes" if stats.original_exists else "no",
        str(stats.original_size or "-"),
        stats.to_dict()["originalModified"] or "-",
    )
    table.add_row(
        "temp",
        "yes" if stats.temp_exists else "no",
        str(stats.temp_size or "-"),
        stats.to_dict()["tempModified"] or "-",
    )
    console.print(table)

    if stats.temp_exists:
        console.print("Uncommitted changes pending. Run `resume-builder commit` or `discard`.", style="yellow")

    entries = manager.get_recent_changelog(args.limit)
    if entries:
        log_table = Table(title="Recent changes", show_header=True, header_style="bold cyan")
        log_table.add_column("Timestamp")
        log_table.add_column("Action")
        log_table.add_column("Description")
        for entry in entries:
            log_table.add_row(entry.timestamp, entry.action, entry.description or entry.message or "")
        console.print(log_table)
    return 0


def cmd_commit(settings: Settings, args: argparse.Namespace) -> int:
    entry = FileSystemManager(settings.pii_path, changelog_limit=settings.changelog_limit).commit_changes()
    console.print(f"✓ {entry.description}", style="green")
    return 0


def cmd_discard(settings: Settings, args: argparse.Namespace) -> int:
    entry = FileSystemManager(settings.pii_path, changelog_limit=settings.changelog_limit).discard_changes()
    console.print(f"✓ {entry.description}", style="green")
    return 0


def cmd_cleanup(settings: Settings, args: argparse.Namespace) -> int:
    keep = settings.backup_keep if args.keep is None else args.keep
    primary = FileSystemManager(settings.pii_path).cleanup_backups(keep)
    files = UnifiedFileManager(settings.pii_path)
    backups = files.cleanup_backups(keep)
    diffs = files.cleanup_diffs(keep)
    console.print(
        f"✓ Removed {primary} data.yml backups, {backups} file backups and {diffs} diff records "
        f"(kept newest {keep})",
        style="green",
    )
    return 0


def cmd_list(settings: Settings, args: argparse.Namespace) -> int:
    result = MultiResumeManager(settings.pii_path).list_resume_versions(
        ResumeListOptions(position=args.position, company=args.company, status=args.status)
    )
    if not result.versions:
        console.print("No resume versions found.", style="dim")
        return 0

    table = Table(title=f"Resume versions ({result.total})", show_header=True, header_style="bold cyan")
    table.add_column("Position")
    table.add_column("Company")
    table.add_column("Date")
    table.add_column("Status")
    table.add_column("Last modified")
    for version in result.versions:
        table.add_row(
            version.position,
            version.company or "(default)",
            version.date,
            version.metadata.status,
            version.metadata.last_modified,
        )
    console.print(table)
    return 0


def cmd_serve(settings: Settings, args: argparse.Namespace) -> int:
    import uvicorn

    from .web.app import create_app

    uvicorn.run(create_app(settings), host=args.host or settings.host, port=args.port or settings.port)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="resume-builder",
        description="Resume Builder - versioned YAML resume data management",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "--pii-path",
        default=None,
        help="Data directory holding data.yml (default: PII_PATH or config)",
    )
    parser.add_argument(
        "--config",
        "-c",
        default=None,
        help="Path to configuration file (default: config/config.yaml + config.local.yaml)",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        default=False,
        help="Verbose output (debug logging, per-file health results)",
    )

    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("init", help="Create the multi-resume tree and index").set_defaults(func=cmd_init)
    sub.add_parser("health", help="Check that every YAML file parses").set_defaults(func=cmd_health)
    sub.add_parser("scan", help="Rebuild the resume index from disk").set_defaults(func=cmd_scan)

    status = sub.add_parser("status", help="Show data.yml state and recent changes")
    status.add_argument("--limit", type=int, default=10, help="Changelog entries to show")
    status.set_defaults(func=cmd_status)

    sub.add_parser("commit", help="Commit pending data.yml changes").set_defaults(func=cmd_commit)
    sub.add_parser("discard", help="Discard pending data.yml changes").set_defaults(func=cmd_discard)

    cleanup = sub.add_parser("cleanup", help="Prune old backups and diff records")
    cleanup.add_argument("--keep", type=int, default=None, help="How many of each to keep")
    cleanup.set_defaults(func=cmd_cleanup)

    listing = sub.add_parser("list", help="List resume versions")
    listing.add_argument("--position", default=None)
    listing.add_argument("--company", default=None)
    listing.add_argument("--status", choices=("draft", "active", "submitted", "archived"), default=None)
    listing.set_defaults(func=cmd_list)

    serve = sub.add_parser("serve", help="Run the HTTP API")
    serve.add_argument("--host", default=None)
    serve.add_argument("--port", type=int, default=None)
    serve.set_defaults(func=cmd_serve)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    from dotenv import load_dotenv

    load_dotenv()

    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        settings = load_settings(args.config)
        if args.pii_path:
            settings.pii_path = args.pii_path
        configure_logging(logging.DEBUG if args.verbose else resolve_log_level(settings))
        return args.func(settings, args)
    except ResumeBuilderError as exc:
        console.print(f"❌ {exc.message}", style="red", markup=False)
        return 1
    except OSError as exc:
        logger.debug("Command failed", exc_info=True)
        console.print(f"❌ {exc}", style="red", markup=False)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
