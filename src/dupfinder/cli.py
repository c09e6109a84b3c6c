#!/usr/bin/env python3
"""
dupfinder CLI — Command line interface for duplicate file and folder detection.
Sub-commands: scan (find, save, keep-one), report (Markdown from a saved scan), undo.
Every deletion is backed up first and can be reverted with `dupfinder undo restore`.
"""
from __future__ import annotations  # Enable postponed evaluation of annotations (PEP 563)
import argparse
import sys
import os
import time
from pathlib import Path
from typing import List, NoReturn, Optional
import logging

logging.basicConfig(
    level=logging.WARNING,
    format="%(levelname)-8s | %(name)-25s | %(message)s"
)

from dupfinder.core.config import AppConfig, load_config
from dupfinder.core.exceptions import DupFinderError
from dupfinder.core.models import (
    DispositionKind, DuplicateGroup, DuplicateKind, ScanOptions, ScanResult, SortOrder)
from dupfinder.commands import ScanCommand
from dupfinder.utils.convert_utils import ConvertUtils
from dupfinder.services.duplicate_service import DuplicateService
from dupfinder.services.disposition_service import DispositionExecutor
from dupfinder.services.report_service import MarkdownReporter
from dupfinder.services.snapshot_service import SnapshotService
from dupfinder.services.undo_service import UndoManager
from dupfinder.aliases import (
    KIND_ALIASES, KIND_CHOICES, KIND_HELP_TEXT,
    SORT_CHOICES, SORT_HELP_TEXT,
    EPILOG_TEXT
)


class CLIApplication:
    """Main CLI application controller."""

    def __init__(self):
        self.start_time: float = time.time()
        self.verbose: bool = False
        self.quiet: bool = False

        # Fix encoding for Windows consoles to prevent UnicodeEncodeError
        for stream in (sys.stdout, sys.stderr):
            if hasattr(stream, "reconfigure"):
                stream.reconfigure(encoding='utf-8')

    @staticmethod
    def build_parser() -> argparse.ArgumentParser:
        parser = argparse.ArgumentParser(
            prog="dupfinder",
            description="dupfinder — find duplicate files and folders, remove them safely",
            formatter_class=argparse.RawTextHelpFormatter,
            epilog=EPILOG_TEXT
        )

        # Options shared by every sub-command
        common = argparse.ArgumentParser(add_help=False)
        common.add_argument(
            "--quiet", "-q",
            action="store_true",
            help="Suppress non-essential output"
        )
        common.add_argument(
            "--verbose", "-v",
            action="store_true",
            help="Show detailed statistics and debug logging"
        )
        common.add_argument(
            "--config",
            type=str,
            metavar='FILE',
            help="Configuration file (TOML). Default: <data dir>/config.toml if present"
        )

        commands = parser.add_subparsers(dest="command", required=True, metavar="COMMAND")

        # ---- scan ----
        scan = commands.add_parser(
            "scan",
            parents=[common],
            formatter_class=argparse.RawTextHelpFormatter,
            help="Scan a directory for duplicates"
        )
        scan.add_argument(
            "directory",
            nargs="?",
            default=".",
            help="Directory to scan. Default: current directory"
        )
        scan.add_argument(
            "--all", "-a",
            action="store_true",
            dest="include_hidden",
            help="Include hidden files and directories (names starting with '.')"
        )
        scan.add_argument(
            "--follow-symlinks",
            action="store_true",
            help="Follow symbolic links to directories"
        )
        scan.add_argument(
            "--max-depth", "-d",
            type=int,
            default=None,
            metavar='N',
            help="Only report entries less than N levels below the root (entries in the root are level 0)"
        )
        scan.add_argument(
            "--ignore",
            nargs="+",
            default=[],
            type=str,
            metavar='PATTERN',
            help="Extra ignore patterns, gitignore syntax (space separated)"
        )
        scan.add_argument(
            "--kinds",
            nargs="+",
            choices=KIND_CHOICES,
            default=None,
            metavar='KIND',
            help=KIND_HELP_TEXT
        )
        scan.add_argument(
            "--output", "-o",
            type=str,
            metavar='FILE',
            help="Save the scan result as JSON (input for the 'report' command)"
        )
        scan.add_argument(
            "--keep-one",
            action="store_true",
            help="Keep one file per content group and delete the rest.\n"
                 "Always shows a preview; every deletion is backed up and can be undone."
        )
        scan.add_argument(
            "--force",
            action="store_true",
            help="Skip confirmation prompt when used with --keep-one (for automation/scripts)"
        )
        scan.add_argument(
            "--sort",
            choices=SORT_CHOICES,
            default=SortOrder.SHORTEST_PATH.value,
            type=str,
            help=SORT_HELP_TEXT
        )
        scan.add_argument(
            "--use-trash",
            action="store_true",
            help="With --keep-one: send originals to the system trash instead of unlinking them"
        )

        # ---- report ----
        report = commands.add_parser(
            "report",
            parents=[common],
            help="Render a Markdown report from a saved scan"
        )
        report.add_argument(
            "--input", "-i",
            required=True,
            type=str,
            metavar='FILE',
            help="Scan result saved with 'scan --output'"
        )
        report.add_argument(
            "--output", "-o",
            type=str,
            metavar='FILE',
            help="Report path. Default: report_output_path from config (./duplicate-report.md)"
        )

        # ---- undo ----
        undo = commands.add_parser("undo", help="List and revert recorded changes")
        undo_commands = undo.add_subparsers(dest="undo_command", required=True, metavar="ACTION")

        undo_list = undo_commands.add_parser("list", parents=[common], help="Show recent changes, newest first")
        undo_list.add_argument(
            "--limit", "-n",
            type=int,
            default=10,
            metavar='N',
            help="Number of entries to show. Default: 10"
        )

        undo_restore = undo_commands.add_parser("restore", parents=[common], help="Revert one change")
        undo_restore.add_argument("entry_id", metavar="ID", help="Entry id from 'undo list'")

        undo_discard = undo_commands.add_parser(
            "discard", parents=[common], help="Forget one change and delete its backup")
        undo_discard.add_argument("entry_id", metavar="ID", help="Entry id from 'undo list'")

        undo_clear = undo_commands.add_parser(
            "clear", parents=[common], help="Delete every backup and empty the history")
        undo_clear.add_argument(
            "--force",
            action="store_true",
            help="Skip confirmation prompt"
        )

        return parser

    def parse_args(self, args=None) -> argparse.Namespace:
        """Parse command-line arguments."""
        return self.build_parser().parse_args(args)

    def configure_logging(self) -> None:
        if self.verbose:
            level = logging.DEBUG
        elif self.quiet:
            level = logging.ERROR
        else:
            level = logging.WARNING
        logging.getLogger().setLevel(level)

    def load_config(self, args: argparse.Namespace) -> AppConfig:
        try:
            return load_config(args.config)
        except DupFinderError as e:
            self.error_exit(f"Configuration error: {e}")

    # ==================
    #  scan
    # ==================

    def validate_scan_args(self, args: argparse.Namespace, config: AppConfig) -> None:
        """Validate scan arguments before execution."""
        if args.force and not args.keep_one:
            self.error_exit("--force can only be used with --keep-one")
        if args.use_trash and not args.keep_one:
            self.error_exit("--use-trash can only be used with --keep-one")

        # Prevent interactive confirmation in non-TTY environments
        if args.keep_one and not args.force and config.confirm_destructive_actions:
            if not sys.stdin.isatty() or not sys.stdout.isatty():
                self.error_exit(
                    "Cannot request interactive confirmation in non-interactive session.\n"
                    "Use --force flag to proceed without confirmation when piping output or running in scripts."
                )

        root_path = Path(args.directory).resolve()
        if not root_path.exists():
            self.error_exit(f"Directory not found: {args.directory}")
        if not root_path.is_dir():
            self.error_exit(f"Path is not a directory: {args.directory}")

        if args.max_depth is not None and args.max_depth < 0:
            self.error_exit("Maximum depth cannot be negative")

        if args.keep_one and args.kinds and "content" not in args.kinds:
            self.warning("--keep-one only acts on content duplicates, but the content pass is not selected")

    def create_options(self, args: argparse.Namespace, config: AppConfig) -> ScanOptions:
        """Create ScanOptions from CLI arguments and configuration."""
        try:
            return ScanOptions(
                root_dir=str(Path(args.directory).resolve()),
                include_hidden=args.include_hidden,
                follow_symlinks=args.follow_symlinks,
                ignore_patterns=list(config.ignore_patterns) + list(args.ignore),
                ignore_file_names=list(config.ignore_file_names),
                max_depth=args.max_depth,
            )
        except ValueError as e:
            self.error_exit(f"Parameter error: {e}")

    def run_scan(self, options: ScanOptions, kinds: Optional[List[DuplicateKind]]):
        """Execute the scan workflow."""
        command = ScanCommand()
        scan, groups = command.execute(options, kinds)

        if self.verbose:
            stats = DuplicateService.calculate_stats(groups)
            print("\nScan Statistics:")
            print(f"  Files scanned:       {scan.total_files}")
            print(f"  Directories scanned: {len(scan.directories)}")
            print(f"  Total size:          {ConvertUtils.bytes_to_human(scan.total_size)}")
            print(f"  Walk time:           {scan.elapsed:.2f}s")
            for kind in DuplicateKind:
                print(f"  {kind.display_name + ' groups:':<21}{stats.groups_by_kind[kind]}")
            print(f"  Reclaimable:         {ConvertUtils.bytes_to_human(stats.reclaimable_bytes)}")

        return scan, groups

    def output_results(self, scan: ScanResult, groups: List[DuplicateGroup]) -> None:
        """Output duplicate groups as plain text in the order the grouper produced them."""
        if self.quiet:
            return

        if not groups:
            print("No duplicate groups found.")
            return

        total_entries = sum(len(g.files) for g in groups)
        print(f"\nFound {len(groups)} duplicate groups ({total_entries} entries)")

        for idx, group in enumerate(groups, 1):
            print(
                f"\n📁 Group {idx} | {group.kind.display_name} "
                f"| Size: {ConvertUtils.bytes_to_human(group.total_size)} "
                f"| Reclaimable: {ConvertUtils.bytes_to_human(group.reclaimable_bytes)} "
                f"| Files: {len(group.files)}")
            for record in group.files:
                print(f"   {record.path} [{ConvertUtils.bytes_to_human(record.size)}]")

        stats = DuplicateService.calculate_stats(groups)
        print(f"\nPotential space savings: {ConvertUtils.bytes_to_human(stats.reclaimable_bytes)}")

    def execute_keep_one(
            self,
            groups: List[DuplicateGroup],
            args: argparse.Namespace,
            config: AppConfig
    ) -> None:
        """Keep one file per content group, delete the rest. Always shows preview before deletion."""
        content_groups = [g for g in groups if g.kind == DuplicateKind.CONTENT]
        if not content_groups:
            if not self.quiet:
                print("No content duplicates found, nothing to delete.")
            return

        sort_order = SortOrder(args.sort)
        files_to_delete, space_saved = DuplicateService.keep_only_one_file_per_group(
            content_groups, sort_order)
        space_saved_str = ConvertUtils.bytes_to_human(space_saved)

        # Always show deletion preview before action (safety first)
        print()
        sort_reason = "shortest path" if sort_order == SortOrder.SHORTEST_PATH else "shortest filename"
        for idx, group in enumerate(content_groups, 1):
            print(f"📁 Group {idx} | Total size: {ConvertUtils.bytes_to_human(group.total_size)} "
                  f"| Files: {len(group.files)}")
            print("-" * 60)
            for record in group.files:
                disposition = group.disposition_for(record.path)
                tag = "[KEEP]" if disposition.kind == DispositionKind.KEEP else "[DEL] "
                print(f"   {tag} {record.path}")
                print(f"          Size: {ConvertUtils.bytes_to_human(record.size)}")
            print(f"          Reason: {sort_reason}")
            print()

        print("=" * 60)
        print(f"Summary: Keep 1 file per group ({len(content_groups)} files preserved, "
              f"{len(files_to_delete)} files deleted)")
        print(f"Total space saved: {space_saved_str}")
        print()

        if args.force:
            print("⚠️  WARNING: --force flag skips confirmation. Proceeding with deletion...")
        elif config.confirm_destructive_actions:
            response = input(f"Are you sure you want to delete {len(files_to_delete)} files? "
                             f"(backups are kept for undo) [y/N]: ")
            if response.strip().lower() not in ("y", "yes"):
                print("Deletion cancelled by user.")
                return

        undo_manager = UndoManager(str(config.data_dir))
        executor = DispositionExecutor(undo_manager, use_trash=args.use_trash or config.use_trash)

        print(f"\nDeleting {len(files_to_delete)} files...")
        outcomes = [o for o in executor.execute_batch(content_groups) if o.disposition.kind == DispositionKind.DELETE]
        failed = [o for o in outcomes if not o.success]
        deleted_count = len(outcomes) - len(failed)

        if self.verbose:
            for i, outcome in enumerate(outcomes, 1):
                status = "ok" if outcome.success else "FAILED"
                print(f"  [{i}/{len(outcomes)}] {os.path.basename(outcome.path)} {status}")

        if failed:
            print(f"\n⚠️  Partial success: {deleted_count}/{len(outcomes)} files deleted.")
            print(f"Failed to delete {len(failed)} file(s):")
            for outcome in failed[:5]:  # Show first 5 errors
                print(f"  • {os.path.basename(outcome.path)}: {outcome.error}")
            if len(failed) > 5:
                print(f"  ...and {len(failed) - 5} more files")
        else:
            print(f"✅ Successfully deleted {deleted_count} files.")
            print(f"Total space saved: {space_saved_str}")
        print("Backups are kept. Use 'dupfinder undo list' to review or revert.")

    def cmd_scan(self, args: argparse.Namespace, config: AppConfig) -> None:
        self.validate_scan_args(args, config)
        options = self.create_options(args, config)
        kinds = [KIND_ALIASES[k] for k in args.kinds] if args.kinds else None

        if not self.quiet:
            print(f"Scanning directory: {options.root_dir}")

        scan, groups = self.run_scan(options, kinds)

        if args.output:
            SnapshotService.save(groups, scan.root_dir, args.output)
            if not self.quiet:
                print(f"Scan result saved to: {args.output}")

        if args.keep_one:
            self.execute_keep_one(groups, args, config)
        else:
            self.output_results(scan, groups)

    # ==================
    #  report
    # ==================

    def cmd_report(self, args: argparse.Namespace, config: AppConfig) -> None:
        output_path = args.output or config.report_output_path
        groups, base_directory = SnapshotService.load(args.input)
        MarkdownReporter().write(groups, output_path, base_directory)
        if not self.quiet:
            print(f"✅ Report generated: {output_path} ({len(groups)} groups)")

    # ==================
    #  undo
    # ==================

    def cmd_undo(self, args: argparse.Namespace, config: AppConfig) -> None:
        manager = UndoManager(str(config.data_dir))

        if args.undo_command == "list":
            entries = manager.recent(args.limit)
            if not entries:
                print("No undo history.")
                return
            for entry in entries:
                when = entry.timestamp.strftime("%Y-%m-%d %H:%M:%S")
                print(f"{entry.id}  {when}  {entry.action.value:<6}  {entry.original_path}")
                if entry.backup_path:
                    print(f"{'':34}backup: {entry.backup_path}")
                if entry.destination_path:
                    print(f"{'':34}now at: {entry.destination_path}")

        elif args.undo_command == "restore":
            entry = manager.undo(args.entry_id)
            if not self.quiet:
                print(f"✅ Restored: {entry.original_path}")

        elif args.undo_command == "discard":
            entry = manager.discard(args.entry_id)
            if not self.quiet:
                print(f"Discarded undo entry {entry.id} ({entry.original_path})")

        elif args.undo_command == "clear":
            if not args.force:
                if not sys.stdin.isatty():
                    self.error_exit("Use --force to clear the undo history in non-interactive sessions.")
                response = input("Delete every backup and empty the undo history? [y/N]: ")
                if response.strip().lower() not in ("y", "yes"):
                    print("Cancelled by user.")
                    return
            count = manager.clear()
            if not self.quiet:
                print(f"Undo history cleared ({count} entries).")

    def warning(self, message: str) -> None:
        """Print a warning message to stderr."""
        if not self.quiet:
            print(f"⚠️  {message}", file=sys.stderr)

    @staticmethod
    def error_exit(message: str, code: int = 1) -> NoReturn:
        """Print error and exit."""
        print(f"❌ Error: {message}", file=sys.stderr)
        sys.exit(code)

    def run(self, argv=None) -> None:
        """Main entry point with conditional output behavior."""
        args = self.parse_args(argv)
        self.verbose = args.verbose
        self.quiet = args.quiet and not args.verbose
        self.configure_logging()

        config = self.load_config(args)
        handlers = {
            "scan": self.cmd_scan,
            "report": self.cmd_report,
            "undo": self.cmd_undo,
        }

        try:
            handlers[args.command](args, config)
        except (DupFinderError, OSError, RuntimeError) as e:
            if os.environ.get("DEBUG"):
                raise
            self.error_exit(str(e))

        elapsed = time.time() - self.start_time
        if self.verbose:
            print(f"\n✅ Completed in {elapsed:.2f} seconds")


def main() -> None:
    """Application entry point."""
    app = CLIApplication()
    try:
        app.run()
    except KeyboardInterrupt:
        print("\n⚠️  Operation cancelled by user (Ctrl+C)")
        sys.exit(130)
    except Exception as e:
        if os.environ.get("DEBUG"):
            raise
        print(f"❌ Unexpected error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
