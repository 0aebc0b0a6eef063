#!/usr/bin/env python3
"""
dupwalk CLI — Command line interface for concurrent duplicate file detection.
Prints every group of two or more files with identical content.
"""
from __future__ import annotations  # Enable postponed evaluation of annotations (PEP 563)
import argparse
import logging
import os
import sys
import time
from pathlib import Path
from typing import List, NoReturn, Optional

logging.basicConfig(
    level=logging.ERROR,
    format="%(levelname)-8s | %(name)-25s | %(message)s"
)

# === EARLY DEPENDENCY VALIDATION ===
try:
    import xxhash  # noqa: F401
except ImportError:
    print("❌ Missing required dependency: xxhash", file=sys.stderr)
    print("   pip install xxhash", file=sys.stderr)
    sys.exit(1)

# === NORMAL IMPORTS (after validation) ===
from dupwalk.core.errors import ScanError, UsageError
from dupwalk.core.models import DuplicateGroup, ScanParams, ScanStats
from dupwalk.commands import FindDuplicatesCommand
from dupwalk.aliases import (
    ALGORITHM_ALIASES, ALGORITHM_CHOICES,
    ERROR_POLICY_ALIASES, ERROR_POLICY_CHOICES, ERROR_POLICY_HELP_TEXT,
    STRATEGY_ALIASES, STRATEGY_CHOICES, STRATEGY_HELP_TEXT,
    EPILOG_TEXT
)


def printable(text: str) -> str:
    """
    Renders a path (or a message containing one) for the console.
    Bytes that were not valid in the filesystem encoding come back from os.scandir
    as lone surrogates; they are shown as backslash escapes instead of failing the write.
    """
    return text.encode("utf-8", "surrogateescape").decode("utf-8", "backslashreplace")


class CLIApplication:
    """Main CLI application controller."""

    def __init__(self):
        self.start_time: float = time.time()
        self.verbose: bool = False
        self.quiet: bool = False

        # Emoji and escaped paths are always written as UTF-8, whatever the console default
        sys.stdout.reconfigure(encoding="utf-8")
        sys.stderr.reconfigure(encoding="utf-8")

    @staticmethod
    def parse_args(args=None) -> argparse.Namespace:
        """Parse command-line arguments. A missing root is a usage error (exit code 2)."""
        parser = argparse.ArgumentParser(
            prog="dupwalk",
            description="dupwalk — find files with identical content under a directory",
            formatter_class=argparse.RawTextHelpFormatter,
            epilog=EPILOG_TEXT
        )

        # Required arguments
        parser.add_argument(
            "--input", "-i",
            required=True,
            type=str,
            help="Root directory to scan for duplicates"
        )

        # Concurrency options
        parser.add_argument(
            "--jobs", "-j",
            default=None,
            type=int,
            metavar='',
            help="Maximum simultaneous directory reads and file hashes. Default: 2 x CPU count"
        )
        parser.add_argument(
            "--workers",
            default=None,
            type=int,
            metavar='',
            help="Threads available to run scan tasks. Default: 2 x --jobs"
        )
        parser.add_argument(
            "--strategy",
            choices=STRATEGY_CHOICES,
            default="fanout",
            type=str,
            help=STRATEGY_HELP_TEXT
        )
        parser.add_argument(
            "--algorithm",
            choices=ALGORITHM_CHOICES,
            default="xxh64",
            type=str,
            help="Content hash used as fingerprint. Default: xxh64"
        )
        parser.add_argument(
            "--on-error",
            choices=ERROR_POLICY_CHOICES,
            default="fail-fast",
            type=str,
            dest="on_error",
            help=ERROR_POLICY_HELP_TEXT
        )

        # Output options
        parser.add_argument(
            "--quiet", "-q",
            action="store_true",
            help="Suppress non-essential output"
        )
        parser.add_argument(
            "--verbose", "-v",
            action="store_true",
            help="Show detailed statistics and progress"
        )

        return parser.parse_args(args)

    def validate_args(self, args: argparse.Namespace) -> None:
        """Validate command-line arguments before execution."""
        root_path = Path(args.input).resolve()
        if not root_path.exists():
            self.error_exit(f"Directory not found: {args.input}")
        if not root_path.is_dir():
            self.error_exit(f"Path is not a directory: {args.input}")

        if args.jobs is not None and args.jobs < 1:
            self.error_exit("--jobs must be at least 1", code=2)
        if args.workers is not None and args.workers < 1:
            self.error_exit("--workers must be at least 1", code=2)

    def create_params(self, args: argparse.Namespace) -> ScanParams:
        """Create ScanParams from CLI arguments."""
        try:
            extra = {}
            if args.jobs is not None:
                extra["max_concurrency"] = args.jobs
            return ScanParams(
                root_dir=str(Path(args.input).resolve()),
                workers=args.workers,
                strategy=STRATEGY_ALIASES[args.strategy],
                algorithm=ALGORITHM_ALIASES[args.algorithm],
                error_policy=ERROR_POLICY_ALIASES[args.on_error],
                **extra
            )
        except UsageError as e:
            self.error_exit(f"Parameter error: {e}", code=2)

    def progress_callback(self, stage: str, current: int, total: Optional[int]) -> None:
        """CLI progress callback - shows progress in console."""
        if not self.verbose:
            return

        if total and total > 0:
            percent = (current / total) * 100
            sys.stderr.write(f"\r  [{stage}] {current}/{total} ({percent:.1f}%)")
        else:
            sys.stderr.write(f"\r  [{stage}] {current} files processed...")
        sys.stderr.flush()

    def run_scan(self, params: ScanParams) -> tuple[List[DuplicateGroup], ScanStats]:
        """Execute the scan. Any scan failure under fail-fast ends the run with no group output."""
        command = FindDuplicatesCommand()
        if self.verbose:
            print(f"Finding duplicates (strategy: {params.strategy.display_name}, "
                  f"limit: {params.max_concurrency})...")

        try:
            groups, stats = command.execute(
                params,
                progress_callback=self.progress_callback if self.verbose else None
            )
        except ScanError as e:
            self.error_exit(f"Scan aborted: {e}")

        if self.verbose:
            sys.stderr.write("\n")
            print(stats.print_summary())

        return groups, stats

    def output_results(self, groups: List[DuplicateGroup]) -> None:
        """Output duplicate groups as plain text. Nothing is written until every line is rendered."""
        lines: List[str] = []
        if self.quiet:
            for group in groups:
                lines.append(f"{group.short_id} {group.duplicate_count}")
                lines.extend(f"   {printable(path)}" for path in group.paths)
        elif not groups:
            lines.append("No duplicate groups found.")
        else:
            total_files = sum(g.duplicate_count for g in groups)
            lines.append(f"\nFound {len(groups)} duplicate groups ({total_files} files)")
            for group in groups:
                lines.append(f"\n📁 Group {group.short_id} | Files: {group.duplicate_count}")
                lines.extend(f"   {printable(path)}" for path in group.paths)

        if lines:
            print("\n".join(lines))

    def output_failures(self, stats: ScanStats) -> None:
        """List failures isolated under the collect policy."""
        if not stats.failures:
            return
        lines = [f"\n⚠️  {len(stats.failures)} path(s) could not be scanned:"]
        lines.extend(f"  • [{failure.kind}] {printable(failure.message)}" for failure in stats.failures)
        print("\n".join(lines), file=sys.stderr)

    @staticmethod
    def error_exit(message: str, code: int = 1) -> NoReturn:
        """Print error and exit."""
        print(f"❌ Error: {printable(message)}", file=sys.stderr)
        sys.exit(code)

    def run(self, argv=None) -> int:
        """Main entry point. Returns the process exit code."""
        args = self.parse_args(argv)
        self.verbose = args.verbose
        self.quiet = args.quiet
        if self.verbose:
            logging.getLogger("dupwalk").setLevel(logging.INFO)

        self.validate_args(args)
        params = self.create_params(args)

        if not self.quiet:
            print(f"Scanning directory: {printable(params.root_dir)}")

        groups, stats = self.run_scan(params)
        self.output_results(groups)

        elapsed = time.time() - self.start_time
        if self.verbose:
            print(f"\n✅ Completed in {elapsed:.2f} seconds")

        if stats.failures:
            self.output_failures(stats)
            return 1
        return 0


def main() -> None:
    """Application entry point."""
    app = CLIApplication()
    try:
        code = app.run()
    except KeyboardInterrupt:
        print("\n⚠️  Operation cancelled by user (Ctrl+C)")
        sys.exit(130)
    except Exception as e:
        if os.environ.get("DEBUG"):
            raise
        print(f"❌ Unexpected error: {printable(str(e))}", file=sys.stderr)
        sys.exit(1)
    sys.exit(code)


if __name__ == "__main__":
    main()
