"""
Unified command orchestrator for duplicate detection.
This is the SINGLE source of truth for business logic — used by the CLI and by library callers.
"""
import logging
from typing import Callable, List, Optional, Tuple

from dupwalk.core.models import DuplicateGroup, ResultIndex, ScanParams, ScanStats
from dupwalk.core.scanner import create_scanner

logger = logging.getLogger(__name__)


class FindDuplicatesCommand:
    """
    Orchestrates a run:
    1. Build the scanner for the configured strategy
    2. Scan the tree into a frozen ResultIndex
    3. Extract duplicate groups (two or more paths per fingerprint)

    Usage:
        params = ScanParams(root_dir="/data", max_concurrency=8)
        command = FindDuplicatesCommand()
        groups, stats = command.execute(params, progress_callback=cli_progress_printer)
    """

    def __init__(self):
        self._index: Optional[ResultIndex] = None

    def execute(
            self,
            params: ScanParams,
            progress_callback: Optional[Callable[[str, int, Optional[int]], None]] = None
    ) -> Tuple[List[DuplicateGroup], ScanStats]:
        """
        Execute a scan with given parameters.

        Args:
            params: Validated scan parameters
            progress_callback: (stage: str, current: int, total: Optional[int]) -> None

        Returns:
            Tuple of (duplicate_groups, statistics). Paths inside a group and the
            groups themselves are sorted so output is stable across runs.

        Raises:
            TraversalError / HashError: under the fail-fast policy
        """
        scanner = create_scanner(params)
        logger.info(f"Scanning {params.root_dir} ({params.strategy.display_name}, "
                    f"limit {params.max_concurrency})")

        self._index = scanner.scan(progress_callback=progress_callback)

        groups = [
            DuplicateGroup(fingerprint=group.fingerprint, paths=sorted(group.paths))
            for group in self._index.duplicate_groups()
        ]
        groups.sort(key=lambda g: g.paths[0])

        logger.info(f"Found {len(groups)} duplicate groups among {self._index.file_count} files")
        return groups, scanner.stats

    def get_index(self) -> Optional[ResultIndex]:
        """Get the frozen index of the last successful execution."""
        return self._index
