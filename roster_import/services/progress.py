from __future__ import annotations

import sys
from pathlib import Path
from typing import Any

from tqdm import tqdm
from tqdm.std import tqdm as TqdmType

from ..models.processing_result import FileStat, FileStatus

"""Import progress display with tqdm (TTY only).

One bar over the input CSV files; the postfix carries running row totals
(imported / rejected / skipped). Without a TTY (CI, pipes) no bar is created so
the labeled log lines stay clean.
"""

__all__ = [
    "ProgressTracker",
    "is_tty_enabled",
]


def is_tty_enabled() -> bool:
    return sys.stdout.isatty()


class ProgressTracker:
    """File-level progress bar with running row totals."""

    def __init__(self, total_files: int, *, description: str = "Importing files") -> None:
        self.total_files = total_files
        self.description = description
        self.files_done = 0
        self.imported = 0
        self.rejected = 0
        self.skipped = 0
        self.failed_files = 0

        self.pbar: TqdmType[Any] | None = None
        if is_tty_enabled() and total_files > 0:
            self.pbar = tqdm(
                total=total_files,
                desc=description,
                unit="file",
                leave=True,
                position=0,
                ncols=80,
                ascii=True,
            )

    @property
    def enabled(self) -> bool:
        return self.pbar is not None

    def start_file(self, file_path: Path) -> None:
        if self.pbar is not None:
            self.pbar.set_description(f"{self.description} ({file_path.name})")

    def finish_file(self, stat: FileStat) -> None:
        """Account one processed file and refresh the bar."""
        self.files_done += 1
        self.imported += stat.imported_rows
        self.rejected += stat.failed_rows
        self.skipped += stat.skipped_rows
        if stat.status is FileStatus.FAILED:
            self.failed_files += 1
        if self.pbar is not None:
            self.pbar.set_postfix(imported=self.imported, rejected=self.rejected, skipped=self.skipped)
            self.pbar.update(1)
            self.pbar.set_description(self.description)

    def close(self) -> None:
        if self.pbar is not None:
            self.pbar.close()
            self.pbar = None

    def __enter__(self) -> ProgressTracker:
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()
