"""Summaries derived from a pane's listing (kind split, size histogram)."""

from typing import Iterable

from PyQt6.QtCore import QObject, pyqtSignal

from .models import Entry

DIRECTORIES = "Directories"
FILES = "Files"

KB = 1024
MB = 1024 * KB

# (label, lower bound inclusive, upper bound exclusive or None)
SIZE_BUCKETS = (
    ("< 1 KB", 0, KB),
    ("1 KB - 1 MB", KB, MB),
    ("1 MB - 100 MB", MB, 100 * MB),
    ("100 MB+", 100 * MB, None),
)


def kind_distribution(entries: Iterable[Entry]) -> dict[str, int]:
    """Count directories and files, leaving out '..' and empty categories."""
    directories = files = 0
    for entry in entries:
        if entry.is_synthetic_parent:
            continue
        if entry.is_directory:
            directories += 1
        else:
            files += 1
    counts = {DIRECTORIES: directories, FILES: files}
    return {label: count for label, count in counts.items() if count}


def size_bucket(size: int) -> str:
    """Return the histogram label for a file of ``size`` bytes."""
    if size < 0:
        raise ValueError(f"Negative size: {size}")
    for label, lower, upper in SIZE_BUCKETS:
        if lower <= size and (upper is None or size < upper):
            return label
    raise AssertionError("size buckets do not cover %d" % size)


def size_histogram(entries: Iterable[Entry]) -> dict[str, int]:
    """Count files per size bucket; every bucket is present, even at zero."""
    histogram = {label: 0 for label, _, _ in SIZE_BUCKETS}
    for entry in entries:
        if entry.is_file:
            histogram[size_bucket(entry.size_bytes)] += 1
    return histogram


class DistributionAggregator(QObject):
    """Keeps the summaries of one navigator's listing up to date.

    Recomputed synchronously every time the navigator replaces its listing.
    ``sizes`` stays ``None`` for panes whose entries carry no size.
    """

    changed = pyqtSignal()

    def __init__(self, navigator, include_sizes: bool, parent=None):
        super().__init__(parent)
        self.include_sizes = include_sizes
        self.kinds: dict[str, int] = {}
        self.sizes: dict[str, int] | None = None
        navigator.listing_changed.connect(self.recompute)
        self.recompute(navigator.listing)

    def recompute(self, listing) -> None:
        self.kinds = kind_distribution(listing)
        self.sizes = size_histogram(listing) if self.include_sizes else None
        self.changed.emit()
