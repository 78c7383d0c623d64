"""Directory navigation state for one pane (local or remote)."""

import logging
from typing import Callable, Iterable, Sequence

from PyQt6.QtCore import QObject, pyqtSignal

from .models import Entry
from .paths import ROOT, child_path, parent_path

logger = logging.getLogger(__name__)

# path -> (entries, canonical path reported by the collaborator)
Lister = Callable[[str], tuple[Sequence[Entry], str]]


def arrange_listing(entries: Iterable[Entry], path: str, entry_type: type = Entry) -> tuple:
    """Order a raw listing for display.

    Directories come before files (stable, so server order survives inside
    each group) and a '..' row is prepended unless ``path`` is the root.
    """
    ordered = sorted(entries, key=lambda e: not e.is_directory)
    if path != ROOT:
        ordered.insert(0, entry_type.parent_marker())
    return tuple(ordered)


class PathNavigator(QObject):
    """Owns the current path and listing of one filesystem.

    Listings are requested through ``runner``; whichever response arrives
    last is the one displayed. A failed listing only updates ``status``:
    the previous listing and path stay as they were.
    """

    listing_changed = pyqtSignal(object)  # tuple of Entry
    path_changed = pyqtSignal(str)
    status_changed = pyqtSignal(str)  # "" when cleared

    def __init__(self, side: str, lister: Lister, runner, entry_type: type = Entry, parent=None):
        super().__init__(parent)
        self.side = side
        self._lister = lister
        self._runner = runner
        self._entry_type = entry_type
        self.current_path = ROOT
        self.resolved_path = ROOT
        self.listing: tuple = ()
        self.status = ""

    def navigate(self, path: str) -> None:
        """Request a listing of ``path``; the pane updates when it arrives."""
        logger.debug("%s: requesting listing of %s", self.side, path)
        self._runner.submit(
            self._lister,
            path,
            on_success=lambda result: self._on_listed(path, result),
            on_error=lambda message: self._on_list_error(path, message),
        )

    def refresh(self) -> None:
        """Re-list the current path."""
        self.navigate(self.current_path)

    def navigate_up(self) -> None:
        """Go to the parent of the current path."""
        self.navigate(parent_path(self.current_path))

    def handle_click(self, entry: Entry) -> None:
        """Resolve a row click into a navigation; files are ignored."""
        if entry.is_synthetic_parent:
            self.navigate(parent_path(self.current_path))
        elif entry.is_directory:
            self.navigate(child_path(self.current_path, entry.name))

    def _on_listed(self, path: str, result) -> None:
        """Replace the listing and path with a successful response."""
        entries, resolved = result
        self.listing = arrange_listing(entries, path, self._entry_type)
        self.current_path = path
        self.resolved_path = resolved
        logger.info("%s: %d entries in %s", self.side, len(entries), path)
        self._set_status("")
        self.listing_changed.emit(self.listing)
        self.path_changed.emit(path)

    def _on_list_error(self, path: str, message: str) -> None:
        """Report a failed listing, keeping the previous one."""
        logger.warning("%s: listing %s failed: %s", self.side, path, message)
        self._set_status(message)

    def _set_status(self, message: str) -> None:
        if not message and not self.status:
            return
        self.status = message
        self.status_changed.emit(message)
