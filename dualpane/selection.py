"""Set of local files queued for the next upload batch."""

from dataclasses import replace

from PyQt6.QtCore import QObject, pyqtSignal

from .models import LocalEntry


class SelectionSet(QObject):
    """Tracks checked local files by name, in the order they were checked.

    Members are copies taken when the row was checked, so refreshing the
    listing afterwards does not change what was recorded for them.
    """

    changed = pyqtSignal()

    def __init__(self, parent=None):
        super().__init__(parent)
        self._items: list[LocalEntry] = []

    def toggle(self, entry: LocalEntry, checked: bool) -> bool:
        """Check or uncheck ``entry``; return whether the set changed."""
        if entry.is_directory or entry.is_synthetic_parent:
            return False
        if checked:
            if entry.name in self:
                return False
            self._items.append(replace(entry))
        else:
            remaining = [item for item in self._items if item.name != entry.name]
            if len(remaining) == len(self._items):
                return False
            self._items = remaining
        self.changed.emit()
        return True

    def clear(self) -> None:
        """Empty the set."""
        if not self._items:
            return
        self._items = []
        self.changed.emit()

    def snapshot(self) -> tuple:
        """Return the members in check order."""
        return tuple(self._items)

    @property
    def count(self) -> int:
        return len(self._items)

    @property
    def total_bytes(self) -> int:
        return sum(item.size_bytes for item in self._items)

    def __contains__(self, name) -> bool:
        return any(item.name == name for item in self._items)

    def __len__(self) -> int:
        return len(self._items)
