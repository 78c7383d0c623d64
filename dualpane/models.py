"""Data models for dualpane."""

from dataclasses import dataclass

PARENT_NAME = ".."


@dataclass(frozen=True)
class Entry:
    """One row of a directory listing, local or remote."""

    name: str
    is_directory: bool
    is_synthetic_parent: bool = False

    def __post_init__(self):
        if not self.name:
            raise ValueError("Entry name must not be empty")

    @property
    def is_file(self) -> bool:
        """Check if this entry is a real file (not a directory, not '..')."""
        return not self.is_directory and not self.is_synthetic_parent

    @classmethod
    def parent_marker(cls):
        """Build the injected '..' row for upward navigation."""
        return cls(name=PARENT_NAME, is_directory=True, is_synthetic_parent=True)


@dataclass(frozen=True)
class LocalEntry(Entry):
    """Entry on the local filesystem, with its size in bytes."""

    size_bytes: int = 0  # 0 for directories and the '..' row

    def __post_init__(self):
        super().__post_init__()
        if self.size_bytes < 0:
            raise ValueError(f"Negative size for {self.name!r}: {self.size_bytes}")


@dataclass(frozen=True)
class RemoteEntry(Entry):
    """Entry on the remote side; its size is unknown to the client."""
