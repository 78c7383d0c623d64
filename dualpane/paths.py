"""Helpers for the '/'-rooted virtual paths shown in both panes."""

ROOT = "/"


def normalize_path(path: str) -> str:
    """Turn user-typed text into a canonical absolute virtual path."""
    segments: list[str] = []
    for part in path.strip().split("/"):
        if part in ("", "."):
            continue
        if part == "..":
            if segments:
                segments.pop()
            continue
        segments.append(part)
    return ROOT + "/".join(segments)


def parent_path(path: str) -> str:
    """Drop the last segment; the root is its own parent."""
    if path == ROOT:
        return ROOT
    head = path.rsplit("/", 1)[0]
    return head or ROOT


def child_path(path: str, name: str) -> str:
    """Join a directory path and an entry name."""
    if path == ROOT:
        return ROOT + name
    return path + "/" + name


def source_path(directory: str, name: str) -> str:
    """Local source path of a selected file, as handed to the upload call."""
    if directory == ROOT:
        return name
    return directory + "/" + name
