"""Local and remote filesystem gateways.

The core never touches a filesystem directly; it goes through the four
operations exposed here (connect, list remote, list local, upload one file).
Every failure is raised as :class:`GatewayError` carrying a message that is
fit to show in the status bar.
"""

from __future__ import annotations

import getpass
import logging
import os
import posixpath
import stat
import threading
from dataclasses import dataclass
from pathlib import Path, PurePosixPath
from urllib.parse import urlsplit

import paramiko

from .models import LocalEntry, RemoteEntry

logger = logging.getLogger(__name__)

DEFAULT_SCHEME = "sftp"
DEFAULT_PORT = 22


class GatewayError(Exception):
    """Raised when a gateway operation fails."""

    pass


class NotConnectedError(GatewayError):
    """Raised when a remote operation is attempted without a connection."""

    def __init__(self, message: str = "Not connected to server."):
        super().__init__(message)


@dataclass(frozen=True)
class ServerAddress:
    host: str
    port: int
    username: str
    password: str | None = None

    @property
    def display(self) -> str:
        return f"{DEFAULT_SCHEME}://{self.username}@{self.host}:{self.port}"


def parse_server_url(url: str) -> ServerAddress:
    """Parse ``[sftp://][user[:password]@]host[:port]`` into its parts."""
    text = url.strip()
    if "://" not in text:
        text = f"{DEFAULT_SCHEME}://{text}"
    parts = urlsplit(text)
    if parts.scheme != DEFAULT_SCHEME:
        raise GatewayError(f"Unsupported scheme: {parts.scheme}")
    try:
        port = parts.port or DEFAULT_PORT
    except ValueError as e:
        raise GatewayError(f"Invalid server address: {url}") from e
    if not parts.hostname:
        raise GatewayError(f"Invalid server address: {url}")
    return ServerAddress(
        host=parts.hostname,
        port=port,
        username=parts.username or getpass.getuser(),
        password=parts.password,
    )


def _by_name(entry) -> str:
    return entry.name.lower()


class LocalGateway:
    """Lists a local directory tree confined to a base directory.

    Virtual paths (``/``, ``/docs``) are resolved under ``base_dir``; anything
    that canonicalizes outside of it is refused.
    """

    def __init__(self, base_dir: str | Path):
        self.base_dir = Path(base_dir).expanduser()

    def resolve(self, path: str, what: str = "Directory") -> Path:
        """Return the canonical filesystem path for a virtual path."""
        try:
            base = self.base_dir.resolve(strict=True)
        except OSError as e:
            raise GatewayError(f"Invalid base path: {e}") from e
        try:
            resolved = (base / path.lstrip("/")).resolve(strict=True)
        except OSError as e:
            raise GatewayError(f"{what} not found or inaccessible: {path}") from e
        if resolved != base and base not in resolved.parents:
            logger.error("Local path traversal attempt detected: %s", resolved)
            raise GatewayError("Access to this local path is restricted.")
        return resolved

    def list_local_dir(self, path: str) -> tuple[list[LocalEntry], str]:
        """Return the visible entries of a directory and its canonical path."""
        directory = self.resolve(path)
        logger.info("Listing local directory: %s", directory)

        entries: list[LocalEntry] = []
        try:
            with os.scandir(directory) as it:
                for dirent in it:
                    if dirent.name.startswith("."):
                        continue
                    try:
                        is_dir = dirent.is_dir()
                        size = 0 if is_dir else dirent.stat().st_size
                    except OSError:
                        # unreadable metadata (e.g. dangling symlink)
                        continue
                    entries.append(
                        LocalEntry(name=dirent.name, is_directory=is_dir, size_bytes=size)
                    )
        except OSError as e:
            raise GatewayError(f"Could not read local directory: {e}") from e

        entries.sort(key=_by_name)
        return entries, str(directory)


class SFTPGateway:
    """Remote side reached over SFTP with :mod:`paramiko`.

    Blocking by design: callers run these methods on worker threads.
    Remote virtual paths are rooted at ``remote_root`` on the server.
    """

    def __init__(
        self,
        local: LocalGateway,
        remote_root: str = "/",
        timeout: float = 15.0,
    ):
        self._local = local
        self._remote_root = posixpath.normpath("/" + remote_root.strip("/"))
        self._timeout = timeout
        self._client: paramiko.SSHClient | None = None
        self._sftp: paramiko.SFTPClient | None = None
        self._lock = threading.Lock()

    @property
    def is_connected(self) -> bool:
        return self._sftp is not None

    # -- connection -----------------------------------------------------

    def connect(self, url: str) -> str:
        """Open a new connection, dropping any previous one."""
        self.close()
        address = parse_server_url(url)
        logger.info("Attempting to connect to %s", address.display)

        client = paramiko.SSHClient()
        client.set_missing_host_key_policy(paramiko.AutoAddPolicy())
        try:
            client.connect(
                hostname=address.host,
                port=address.port,
                username=address.username,
                password=address.password,
                allow_agent=True,
                look_for_keys=True,
                timeout=self._timeout,
            )
            sftp = client.open_sftp()
        except (paramiko.SSHException, OSError) as e:
            client.close()
            logger.error("Connection failed: %s", e)
            raise GatewayError(f"Connection failed: {e}") from e

        with self._lock:
            self._client = client
            self._sftp = sftp
        logger.info("Successfully connected to %s", address.display)
        return f"Connected to {address.display}"

    def close(self) -> None:
        with self._lock:
            if self._sftp is not None:
                self._sftp.close()
                self._sftp = None
            if self._client is not None:
                self._client.close()
                self._client = None

    # -- helpers --------------------------------------------------------

    def _require_sftp(self) -> paramiko.SFTPClient:
        sftp = self._sftp
        if sftp is None:
            raise NotConnectedError()
        return sftp

    def _remote_path(self, path: str) -> str:
        """Map a virtual remote path onto the server, refusing escapes."""
        parts: list[str] = []
        for part in path.split("/"):
            if part in ("", "."):
                continue
            if part == "..":
                if not parts:
                    logger.error("Path traversal attempt detected: %s", path)
                    raise GatewayError("Access to this path is denied")
                parts.pop()
                continue
            parts.append(part)
        return posixpath.join(self._remote_root, *parts)

    @staticmethod
    def _makedirs(sftp: paramiko.SFTPClient, directory: str) -> None:
        current = "/"
        for part in PurePosixPath(directory).parts[1:]:
            current = posixpath.join(current, part)
            try:
                sftp.stat(current)
            except IOError:
                sftp.mkdir(current)

    # -- operations -----------------------------------------------------

    def list_remote_dir(self, path: str) -> list[RemoteEntry]:
        sftp = self._require_sftp()
        remote = self._remote_path(path)
        logger.info("Listing remote directory: %s", remote)
        try:
            attrs = sftp.listdir_attr(remote)
        except (paramiko.SSHException, OSError) as e:
            logger.error("Failed to list directory %s: %s", remote, e)
            raise GatewayError(f"Failed to list directory: {e}") from e

        entries = [
            RemoteEntry(name=attr.filename, is_directory=stat.S_ISDIR(attr.st_mode or 0))
            for attr in attrs
            if attr.filename not in (".", "..")
        ]
        entries.sort(key=_by_name)
        return entries

    def upload_file(self, local_path: str, target_dir: str) -> str:
        """Copy one local file into ``target_dir`` under its own name."""
        sftp = self._require_sftp()
        filename = PurePosixPath(local_path).name
        if not filename:
            raise GatewayError(f"Local path has no file name: {local_path!r}")
        source = self._local.resolve(local_path, what="Local file")
        if not source.is_file():
            raise GatewayError(f"Not a regular file: {local_path}")

        remote_dir = self._remote_path(target_dir)
        destination = posixpath.join(remote_dir, filename)
        size = source.stat().st_size
        logger.info("Starting upload for: %s (%d bytes) -> %s", filename, size, destination)
        try:
            self._makedirs(sftp, remote_dir)
            sftp.put(str(source), destination)
        except (paramiko.SSHException, OSError) as e:
            logger.error("Upload of %s failed: %s", filename, e)
            raise GatewayError(f"Upload failed: {e}") from e
        return f"Uploaded {filename} ({size} bytes)"
