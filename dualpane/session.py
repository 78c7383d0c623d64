"""Client session: the one object holding the shared state of both panes."""

import logging

from PyQt6.QtCore import QObject, pyqtSignal

from .distribution import DistributionAggregator
from .models import LocalEntry, RemoteEntry
from .navigator import PathNavigator
from .orchestrator import UploadOrchestrator
from .paths import ROOT
from .selection import SelectionSet

logger = logging.getLogger(__name__)


class Session(QObject):
    """Wires the navigators, selection and uploads to the gateways.

    ``remote_gateway`` provides ``connect``, ``list_remote_dir``,
    ``upload_file`` and ``close``; ``local_gateway`` provides
    ``list_local_dir``. ``runner`` executes those calls off the UI thread.
    """

    status_changed = pyqtSignal(str)
    connection_changed = pyqtSignal(bool)

    def __init__(self, remote_gateway, local_gateway, runner, parent=None):
        super().__init__(parent)
        self.remote_gateway = remote_gateway
        self.local_gateway = local_gateway
        self.runner = runner
        self.is_connected = False
        self.status = ""

        self.local = PathNavigator(
            "local", local_gateway.list_local_dir, runner, LocalEntry, parent=self
        )
        self.remote = PathNavigator(
            "remote", self._list_remote, runner, RemoteEntry, parent=self
        )
        self.selection = SelectionSet(self)
        self.local_summary = DistributionAggregator(self.local, include_sizes=True, parent=self)
        self.remote_summary = DistributionAggregator(self.remote, include_sizes=False, parent=self)
        self.uploads = UploadOrchestrator(self, runner, parent=self)

    def _list_remote(self, path: str):
        return self.remote_gateway.list_remote_dir(path), path

    def start(self) -> None:
        """Load the initial local listing."""
        self.local.navigate(ROOT)

    def set_status(self, message: str) -> None:
        """Set the session-wide status line."""
        self.status = message
        self.status_changed.emit(message)

    # -- connection -----------------------------------------------------

    def connect_server(self, url: str) -> None:
        """Connect in the background, then refresh the remote pane."""
        self.set_status(f"Connecting to {url}...")
        self.runner.submit(
            self.remote_gateway.connect,
            url,
            on_success=self._on_connected,
            on_error=self._on_connect_error,
        )

    def _on_connected(self, message: str) -> None:
        self.is_connected = True
        self.set_status(message)
        self.connection_changed.emit(True)
        self.remote.refresh()

    def _on_connect_error(self, message: str) -> None:
        logger.error("Connect failed: %s", message)
        self.is_connected = False
        self.set_status(message)
        self.connection_changed.emit(False)

    # -- transfers ------------------------------------------------------

    def start_upload(self) -> bool:
        """Start a batch upload of the current selection."""
        return self.uploads.start()

    def close(self) -> None:
        """Drop the server connection."""
        self.remote_gateway.close()
        self.is_connected = False
        self.connection_changed.emit(False)
