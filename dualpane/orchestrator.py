"""Batch upload of the selected local files to the remote pane."""

import logging
from dataclasses import dataclass

from PyQt6.QtCore import QObject, pyqtSignal

from .paths import source_path

logger = logging.getLogger(__name__)

NOT_CONNECTED = "Not connected to server."
NOTHING_SELECTED = "No files selected for upload."
ALREADY_RUNNING = "An upload batch is already in progress."


@dataclass
class _Batch:
    sources: list[str]
    target_dir: str
    index: int = 0
    succeeded: int = 0
    failed: int = 0


class UploadOrchestrator(QObject):
    """Uploads every selected file, one at a time, then refreshes both panes.

    The selection is cleared as soon as a batch starts. The remote target
    directory is fixed for the whole batch, whatever the remote pane does
    meanwhile. A failed file is counted and the batch moves on.
    """

    progress = pyqtSignal(int, int, str)  # index, total, source path
    batch_finished = pyqtSignal(int, int)  # succeeded, failed

    def __init__(self, session, runner, parent=None):
        super().__init__(parent)
        self._session = session
        self._runner = runner
        self._batch: _Batch | None = None

    @property
    def is_running(self) -> bool:
        return self._batch is not None

    def start(self) -> bool:
        """Start a batch; return False (reporting why) if it cannot run."""
        session = self._session
        if not session.is_connected:
            session.set_status(NOT_CONNECTED)
            return False
        if session.selection.count == 0:
            session.set_status(NOTHING_SELECTED)
            return False
        if self.is_running:
            session.set_status(ALREADY_RUNNING)
            return False

        files = session.selection.snapshot()
        session.selection.clear()
        local_dir = session.local.current_path
        self._batch = _Batch(
            sources=[source_path(local_dir, entry.name) for entry in files],
            target_dir=session.remote.current_path,
        )
        logger.info(
            "Uploading %d file(s) from %s to %s",
            len(files),
            local_dir,
            self._batch.target_dir,
        )
        session.set_status(f"Uploading {len(files)} file(s)...")
        self._upload_next()
        return True

    def _upload_next(self) -> None:
        batch = self._batch
        total = len(batch.sources)
        if batch.index >= total:
            self._finish()
            return
        source = batch.sources[batch.index]
        self.progress.emit(batch.index, total, source)
        self._runner.submit(
            self._session.remote_gateway.upload_file,
            source,
            batch.target_dir,
            on_success=lambda _result: self._on_uploaded(source),
            on_error=lambda message: self._on_upload_error(source, message),
        )

    def _on_uploaded(self, source: str) -> None:
        logger.info("Uploaded %s", source)
        self._batch.succeeded += 1
        self._batch.index += 1
        self._upload_next()

    def _on_upload_error(self, source: str, message: str) -> None:
        logger.warning("Upload of %s failed: %s", source, message)
        self._batch.failed += 1
        self._batch.index += 1
        self._upload_next()

    def _finish(self) -> None:
        batch, self._batch = self._batch, None
        total = len(batch.sources)
        self.progress.emit(total, total, "")
        summary = f"{batch.succeeded} succeeded, {batch.failed} failed"
        logger.info("Upload batch done: %s", summary)
        self._session.set_status(summary)
        self.batch_finished.emit(batch.succeeded, batch.failed)
        self._session.local.refresh()
        self._session.remote.refresh()
