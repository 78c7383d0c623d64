"""Background workers for gateway operations."""

import logging
from typing import Callable, Optional

from PyQt6.QtCore import QObject, QThread, pyqtSignal, pyqtSlot

from .gateway import GatewayError

logger = logging.getLogger(__name__)

SuccessCallback = Callable[[object], None]
ErrorCallback = Callable[[str], None]


def describe_error(exc: Exception) -> str:
    """Turn a failed gateway call into a status-bar message."""
    if isinstance(exc, GatewayError):
        return str(exc)
    return f"Unexpected error: {exc}"


class GatewayWorker(QThread):
    """Worker thread running a single blocking gateway call."""

    succeeded = pyqtSignal(object)  # Return value of the call
    failed = pyqtSignal(str)  # Error message

    def __init__(
        self,
        func: Callable,
        args: tuple,
        on_success: Optional[SuccessCallback] = None,
        on_error: Optional[ErrorCallback] = None,
    ):
        super().__init__()
        self.func = func
        self.args = args
        self.on_success = on_success
        self.on_error = on_error

    def run(self):
        try:
            result = self.func(*self.args)
        except Exception as e:
            self.failed.emit(describe_error(e))
        else:
            self.succeeded.emit(result)


class QtTaskRunner(QObject):
    """Runs gateway calls on worker threads, callbacks on the main thread.

    The runner lives on the GUI thread, so the worker signals reach it as
    queued connections and every callback runs inside the Qt event loop.
    """

    def __init__(self, parent=None):
        super().__init__(parent)
        self._workers: set[GatewayWorker] = set()

    def submit(
        self,
        func: Callable,
        *args,
        on_success: Optional[SuccessCallback] = None,
        on_error: Optional[ErrorCallback] = None,
    ) -> GatewayWorker:
        worker = GatewayWorker(func, args, on_success, on_error)
        worker.succeeded.connect(self._on_succeeded)
        worker.failed.connect(self._on_failed)
        worker.finished.connect(self._on_finished)
        self._workers.add(worker)
        worker.start()
        return worker

    @property
    def active_count(self) -> int:
        return len(self._workers)

    def wait_all(self, timeout_ms: int = 5000) -> None:
        """Block until running workers are done (used on shutdown)."""
        for worker in list(self._workers):
            if not worker.wait(timeout_ms):
                logger.warning("Worker for %s still running at shutdown", worker.func)

    @pyqtSlot(object)
    def _on_succeeded(self, result):
        worker = self.sender()
        if worker is not None and worker.on_success is not None:
            worker.on_success(result)

    @pyqtSlot(str)
    def _on_failed(self, message: str):
        worker = self.sender()
        if worker is not None and worker.on_error is not None:
            worker.on_error(message)

    @pyqtSlot()
    def _on_finished(self):
        worker = self.sender()
        self._workers.discard(worker)
        if worker is not None:
            worker.deleteLater()
