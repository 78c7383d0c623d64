"""Main application window for dualpane."""

import logging
import sys

from PyQt6.QtCore import Qt
from PyQt6.QtGui import QAction, QKeySequence, QStandardItem, QStandardItemModel
from PyQt6.QtWidgets import (
    QAbstractItemView,
    QApplication,
    QHBoxLayout,
    QHeaderView,
    QLabel,
    QLineEdit,
    QMainWindow,
    QProgressBar,
    QPushButton,
    QSplitter,
    QStatusBar,
    QToolBar,
    QTreeView,
    QVBoxLayout,
    QWidget,
)

from .config import parse_args
from .gateway import LocalGateway, SFTPGateway
from .logger import setup_logging
from .models import Entry
from .paths import normalize_path
from .session import Session
from .workers import QtTaskRunner

logger = logging.getLogger(__name__)


def format_size(size_bytes: int) -> str:
    """Format a byte count for display."""
    size = float(size_bytes)
    for unit in ("B", "KB", "MB", "GB"):
        if size < 1024 or unit == "GB":
            return f"{size:.0f} {unit}" if unit == "B" else f"{size:.1f} {unit}"
        size /= 1024
    return f"{size_bytes} B"


def format_counts(counts: dict) -> str:
    return "  ".join(f"{label}: {count}" for label, count in counts.items()) or "Empty"


class FileBrowserWidget(QTreeView):
    """Tree view showing one pane's listing in the order it is given."""

    def __init__(self, show_sizes: bool, checkable: bool, parent=None):
        super().__init__(parent)
        self.show_sizes = show_sizes
        self.checkable = checkable
        self._entries: dict[int, Entry] = {}
        self._setup_model()
        self._setup_view()

    def _setup_model(self):
        self._model = QStandardItemModel()
        headers = ["Name", "Size"] if self.show_sizes else ["Name", "Type"]
        self._model.setHorizontalHeaderLabels(headers)
        self.setModel(self._model)

    def _setup_view(self):
        self.setSelectionMode(QAbstractItemView.SelectionMode.SingleSelection)
        self.setRootIsDecorated(False)
        self.setAlternatingRowColors(True)

        header = self.header()
        header.setStretchLastSection(False)
        header.setSectionResizeMode(0, QHeaderView.ResizeMode.Stretch)
        header.setSectionResizeMode(1, QHeaderView.ResizeMode.ResizeToContents)

    @property
    def item_model(self) -> QStandardItemModel:
        return self._model

    def set_entries(self, entries, checked_names=()):
        """Populate the view; rows in ``checked_names`` start checked."""
        self._model.removeRows(0, self._model.rowCount())
        self._entries.clear()

        for row, entry in enumerate(entries):
            type_indicator = "[D] " if entry.is_directory else "[F] "
            if entry.is_synthetic_parent:
                type_indicator = ""
            name_item = QStandardItem(type_indicator + entry.name)
            name_item.setEditable(False)
            if self.checkable and entry.is_file:
                name_item.setCheckable(True)
                state = Qt.CheckState.Checked if entry.name in checked_names else Qt.CheckState.Unchecked
                name_item.setCheckState(state)

            if self.show_sizes:
                detail = format_size(entry.size_bytes) if entry.is_file else "--"
            else:
                detail = "Folder" if entry.is_directory else "File"
            detail_item = QStandardItem(detail)
            detail_item.setEditable(False)

            self._model.appendRow([name_item, detail_item])
            self._entries[row] = entry

    def sync_checks(self, checked_names):
        """Match row check marks to ``checked_names`` without rebuilding rows."""
        for row in range(self._model.rowCount()):
            item = self._model.item(row, 0)
            if not item.isCheckable():
                continue
            name = self._entries[row].name
            state = Qt.CheckState.Checked if name in checked_names else Qt.CheckState.Unchecked
            if item.checkState() != state:
                item.setCheckState(state)

    def get_entry_at_index(self, index) -> Entry | None:
        """Get the Entry at the given model index."""
        return self._entries.get(index.row())


class PanePanel(QWidget):
    """Path bar, listing and summary line for one navigator."""

    def __init__(self, title: str, navigator, summary, checkable: bool, parent=None):
        super().__init__(parent)
        self.navigator = navigator
        self.summary = summary

        layout = QVBoxLayout(self)
        layout.addWidget(QLabel(title))

        nav_layout = QHBoxLayout()
        nav_layout.addWidget(QLabel("Path:"))
        self.path_edit = QLineEdit(navigator.current_path)
        nav_layout.addWidget(self.path_edit)
        self.go_button = QPushButton("Go")
        nav_layout.addWidget(self.go_button)
        self.up_button = QPushButton("Up")
        self.up_button.setFixedWidth(50)
        nav_layout.addWidget(self.up_button)
        layout.addLayout(nav_layout)

        self.browser = FileBrowserWidget(show_sizes=summary.include_sizes, checkable=checkable)
        layout.addWidget(self.browser)

        self.kinds_label = QLabel()
        self.sizes_label = QLabel()
        layout.addWidget(self.kinds_label)
        layout.addWidget(self.sizes_label)
        self.sizes_label.setVisible(summary.include_sizes)

        self.go_button.clicked.connect(self._navigate_to_path)
        self.path_edit.returnPressed.connect(self._navigate_to_path)
        self.up_button.clicked.connect(navigator.navigate_up)
        self.browser.doubleClicked.connect(self._on_item_double_clicked)
        navigator.path_changed.connect(self.path_edit.setText)
        summary.changed.connect(self._update_summary)
        self._update_summary()

    def _navigate_to_path(self):
        self.navigator.navigate(normalize_path(self.path_edit.text()))

    def _on_item_double_clicked(self, index):
        entry = self.browser.get_entry_at_index(index)
        if entry is not None:
            self.navigator.handle_click(entry)

    def _update_summary(self):
        self.kinds_label.setText(format_counts(self.summary.kinds))
        if self.summary.sizes is not None:
            self.sizes_label.setText(format_counts(self.summary.sizes))


class MainWindow(QMainWindow):
    """Main application window."""

    def __init__(self, session: Session, server_url: str = ""):
        super().__init__()
        self.session = session
        self.setWindowTitle("dualpane - File Transfer")
        self.setMinimumSize(1000, 600)

        self._setup_ui(server_url)
        self._connect_signals()

    def _setup_ui(self, server_url: str):
        central = QWidget()
        self.setCentralWidget(central)
        layout = QVBoxLayout(central)

        self._create_toolbar(server_url)

        splitter = QSplitter(Qt.Orientation.Horizontal)
        self.local_panel = PanePanel(
            "Local", self.session.local, self.session.local_summary, checkable=True
        )
        self.remote_panel = PanePanel(
            "Remote", self.session.remote, self.session.remote_summary, checkable=False
        )
        splitter.addWidget(self.local_panel)
        splitter.addWidget(self.remote_panel)
        layout.addWidget(splitter)

        self.selection_label = QLabel()
        layout.addWidget(self.selection_label)
        self._update_selection_label()

        self.status_bar = QStatusBar()
        self.progress_bar = QProgressBar()
        self.progress_bar.setMaximumWidth(200)
        self.progress_bar.hide()
        self.status_bar.addPermanentWidget(self.progress_bar)
        self.setStatusBar(self.status_bar)
        self.status_bar.showMessage("Ready")

    def _create_toolbar(self, server_url: str):
        toolbar = QToolBar("Main Toolbar")
        toolbar.setMovable(False)
        self.addToolBar(toolbar)

        self.server_edit = QLineEdit(server_url)
        self.server_edit.setPlaceholderText("user@host:port")
        self.server_edit.setMaximumWidth(260)
        self.connect_action = QAction("Connect", self)
        self.refresh_action = QAction("Refresh", self)
        self.refresh_action.setShortcut(QKeySequence("F5"))
        self.upload_action = QAction("Upload", self)

        toolbar.addWidget(QLabel("Server: "))
        toolbar.addWidget(self.server_edit)
        toolbar.addAction(self.connect_action)
        toolbar.addSeparator()
        toolbar.addAction(self.refresh_action)
        toolbar.addAction(self.upload_action)

    def _connect_signals(self):
        session = self.session

        self.connect_action.triggered.connect(self._connect_server)
        self.server_edit.returnPressed.connect(self._connect_server)
        self.refresh_action.triggered.connect(self._refresh_both)
        self.upload_action.triggered.connect(self._start_upload)

        session.status_changed.connect(self._show_status)
        session.local.status_changed.connect(self._show_pane_status)
        session.remote.status_changed.connect(self._show_pane_status)
        session.local.listing_changed.connect(self._on_local_listing)
        session.remote.listing_changed.connect(self.remote_panel.browser.set_entries)
        session.selection.changed.connect(self._on_selection_changed)
        session.uploads.progress.connect(self._on_upload_progress)
        session.uploads.batch_finished.connect(self._on_batch_finished)

        self.local_panel.browser.item_model.itemChanged.connect(self._on_local_item_changed)

    # View updates

    def _show_status(self, message: str):
        self.status_bar.showMessage(message or "Ready")

    def _show_pane_status(self, message: str):
        if message:
            self.status_bar.showMessage(f"Error: {message}", 5000)

    def _on_local_listing(self, listing):
        names = {entry.name for entry in self.session.selection.snapshot()}
        self.local_panel.browser.set_entries(listing, checked_names=names)

    def _on_selection_changed(self):
        self._update_selection_label()
        names = {entry.name for entry in self.session.selection.snapshot()}
        self.local_panel.browser.sync_checks(names)

    def _update_selection_label(self):
        selection = self.session.selection
        self.selection_label.setText(
            f"Selected: {selection.count} file(s), {format_size(selection.total_bytes)}"
        )

    def _on_local_item_changed(self, item: QStandardItem):
        if not item.isCheckable():
            return
        entry = self.local_panel.browser.get_entry_at_index(item.index())
        if entry is not None:
            self.session.selection.toggle(entry, item.checkState() == Qt.CheckState.Checked)

    def _on_upload_progress(self, current: int, total: int, source: str):
        if total > 0:
            self.progress_bar.show()
            self.progress_bar.setValue(int((current / total) * 100))
            if source:
                self.status_bar.showMessage(f"Uploading: {source}")

    def _on_batch_finished(self, succeeded: int, failed: int):
        self.progress_bar.hide()
        self.upload_action.setEnabled(True)

    # Actions

    def _connect_server(self):
        url = self.server_edit.text().strip()
        if url:
            self.session.connect_server(url)

    def _refresh_both(self):
        self.session.local.refresh()
        if self.session.is_connected:
            self.session.remote.refresh()

    def _start_upload(self):
        if self.session.start_upload():
            self.upload_action.setEnabled(False)
            self.progress_bar.setValue(0)

    def closeEvent(self, event):
        self.session.runner.wait_all()
        self.session.close()
        super().closeEvent(event)


def build_session(config, runner) -> Session:
    local = LocalGateway(config.local_root)
    remote = SFTPGateway(local, remote_root=config.remote_root, timeout=config.connect_timeout)
    return Session(remote, local, runner)


def main(argv=None):
    """Application entry point."""
    config = parse_args(argv)
    setup_logging(config.log_level)
    logger.info("Local root: %s, remote root: %s", config.local_root, config.remote_root)

    app = QApplication(sys.argv)
    app.setApplicationName("dualpane")
    runner = QtTaskRunner()
    session = build_session(config, runner)
    window = MainWindow(session, config.server_url)
    window.show()
    session.start()
    if config.auto_connect:
        session.connect_server(config.server_url)
    sys.exit(app.exec())


if __name__ == "__main__":
    main()
