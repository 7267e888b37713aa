"""
gui_mainwindow.py - GUI Main Window

Document folder browser:
1. Folder selection with recent-folder memory
2. Document tree (folders without documents hidden)
3. New / rename / move / delete actions, refreshed by the folder watch
"""

from pathlib import Path
from typing import Callable, List, Optional, Set

from PySide6.QtWidgets import (
    QMainWindow, QWidget, QVBoxLayout, QHBoxLayout, QLabel, QLineEdit,
    QPushButton, QTreeWidget, QTreeWidgetItem, QFileDialog, QMessageBox,
    QInputDialog, QComboBox,
)
from PySide6.QtCore import Qt, Slot, QTimer

from drawvault import (
    FileCommands, CommandResult, TreeNode, PreferenceStore, Preferences,
)
from .gui_workers import CommandWorker, WatchRelay

PATH_ROLE = Qt.ItemDataRole.UserRole
IS_DIR_ROLE = Qt.ItemDataRole.UserRole + 1


class MainWindow(QMainWindow):
    """Main window"""

    def __init__(self, commands: Optional[FileCommands] = None, store: Optional[PreferenceStore] = None):
        super().__init__()
        self.commands = commands or FileCommands()
        self.store = store or PreferenceStore()
        self.prefs: Preferences = self.store.load_preferences()
        self.directory: Optional[Path] = None
        self._workers: Set[CommandWorker] = set()

        self.relay = WatchRelay()
        self.relay.changed.connect(self._on_file_changed)

        # Several notifications in a row trigger one tree refresh
        self.refresh_timer = QTimer(self)
        self.refresh_timer.setSingleShot(True)
        self.refresh_timer.setInterval(250)
        self.refresh_timer.timeout.connect(self._refresh_tree)

        self.setWindowTitle("drawvault")
        self.setMinimumSize(700, 500)
        self._init_ui()
        self.statusBar().showMessage("Ready")

        if self.prefs.last_directory and Path(self.prefs.last_directory).is_dir():
            self._open_directory(Path(self.prefs.last_directory))

    def _init_ui(self):
        central = QWidget()
        self.setCentralWidget(central)
        layout = QVBoxLayout(central)

        # Directory selection
        dir_layout = QHBoxLayout()
        dir_layout.addWidget(QLabel("Folder:"))
        self.dir_edit = QLineEdit()
        self.dir_edit.setPlaceholderText("Select document folder...")
        self.dir_edit.returnPressed.connect(self._open_from_edit)
        dir_layout.addWidget(self.dir_edit, 1)
        self.recent_combo = QComboBox()
        self.recent_combo.setMinimumWidth(160)
        self.recent_combo.activated.connect(self._open_recent)
        dir_layout.addWidget(self.recent_combo)
        self.browse_btn = QPushButton("Browse...")
        self.browse_btn.clicked.connect(self._browse_directory)
        dir_layout.addWidget(self.browse_btn)
        layout.addLayout(dir_layout)
        self._update_recent_combo()

        # Document tree
        self.tree = QTreeWidget()
        self.tree.setHeaderLabels(["Name"])
        self.tree.itemDoubleClicked.connect(lambda item, _col: self._do_rename())
        layout.addWidget(self.tree, 1)

        # Actions
        btn_layout = QHBoxLayout()
        self.new_btn = QPushButton("New Document")
        self.new_btn.clicked.connect(self._do_new_document)
        self.folder_btn = QPushButton("New Folder")
        self.folder_btn.clicked.connect(self._do_new_folder)
        self.rename_btn = QPushButton("Rename")
        self.rename_btn.clicked.connect(self._do_rename)
        self.move_btn = QPushButton("Move...")
        self.move_btn.clicked.connect(self._do_move)
        self.delete_btn = QPushButton("Delete")
        self.delete_btn.clicked.connect(self._do_delete)
        self.refresh_btn = QPushButton("Refresh")
        self.refresh_btn.clicked.connect(self._refresh_tree)
        for btn in (self.new_btn, self.folder_btn, self.rename_btn,
                    self.move_btn, self.delete_btn, self.refresh_btn):
            btn_layout.addWidget(btn)
        layout.addLayout(btn_layout)

    # Background execution

    def _run(self, command: Callable[[], CommandResult], on_done: Callable[[CommandResult], None]):
        """Run a command on a worker thread and hand the result to on_done on the UI thread"""
        worker = CommandWorker(command)
        self._workers.add(worker)

        def finished(result: CommandResult):
            self._workers.discard(worker)
            on_done(result)

        def failed(error: str):
            self._workers.discard(worker)
            QMessageBox.critical(self, "Error", f"Operation failed: {error}")

        worker.finished.connect(finished)
        worker.error.connect(failed)
        worker.start()

    def _check(self, result: CommandResult, action: str) -> bool:
        """Show failures and warnings; return whether the command succeeded"""
        if result.warnings:
            self.statusBar().showMessage("; ".join(result.warnings))
        if not result.ok:
            QMessageBox.warning(self, "Warning", f"{action} failed: {result.message}")
            return False
        return True

    # Directory handling

    def _browse_directory(self):
        """Browse and select directory"""
        directory = QFileDialog.getExistingDirectory(self, "Select Folder")
        if directory:
            self._open_directory(Path(directory))

    def _open_from_edit(self):
        text = self.dir_edit.text().strip()
        if text:
            self._open_directory(Path(text))

    @Slot(int)
    def _open_recent(self, index: int):
        directory = self.recent_combo.itemData(index)
        if directory:
            self._open_directory(Path(directory))

    def _update_recent_combo(self):
        self.recent_combo.clear()
        self.recent_combo.addItem("Recent folders", None)
        for directory in self.prefs.recent_directories:
            self.recent_combo.addItem(Path(directory).name or directory, directory)

    def _open_directory(self, directory: Path):
        if not directory.is_dir():
            QMessageBox.warning(self, "Warning", f"Directory does not exist: {directory}")
            return

        self.directory = directory.resolve()
        self.dir_edit.setText(str(self.directory))
        self.setWindowTitle(f"drawvault - {self.directory.name}")

        self.prefs.remember_directory(str(self.directory))
        try:
            self.store.save_preferences(self.prefs)
        except OSError as e:
            self.statusBar().showMessage(f"Could not save preferences: {e}")
        self._update_recent_combo()

        directory = self.directory
        self._run(
            lambda: self.commands.watch_directory(directory, self.relay.on_change),
            lambda result: self._check(result, "Watching folder"),
        )
        self._refresh_tree()

    @Slot(str, str)
    def _on_file_changed(self, path: str, kind: str):
        self.statusBar().showMessage(f"{kind}: {Path(path).name}")
        self.refresh_timer.start()

    # Tree

    def _refresh_tree(self):
        if self.directory is None:
            return
        directory = self.directory
        self._run(lambda: self.commands.scan_tree(directory), self._on_tree_loaded)

    def _on_tree_loaded(self, result: CommandResult):
        if not self._check(result, "Loading folder"):
            return
        self.tree.clear()
        self._add_nodes(self.tree.invisibleRootItem(), result.value)
        self.tree.expandAll()
        count = sum(1 for n in result.value for x in n.walk() if not x.is_directory)
        if not result.warnings:
            self.statusBar().showMessage(f"{count} documents")

    def _add_nodes(self, parent: QTreeWidgetItem, nodes: List[TreeNode]):
        for node in nodes:
            label = f"{node.name} *" if node.modified else node.name
            item = QTreeWidgetItem([label])
            item.setData(0, PATH_ROLE, str(node.path))
            item.setData(0, IS_DIR_ROLE, node.is_directory)
            parent.addChild(item)
            if node.children:
                self._add_nodes(item, node.children)

    def _selected(self) -> Optional[QTreeWidgetItem]:
        items = self.tree.selectedItems()
        return items[0] if items else None

    def _target_directory(self) -> Optional[Path]:
        """Selected folder, the selected document's folder, or the open folder"""
        item = self._selected()
        if item is None:
            return self.directory
        path = Path(item.data(0, PATH_ROLE))
        return path if item.data(0, IS_DIR_ROLE) else path.parent

    # Actions

    def _do_new_document(self):
        directory = self._target_directory()
        if directory is None:
            return
        name, ok = QInputDialog.getText(self, "New Document", "Name:", text="Untitled")
        if not ok:
            return
        self._run(
            lambda: self.commands.create_document(directory, name),
            lambda result: self._check(result, "Create") and self._refresh_tree(),
        )

    def _do_new_folder(self):
        directory = self._target_directory()
        if directory is None:
            return
        name, ok = QInputDialog.getText(self, "New Folder", "Name:")
        if not ok:
            return
        self._run(
            lambda: self.commands.create_directory(directory, name),
            lambda result: self._check(result, "Create folder") and self._refresh_tree(),
        )

    def _do_rename(self):
        item = self._selected()
        if item is None:
            return
        path = Path(item.data(0, PATH_ROLE))
        is_dir = item.data(0, IS_DIR_ROLE)
        current = path.name if is_dir else path.stem
        name, ok = QInputDialog.getText(self, "Rename", "New name:", text=current)
        if not ok or name == current:
            return
        command = self.commands.rename_directory if is_dir else self.commands.rename_document
        self._run(
            lambda: command(path, name),
            lambda result: self._check(result, "Rename") and self._refresh_tree(),
        )

    def _do_move(self):
        item = self._selected()
        if item is None or item.data(0, IS_DIR_ROLE):
            return
        path = Path(item.data(0, PATH_ROLE))
        target = QFileDialog.getExistingDirectory(self, "Move To", str(self.directory or ""))
        if not target:
            return
        self._run(
            lambda: self.commands.move_document(path, target),
            lambda result: self._check(result, "Move") and self._refresh_tree(),
        )

    def _do_delete(self):
        item = self._selected()
        if item is None:
            return
        path = Path(item.data(0, PATH_ROLE))
        is_dir = item.data(0, IS_DIR_ROLE)
        what = f"the folder {path.name} and everything in it" if is_dir else path.name

        reply = QMessageBox.question(
            self, "Confirm",
            f"Are you sure you want to delete {what}?\n\nThis action cannot be undone!",
            QMessageBox.StandardButton.Yes | QMessageBox.StandardButton.No
        )
        if reply != QMessageBox.StandardButton.Yes:
            return

        command = self.commands.delete_directory if is_dir else self.commands.delete_document
        self._run(
            lambda: command(path),
            lambda result: self._check(result, "Delete") and self._refresh_tree(),
        )

    def closeEvent(self, event):
        self.commands.context.close()
        for worker in list(self._workers):
            worker.wait()
        super().closeEvent(event)
