# initwindow/ui.py

from __future__ import annotations

from typing import Callable, List, Optional

from PyQt6.QtCore import Qt, pyqtSignal
from PyQt6.QtGui import QAction, QCloseEvent, QIcon
from PyQt6.QtWidgets import (
    QCheckBox,
    QDialog,
    QDialogButtonBox,
    QFrame,
    QHBoxLayout,
    QInputDialog,
    QLabel,
    QLineEdit,
    QListWidget,
    QListWidgetItem,
    QMainWindow,
    QMenu,
    QPushButton,
    QStyle,
    QSystemTrayIcon,
    QVBoxLayout,
    QWidget,
)

from .core.collection_service import apps_not_in
from .core.lifecycle import LifecycleState
from .core.models import App, Collection, RunResult

ROLE_ID = Qt.ItemDataRole.UserRole


# -----------------------------------------------------------------------------
# Capture dialog: pick running apps for a new collection
# -----------------------------------------------------------------------------

class CaptureDialog(QDialog):
    def __init__(
        self,
        apps: List[App],
        parent: Optional[QWidget] = None,
        title: str = "New collection",
        ask_name: bool = True,
    ):
        super().__init__(parent)
        self.setWindowTitle(title)
        self._apps = apps

        layout = QVBoxLayout(self)

        self.name_input = QLineEdit()
        self.name_input.setPlaceholderText("Collection name")
        self.name_input.setVisible(ask_name)
        layout.addWidget(self.name_input)

        if apps:
            hint = QLabel(f"{len(apps)} running apps found. Tick the ones to keep.")
        else:
            hint = QLabel("No apps found.")
        layout.addWidget(hint)

        self.app_list = QListWidget()
        for index, app in enumerate(apps):
            item = QListWidgetItem(app.name)
            item.setToolTip(app.path)
            if app.icon:
                item.setIcon(QIcon(app.icon))
            item.setFlags(item.flags() | Qt.ItemFlag.ItemIsUserCheckable)
            item.setCheckState(Qt.CheckState.Unchecked)
            item.setData(ROLE_ID, index)
            self.app_list.addItem(item)
        layout.addWidget(self.app_list, stretch=1)

        buttons = QDialogButtonBox(
            QDialogButtonBox.StandardButton.Ok | QDialogButtonBox.StandardButton.Cancel
        )
        buttons.accepted.connect(self.accept)
        buttons.rejected.connect(self.reject)
        layout.addWidget(buttons)

    def selected_apps(self) -> List[App]:
        selected: List[App] = []
        for row in range(self.app_list.count()):
            item = self.app_list.item(row)
            if item.checkState() == Qt.CheckState.Checked:
                selected.append(self._apps[item.data(ROLE_ID)])
        return selected

    def collection_name(self) -> str:
        return self.name_input.text().strip()


# -----------------------------------------------------------------------------
# Main window
# -----------------------------------------------------------------------------

class InitWindow(QMainWindow):
    """
    Main InitWindow UI window.

    Layout:
    - Top:    status label
    - Center: collections (left) and apps of the selected collection (right)
    - Bottom: New / Run / Rename / Delete / Add apps / Remove app, auto-start checkbox

    Closing the window hides it to the tray; "Quit" in the tray menu exits.
    "Add apps" rescans and offers only running apps not in the collection yet.
    """

    scan_requested = pyqtSignal()
    create_requested = pyqtSignal(str, list)
    run_requested = pyqtSignal(str)
    delete_requested = pyqtSignal(str)
    rename_requested = pyqtSignal(str, str)
    remove_app_requested = pyqtSignal(str, str)
    auto_start_requested = pyqtSignal(str, bool)
    add_apps_requested = pyqtSignal(str)
    add_apps_selected = pyqtSignal(str, list)
    run_at_login_requested = pyqtSignal(bool)
    quit_requested = pyqtSignal()

    BLUE = "#3B82F6"
    DARK = "#111827"
    LIGHT = "#F9FAFB"

    def __init__(self, lifecycle: LifecycleState, minimize_to_tray: Callable[[], bool]):
        super().__init__()
        self.lifecycle = lifecycle
        self._minimize_to_tray = minimize_to_tray
        self._collections: List[Collection] = []

        self.setWindowTitle("InitWindow")
        self.resize(720, 480)

        central = QWidget(self)
        self.setCentralWidget(central)
        root_layout = QVBoxLayout(central)
        root_layout.setContentsMargins(8, 8, 8, 8)
        root_layout.setSpacing(6)

        # ---- Status ----------------------------------------------------------
        self.status_label = QLabel("STATUS: IDLE")
        self.status_label.setObjectName("statusLabel")
        root_layout.addWidget(self.status_label)

        # ---- Center ----------------------------------------------------------
        center_frame = QFrame()
        center_layout = QHBoxLayout(center_frame)
        center_layout.setContentsMargins(0, 0, 0, 0)

        self.collection_list = QListWidget()
        self.collection_list.setObjectName("collectionList")
        self.collection_list.currentRowChanged.connect(self._on_collection_selected)

        self.app_list = QListWidget()
        self.app_list.setObjectName("appList")

        center_layout.addWidget(self.collection_list, stretch=1)
        center_layout.addWidget(self.app_list, stretch=2)
        root_layout.addWidget(center_frame, stretch=1)

        # ---- Buttons ---------------------------------------------------------
        button_frame = QFrame()
        button_layout = QHBoxLayout(button_frame)
        button_layout.setContentsMargins(0, 0, 0, 0)

        self.new_button = QPushButton("New from running apps")
        self.new_button.clicked.connect(self._on_new_clicked)
        self.run_button = QPushButton("Run")
        self.run_button.clicked.connect(self._on_run_clicked)
        self.rename_button = QPushButton("Rename")
        self.rename_button.clicked.connect(self._on_rename_clicked)
        self.delete_button = QPushButton("Delete")
        self.delete_button.clicked.connect(self._on_delete_clicked)
        self.add_apps_button = QPushButton("Add apps")
        self.add_apps_button.clicked.connect(self._on_add_apps_clicked)
        self.remove_app_button = QPushButton("Remove app")
        self.remove_app_button.clicked.connect(self._on_remove_app_clicked)
        self.auto_start_box = QCheckBox("Run on startup")
        self.auto_start_box.clicked.connect(self._on_auto_start_clicked)

        for w in (self.new_button, self.run_button, self.rename_button,
                  self.delete_button, self.add_apps_button, self.remove_app_button):
            button_layout.addWidget(w)
        button_layout.addStretch(1)
        button_layout.addWidget(self.auto_start_box)
        root_layout.addWidget(button_frame)

        # ---- Tray ------------------------------------------------------------
        icon = self.style().standardIcon(QStyle.StandardPixmap.SP_ComputerIcon)
        self.setWindowIcon(icon)
        self.tray = QSystemTrayIcon(icon, self)
        self.tray.setToolTip("InitWindow")
        self.tray.activated.connect(self._on_tray_activated)
        self.tray_menu = QMenu()
        # Owned by the window so tray menu rebuilds keep it alive
        self.login_action = QAction("Start with Windows", self)
        self.login_action.setCheckable(True)
        self.login_action.toggled.connect(self.run_at_login_requested.emit)
        self.tray.setContextMenu(self.tray_menu)
        self.tray.show()

        self._apply_styles()
        self._update_buttons()

    # ------------------------------------------------------------------ #
    # Public methods used by controller
    # ------------------------------------------------------------------ #

    def set_collections(self, collections: List[Collection]):
        current = self._selected_collection()
        current_id = current.id if current else None

        self._collections = list(collections)
        self.collection_list.blockSignals(True)
        self.collection_list.clear()
        selected_row = -1
        for row, c in enumerate(self._collections):
            label = f"{c.name} ★" if c.is_auto_start else c.name
            item = QListWidgetItem(label)
            item.setData(ROLE_ID, c.id)
            self.collection_list.addItem(item)
            if c.id == current_id:
                selected_row = row
        self.collection_list.blockSignals(False)

        if selected_row < 0 and self._collections:
            selected_row = 0
        self.collection_list.setCurrentRow(selected_row)
        self._on_collection_selected(selected_row)
        self._rebuild_tray_menu()

    def show_scan_results(self, apps: List[App]):
        dialog = CaptureDialog(apps, self)
        if dialog.exec() != QDialog.DialogCode.Accepted:
            return
        selected = dialog.selected_apps()
        if not selected:
            self.set_status("NO APPS SELECTED")
            return
        self.create_requested.emit(dialog.collection_name(), selected)

    def show_run_result(self, title: str, result: RunResult):
        self.set_status(
            f"{title}: {len(result.launched)} launched, "
            f"{len(result.skipped)} skipped, {len(result.failed)} failed"
        )

    def show_add_apps(self, collection_id: str, apps: List[App]):
        collection = next((c for c in self._collections if c.id == collection_id), None)
        if collection is None:
            return
        dialog = CaptureDialog(
            apps_not_in(collection, apps),
            self,
            title=f"Add apps to {collection.name}",
            ask_name=False,
        )
        if dialog.exec() != QDialog.DialogCode.Accepted:
            return
        selected = dialog.selected_apps()
        if selected:
            self.add_apps_selected.emit(collection_id, selected)

    def set_run_at_login(self, enabled: bool):
        self.login_action.blockSignals(True)
        self.login_action.setChecked(enabled)
        self.login_action.blockSignals(False)

    def set_status(self, text: str):
        self.status_label.setText(f"STATUS: {text}")

    def notify(self, title: str, message: str):
        if QSystemTrayIcon.supportsMessages():
            self.tray.showMessage(title, message, QSystemTrayIcon.MessageIcon.Information, 5000)

    # ------------------------------------------------------------------ #
    # Input handlers
    # ------------------------------------------------------------------ #

    def _on_new_clicked(self):
        self.scan_requested.emit()

    def _on_run_clicked(self):
        c = self._selected_collection()
        if c:
            self.run_requested.emit(c.id)

    def _on_rename_clicked(self):
        c = self._selected_collection()
        if not c:
            return
        name, ok = QInputDialog.getText(self, "Rename collection", "Name:", text=c.name)
        if ok and name.strip():
            self.rename_requested.emit(c.id, name.strip())

    def _on_delete_clicked(self):
        c = self._selected_collection()
        if c:
            self.delete_requested.emit(c.id)

    def _on_add_apps_clicked(self):
        c = self._selected_collection()
        if c:
            self.add_apps_requested.emit(c.id)

    def _on_remove_app_clicked(self):
        c = self._selected_collection()
        item = self.app_list.currentItem()
        if c and item:
            self.remove_app_requested.emit(c.id, item.data(ROLE_ID))

    def _on_auto_start_clicked(self, checked: bool):
        c = self._selected_collection()
        if c:
            self.auto_start_requested.emit(c.id, checked)

    def _on_collection_selected(self, row: int):
        self.app_list.clear()
        c = self._collections[row] if 0 <= row < len(self._collections) else None
        if c:
            for app in c.apps:
                item = QListWidgetItem(app.name)
                item.setToolTip(app.path)
                item.setData(ROLE_ID, app.path)
                if app.icon:
                    item.setIcon(QIcon(app.icon))
                self.app_list.addItem(item)
        self.auto_start_box.setChecked(bool(c and c.is_auto_start))
        self._update_buttons()

    def _on_tray_activated(self, reason: QSystemTrayIcon.ActivationReason):
        if reason != QSystemTrayIcon.ActivationReason.Trigger:
            return
        if self.isVisible():
            self.hide()
        else:
            self._show_window()

    # ------------------------------------------------------------------ #
    # Internal helpers
    # ------------------------------------------------------------------ #

    def closeEvent(self, event: QCloseEvent):
        if self.lifecycle.is_quitting or not self._minimize_to_tray():
            event.accept()
            self.quit_requested.emit()
            return
        event.ignore()
        self.hide()

    def _selected_collection(self) -> Optional[Collection]:
        row = self.collection_list.currentRow()
        if 0 <= row < len(self._collections):
            return self._collections[row]
        return None

    def _update_buttons(self):
        has_selection = self._selected_collection() is not None
        for w in (self.run_button, self.rename_button, self.delete_button,
                  self.add_apps_button, self.remove_app_button, self.auto_start_box):
            w.setEnabled(has_selection)

    def _show_window(self):
        self.show()
        self.raise_()
        self.activateWindow()

    def _rebuild_tray_menu(self):
        menu = self.tray_menu
        menu.clear()

        collections_menu = menu.addMenu("Collections")
        for c in self._collections:
            label = f"▶ {c.name}" + (" ★" if c.is_auto_start else "")
            action = QAction(label, collections_menu)
            action.triggered.connect(lambda _checked=False, cid=c.id: self.run_requested.emit(cid))
            collections_menu.addAction(action)
        if self._collections:
            collections_menu.addSeparator()
        collections_menu.addAction("Manage Collections...", self._show_window)

        menu.addSeparator()
        menu.addAction(self.login_action)
        menu.addAction("Open InitWindow", self._show_window)
        menu.addSeparator()
        menu.addAction("Quit", self.quit_requested.emit)

    def _apply_styles(self):
        self.setStyleSheet(f"""
        QWidget {{
            background-color: {self.DARK};
            color: {self.LIGHT};
            font-size: 10pt;
        }}
        QListWidget {{
            border: 1px solid {self.BLUE};
        }}
        QPushButton {{
            border: 1px solid {self.BLUE};
            padding: 4px 10px;
        }}
        QPushButton:hover {{
            background-color: {self.BLUE};
        }}
        QPushButton:disabled {{
            color: #6B7280;
            border-color: #374151;
        }}
        QLabel#statusLabel {{
            font-weight: bold;
        }}
        """)
