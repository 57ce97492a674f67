# initwindow/controller.py

from __future__ import annotations

import asyncio
import threading
from typing import Any, Callable, Coroutine, List, Optional

from PyQt6 import QtCore

from .ui import InitWindow
from .core.autostart import AutoStartError
from .core.lifecycle import LifecycleState
from .core.logger import get_logger
from .core.launcher import format_run_result
from .core.models import App, RunResult
from .core.services import Services


class AppController(QtCore.QObject):
    """
    Main orchestrator for InitWindow:
    - Connects the window / tray to discovery, collections and the launcher.
    - Runs scans and collection launches on worker threads (asyncio.run),
      results come back to the GUI thread through signals.
    """

    scan_finished = QtCore.pyqtSignal(list)
    add_scan_finished = QtCore.pyqtSignal(str, list)
    run_finished = QtCore.pyqtSignal(str, object)
    collections_changed = QtCore.pyqtSignal()
    status_change = QtCore.pyqtSignal(str)

    def __init__(
        self,
        window: InitWindow,
        services: Services,
        lifecycle: LifecycleState,
        auto_start: bool = False,
    ):
        super().__init__()
        self.window = window
        self.services = services
        self.lifecycle = lifecycle
        self.logger = get_logger("Controller")

        self._scan_lock = threading.Lock()
        self._running_ids: set = set()
        self._running_guard = threading.Lock()

        # ---- Wire signals into UI ----
        self.scan_finished.connect(self.window.show_scan_results)
        self.add_scan_finished.connect(self.window.show_add_apps)
        self.run_finished.connect(self._on_run_finished)
        self.collections_changed.connect(self._refresh_collections)
        self.status_change.connect(self.window.set_status)

        # ---- UI -> controller ----
        self.window.scan_requested.connect(self.scan_running_processes)
        self.window.create_requested.connect(self.create_collection)
        self.window.run_requested.connect(self.run_collection)
        self.window.delete_requested.connect(self.delete_collection)
        self.window.rename_requested.connect(self.rename_collection)
        self.window.remove_app_requested.connect(self.remove_app)
        self.window.auto_start_requested.connect(self.set_auto_start)
        self.window.add_apps_requested.connect(self.scan_for_collection)
        self.window.add_apps_selected.connect(self.add_apps)
        self.window.run_at_login_requested.connect(self.set_run_at_login)
        self.window.quit_requested.connect(self.quit)

        self.window.set_run_at_login(self.services.run_at_login())
        self._refresh_collections()
        self.status_change.emit("IDLE")

        if auto_start:
            self._schedule_auto_start()

    # ------------------------------------------------------------------ #
    # Core operations
    # ------------------------------------------------------------------ #

    @QtCore.pyqtSlot()
    def scan_running_processes(self):
        self._scan(self.scan_finished.emit)

    @QtCore.pyqtSlot(str)
    def scan_for_collection(self, collection_id: str):
        """Scan for the "Add apps" dialog of an existing collection."""
        self._scan(lambda apps: self.add_scan_finished.emit(collection_id, apps))

    def _scan(self, deliver: Callable[[List[App]], None]):
        if not self._scan_lock.acquire(blocking=False):
            self.logger.info("Scan requested while a scan is running; ignoring.")
            return

        self.status_change.emit("SCANNING")

        def done(apps: Optional[List[App]]):
            self._scan_lock.release()
            self.status_change.emit("IDLE")
            deliver(apps or [])

        self._start_worker("scan", self.services.scan_running_processes, done)

    @QtCore.pyqtSlot(str)
    def run_collection(self, collection_id: str):
        with self._running_guard:
            if collection_id in self._running_ids:
                self.logger.info(f"Collection {collection_id} is already being launched; ignoring.")
                return
            self._running_ids.add(collection_id)

        self.status_change.emit("LAUNCHING")

        def done(result: Optional[RunResult]):
            with self._running_guard:
                self._running_ids.discard(collection_id)
            self.run_finished.emit(collection_id, result or RunResult.not_found())

        self._start_worker(
            f"run-{collection_id}",
            lambda: self.services.run_collection(collection_id),
            done,
        )

    def is_process_running(self, path: str) -> bool:
        """Blocking convenience wrapper, meant for callers off the GUI thread."""
        return asyncio.run(self.services.is_process_running(path))

    # ------------------------------------------------------------------ #
    # Collections
    # ------------------------------------------------------------------ #

    @QtCore.pyqtSlot(str, list)
    def create_collection(self, name: str, apps: List[App]):
        collection = self.services.collections.create(name, apps)
        self.window.notify("Collection created", f"'{collection.name}' with {len(apps)} apps.")
        self.collections_changed.emit()

    @QtCore.pyqtSlot(str)
    def delete_collection(self, collection_id: str):
        if self.services.collections.delete(collection_id):
            self.collections_changed.emit()

    @QtCore.pyqtSlot(str, str)
    def rename_collection(self, collection_id: str, name: str):
        if self.services.collections.rename(collection_id, name) is not None:
            self.collections_changed.emit()

    @QtCore.pyqtSlot(str, str)
    def remove_app(self, collection_id: str, path: str):
        if self.services.collections.remove_app(collection_id, path) is not None:
            self.collections_changed.emit()

    @QtCore.pyqtSlot(str, list)
    def add_apps(self, collection_id: str, apps: List[App]):
        if self.services.collections.add_apps(collection_id, apps) is not None:
            self.collections_changed.emit()

    @QtCore.pyqtSlot(bool)
    def set_run_at_login(self, enabled: bool):
        try:
            enabled = self.services.set_run_at_login(enabled)
        except AutoStartError as e:
            self.logger.error(f"Could not change run-at-login: {e}")
            self.window.notify("Start with Windows", str(e))
            enabled = self.services.run_at_login()
        self.window.set_run_at_login(enabled)

    @QtCore.pyqtSlot(str, bool)
    def set_auto_start(self, collection_id: str, enabled: bool):
        if enabled:
            self.services.collections.set_auto_start(collection_id)
        else:
            self.services.collections.clear_auto_start()
        self.collections_changed.emit()

    @QtCore.pyqtSlot()
    def quit(self):
        self.lifecycle.is_quitting = True
        QtCore.QCoreApplication.quit()

    # ------------------------------------------------------------------ #
    # Internal helpers
    # ------------------------------------------------------------------ #

    def _start_worker(
        self,
        name: str,
        coro_factory: Callable[[], Coroutine[Any, Any, Any]],
        done: Callable[[Any], None],
    ):
        def worker():
            result = None
            try:
                result = asyncio.run(coro_factory())
            except Exception as e:
                self.logger.error(f"Worker '{name}' failed: {e}", exc_info=True)
            finally:
                done(result)

        threading.Thread(target=worker, name=f"initwindow-{name}", daemon=True).start()

    def _schedule_auto_start(self):
        collection = self.services.collections.get_auto_start_collection()
        if collection is None:
            self.logger.info("Started with --auto-start but no auto-start collection is set.")
            return

        delay = self.services.settings().auto_start_delay
        self.lifecycle.auto_started = True
        self.logger.info(f"Auto-start collection '{collection.name}' runs in {delay}s")
        QtCore.QTimer.singleShot(int(delay * 1000), lambda: self.run_collection(collection.id))

    @QtCore.pyqtSlot(str, object)
    def _on_run_finished(self, collection_id: str, result: RunResult):
        self.status_change.emit("IDLE")
        collection = self.services.collections.get(collection_id)
        title = collection.name if collection else "Collection"
        summary = format_run_result(result)
        self.logger.info(f"Run of '{title}' finished: {summary!r}")

        if self.services.settings().show_notifications:
            self.window.notify(title, summary)
        self.window.show_run_result(title, result)

    @QtCore.pyqtSlot()
    def _refresh_collections(self):
        self.window.set_collections(self.services.collections.list())
