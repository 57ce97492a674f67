import pytest

from initwindow.core.models import App, Collection, RawProcess


class FakeBackend:
    """In-memory ProcessBackend: records what the engine asked the OS to do."""

    def __init__(self, processes=None, running=(), start_errors=None, icons=None):
        self.processes = list(processes or [])
        self.running = set(running)
        self.start_errors = dict(start_errors or {})
        self.icons = dict(icons or {})
        self.started = []
        self.icon_calls = []
        self.events = []

    def list_processes(self):
        return list(self.processes)

    def is_running(self, path):
        return path in self.running

    def start_process(self, path):
        if path in self.start_errors:
            raise self.start_errors[path]
        self.started.append(path)
        self.events.append(("start", path))

    def extract_icon(self, path):
        self.icon_calls.append(path)
        return self.icons.get(path)


class FakeCollections:
    def __init__(self, *collections):
        self._by_id = {c.id: c for c in collections}

    def get(self, collection_id):
        return self._by_id.get(collection_id)


def make_app(name, path, app_id=None):
    return App(id=app_id or f"id-{name}", name=name, path=path)


def make_collection(collection_id, apps, name="Work"):
    return Collection(id=collection_id, name=name, apps=list(apps))


def proc(name, path):
    return RawProcess(name=name, path=path)


@pytest.fixture
def backend():
    return FakeBackend()


class FakeWinreg:
    HKEY_CURRENT_USER = "HKCU"
    KEY_READ = 1
    KEY_SET_VALUE = 2
    REG_SZ = 1

    def __init__(self, fail_open=False):
        self.values = {}
        self.fail_open = fail_open

    def OpenKey(self, hive, path, reserved, access):
        if self.fail_open:
            raise PermissionError("Access is denied")
        return (hive, path)

    def CloseKey(self, key):
        pass

    def SetValueEx(self, key, name, reserved, value_type, value):
        self.values[name] = value

    def DeleteValue(self, key, name):
        if name not in self.values:
            raise FileNotFoundError(name)
        del self.values[name]

    def QueryValueEx(self, key, name):
        if name not in self.values:
            raise FileNotFoundError(name)
        return self.values[name], self.REG_SZ
