import subprocess

import psutil
import pytest

from initwindow.core.models import RawProcess
from initwindow.core.process_backend import PsutilProcessBackend, same_path


class FakeProc:
    def __init__(self, name=None, exe=None, error=None):
        self._info = {"name": name, "exe": exe}
        self._error = error

    @property
    def info(self):
        if self._error is not None:
            raise self._error
        return self._info


@pytest.fixture
def processes(monkeypatch):
    listing = []
    monkeypatch.setattr(psutil, "process_iter", lambda attrs=None: iter(listing))
    return listing


def test_same_path_ignores_case_and_slashes():
    assert same_path("C:/App/App.EXE", r"c:\app\app.exe")
    assert not same_path(r"C:\App\app.exe", r"D:\App\app.exe")


def test_listing_blanks_missing_fields_and_skips_vanished(processes):
    processes.extend([
        FakeProc("App.EXE", "C:/App/App.EXE"),
        FakeProc(None, None),
        FakeProc("System", None),
        FakeProc(error=psutil.NoSuchProcess(101)),
        FakeProc(error=psutil.AccessDenied(102)),
        FakeProc(error=psutil.ZombieProcess(103)),
    ])

    assert PsutilProcessBackend().list_processes() == [
        RawProcess(name="App.EXE", path="C:/App/App.EXE"),
        RawProcess(name="", path=""),
        RawProcess(name="System", path=""),
    ]


def test_is_running_matches_full_path_case_and_slash_insensitive(processes):
    processes.extend([
        FakeProc(error=psutil.AccessDenied(4)),
        FakeProc("app.exe", None),
        FakeProc("App.EXE", "C:/App/App.EXE"),
    ])
    backend = PsutilProcessBackend()

    assert backend.is_running(r"c:\app\app.exe") is True
    assert backend.is_running(r"C:\APP\App.exe") is True


def test_same_image_name_elsewhere_is_not_running(processes):
    processes.append(FakeProc("App.EXE", "C:/App/App.EXE"))
    backend = PsutilProcessBackend()

    assert backend.is_running(r"D:\Portable\App\app.exe") is False
    assert backend.is_running(r"C:\App\other.exe") is False


def test_nothing_running(processes):
    assert PsutilProcessBackend().is_running(r"C:\App\app.exe") is False


def test_start_failure_propagates(monkeypatch):
    def refuse(*args, **kwargs):
        raise FileNotFoundError(2, "The system cannot find the file specified")

    monkeypatch.setattr(subprocess, "Popen", refuse)
    with pytest.raises(OSError):
        PsutilProcessBackend().start_process(r"C:\Gone\gone.exe")
