import asyncio

from conftest import FakeBackend, FakeCollections, make_app, make_collection

from initwindow.core.launcher import LaunchOrchestrator, format_run_result
from initwindow.core.models import RunResult, RunResultItem

A = r"C:\Missing\a.exe"
B = r"C:\Running\b.exe"
C = r"C:\Launchable\c.exe"


def make_orchestrator(backend, *collections, missing=(), delay=0.5):
    async def fake_sleep(seconds):
        backend.events.append(("sleep", seconds))

    return LaunchOrchestrator(
        FakeCollections(*collections),
        backend,
        launch_delay=delay,
        path_exists=lambda p: p not in missing,
        sleep=fake_sleep,
    )


def test_missing_running_and_launchable():
    backend = FakeBackend(running={B})
    collection = make_collection("c1", [make_app("A", A), make_app("B", B), make_app("C", C)])
    orchestrator = make_orchestrator(backend, collection, missing={A})

    result = asyncio.run(orchestrator.run("c1"))

    assert result == RunResult(
        launched=["C"],
        skipped=[RunResultItem(app="B", reason="Already running")],
        failed=[RunResultItem(app="A", reason="Executable not found")],
    )
    # the only pause is the one right after C started
    assert backend.events == [("start", C), ("sleep", 0.5)]


def test_unknown_collection():
    orchestrator = make_orchestrator(FakeBackend())
    result = asyncio.run(orchestrator.run("nonexistent"))
    assert result == RunResult(
        launched=[],
        skipped=[],
        failed=[RunResultItem(app="Unknown", reason="Collection not found")],
    )


def test_lookup_error_treated_as_not_found():
    class Exploding:
        def get(self, collection_id):
            raise RuntimeError("store locked")

    orchestrator = LaunchOrchestrator(Exploding(), FakeBackend())
    result = asyncio.run(orchestrator.run("c1"))
    assert result == RunResult.not_found()


def test_launch_order_and_delay_per_launch():
    backend = FakeBackend()
    paths = [r"C:\One\1.exe", r"C:\Two\2.exe", r"C:\Three\3.exe"]
    apps = [make_app(f"app{i}", p) for i, p in enumerate(paths)]
    orchestrator = make_orchestrator(backend, make_collection("c1", apps), delay=0.25)

    result = asyncio.run(orchestrator.run("c1"))

    assert result.launched == ["app0", "app1", "app2"]
    assert backend.events == [
        ("start", paths[0]), ("sleep", 0.25),
        ("start", paths[1]), ("sleep", 0.25),
        ("start", paths[2]), ("sleep", 0.25),
    ]


def test_start_failure_records_message_without_delay():
    bad = r"C:\Bad\bad.exe"
    backend = FakeBackend(start_errors={bad: PermissionError("Access is denied")})
    collection = make_collection("c1", [make_app("Bad", bad), make_app("C", C)])
    orchestrator = make_orchestrator(backend, collection)

    result = asyncio.run(orchestrator.run("c1"))

    assert result.failed == [RunResultItem(app="Bad", reason="Access is denied")]
    assert result.launched == ["C"]
    assert backend.events == [("start", C), ("sleep", 0.5)]


def test_start_failure_without_message():
    bad = r"C:\Bad\bad.exe"
    backend = FakeBackend(start_errors={bad: OSError()})
    orchestrator = make_orchestrator(backend, make_collection("c1", [make_app("Bad", bad)]))

    result = asyncio.run(orchestrator.run("c1"))

    assert result.failed == [RunResultItem(app="Bad", reason="Unknown error")]
    assert backend.events == []


def test_running_check_error_counts_as_not_running():
    class FlakyCheck(FakeBackend):
        def is_running(self, path):
            raise RuntimeError("psutil hiccup")

    backend = FlakyCheck()
    orchestrator = make_orchestrator(backend, make_collection("c1", [make_app("C", C)]))
    assert asyncio.run(orchestrator.run("c1")).launched == ["C"]
    assert asyncio.run(orchestrator.is_process_running(C)) is False


def test_empty_path_is_not_found():
    backend = FakeBackend()
    orchestrator = LaunchOrchestrator(
        FakeCollections(make_collection("c1", [make_app("Blank", "")])),
        backend,
        path_exists=lambda p: True,
    )
    result = asyncio.run(orchestrator.run("c1"))
    assert result.failed == [RunResultItem(app="Blank", reason="Executable not found")]


def test_empty_collection():
    orchestrator = make_orchestrator(FakeBackend(), make_collection("c1", []))
    assert asyncio.run(orchestrator.run("c1")) == RunResult()


def test_is_process_running_uses_backend():
    orchestrator = make_orchestrator(FakeBackend(running={B}))
    assert asyncio.run(orchestrator.is_process_running(B)) is True
    assert asyncio.run(orchestrator.is_process_running(C)) is False


def test_format_run_result():
    result = RunResult(
        launched=["C"],
        skipped=[RunResultItem(app="B", reason="Already running")],
        failed=[RunResultItem(app="A", reason="Executable not found")],
    )
    assert format_run_result(result) == (
        "Launched: C\n"
        "Skipped: B (Already running)\n"
        "Failed: A (Executable not found)"
    )
    assert format_run_result(RunResult()) == "Nothing to launch."
