import json

from initwindow.core.config import Settings
from initwindow.core.models import App, Collection
from initwindow.core.storage import StorageService


def test_missing_file_gives_defaults(tmp_path):
    storage = StorageService(tmp_path / "data.json")
    assert storage.get_collections() == []
    assert storage.get_settings() == Settings()
    assert not (tmp_path / "data.json").exists()


def test_corrupt_file_is_left_alone(tmp_path):
    path = tmp_path / "data.json"
    path.write_text("{not json", encoding="utf-8")

    storage = StorageService(path)

    assert storage.load() is False
    assert storage.get_collections() == []
    assert path.read_text(encoding="utf-8") == "{not json"


def test_wrong_shapes_ignored(tmp_path):
    path = tmp_path / "data.json"
    path.write_text(json.dumps({"collections": {"a": 1}, "settings": [1, 2]}), encoding="utf-8")
    storage = StorageService(path)
    assert storage.get_collections() == []
    assert storage.get_settings() == Settings()


def test_old_settings_get_new_defaults(tmp_path):
    path = tmp_path / "data.json"
    path.write_text(json.dumps({
        "collections": [],
        "settings": {"auto_start_delay": 30, "show_notifications": False},
    }), encoding="utf-8")

    settings = StorageService(path).get_settings()

    assert settings.auto_start_delay == 30
    assert settings.show_notifications is False
    assert settings.excluded_process_names == []
    assert settings.excluded_paths == []


def test_save_settings_merges_partial(tmp_path):
    storage = StorageService(tmp_path / "data.json")
    storage.save_settings({"auto_start_delay": 5})
    merged = storage.save_settings({"excluded_paths": ["D:\\Games"]})

    assert merged.auto_start_delay == 5
    assert merged.excluded_paths == ["D:\\Games"]
    assert StorageService(tmp_path / "data.json").get_settings() == merged


def test_collections_round_trip(tmp_path):
    storage = StorageService(tmp_path / "data.json")
    collection = Collection(
        id="c1",
        name="Dev",
        apps=[App(id="a1", name="Code", path=r"C:\VSCode\Code.exe", icon="x.png")],
        is_auto_start=True,
    )
    assert storage.save_collections([collection]) is True

    reopened = StorageService(tmp_path / "data.json")
    assert reopened.get_collections() == [collection]
    assert reopened.get_all()["collections"] == [collection]
    assert [p.name for p in tmp_path.iterdir()] == ["data.json"]


def test_save_failure_returns_false(tmp_path):
    blocker = tmp_path / "blocker"
    blocker.write_text("file, not a directory", encoding="utf-8")
    storage = StorageService(blocker / "data.json")
    assert storage.save() is False
