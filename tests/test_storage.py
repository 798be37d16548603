"""Persistence store tests."""
import json

from sticky_notes.storage import (CONFIG_FILENAME, DEFAULT_CONFIG, DEFAULT_HOTKEY,
                                  NOTES_FILENAME, NoteStore, clamp_font_size,
                                  clamp_opacity)


def test_fresh_store_returns_defaults(store):
    notes = store.read_notes()
    assert len(notes) == 1
    assert notes[0]["id"] == "default"
    assert notes[0]["content"] == ""

    config = store.read_config()
    assert config["width"] == 300
    assert config["height"] == 400
    assert config["opacity"] == 0.8
    assert config["fontSize"] == 14
    assert config["hotkey"] == DEFAULT_HOTKEY == "CommandOrControl+\\"
    assert config["autoLaunch"] is False


def test_corrupt_documents_fall_back_to_defaults(store):
    store.data_dir.mkdir(parents=True)
    (store.data_dir / CONFIG_FILENAME).write_text("{not json", encoding="utf-8")
    (store.data_dir / NOTES_FILENAME).write_text("[1, 2", encoding="utf-8")

    assert store.read_config() == DEFAULT_CONFIG
    assert [n["id"] for n in store.read_notes()] == ["default"]


def test_empty_or_wrongly_typed_notes_document(store):
    store.data_dir.mkdir(parents=True)
    (store.data_dir / NOTES_FILENAME).write_text("[]", encoding="utf-8")
    assert [n["id"] for n in store.read_notes()] == ["default"]

    (store.data_dir / NOTES_FILENAME).write_text('{"id": "x"}', encoding="utf-8")
    assert [n["id"] for n in store.read_notes()] == ["default"]


def test_partial_config_file_is_laid_over_defaults(store):
    store.data_dir.mkdir(parents=True)
    (store.data_dir / CONFIG_FILENAME).write_text('{"x": 5, "y": 6, "width": 320}')
    config = store.read_config()
    assert (config["x"], config["y"], config["width"]) == (5, 6, 320)
    assert config["hotkey"] == DEFAULT_HOTKEY


def test_write_config_merges_with_persisted_values(store):
    store.write_config({"width": 500, "x": 40})
    store.write_config({"hotkey": "Alt+X"})

    config = store.read_config()
    assert config["width"] == 500
    assert config["x"] == 40
    assert config["hotkey"] == "Alt+X"
    assert config["height"] == 400


def test_write_config_clamps_and_enforces_minimum_size(store):
    store.write_config({"opacity": 5.0, "fontSize": 1, "width": 10, "height": 20})
    config = store.read_config()
    assert config["opacity"] == 1.0
    assert config["fontSize"] == 12
    assert config["width"] == 200
    assert config["height"] == 150


def test_clamp_helpers():
    assert clamp_opacity(5.0) == 1.0
    assert clamp_opacity(0.0) == 0.3
    assert clamp_opacity(0.55) == 0.55
    assert clamp_font_size(1) == 12
    assert clamp_font_size(99) == 24
    assert clamp_font_size(16) == 16


def test_documents_are_pretty_printed_json(store):
    store.write_config({"width": 320})
    store.save_note({"id": "n1", "content": "héllo"})

    raw = (store.data_dir / NOTES_FILENAME).read_text(encoding="utf-8")
    assert raw.startswith("[\n  {")
    assert "héllo" in raw
    assert json.loads((store.data_dir / CONFIG_FILENAME).read_text())["width"] == 320


def test_save_note_updates_in_place(store):
    store.save_note({"id": "n1", "content": "first", "hotkey": "Alt+1"})
    store.save_note({"id": "n1", "content": "second"})

    notes = store.read_notes()
    assert [n["id"] for n in notes] == ["default", "n1"]
    assert notes[1]["content"] == "second"
    assert notes[1]["hotkey"] == "Alt+1"


def test_save_new_note_appends_exactly_one(store):
    store.save_note({"id": "a", "content": ""})
    store.save_note({"id": "b", "content": ""})
    assert [n["id"] for n in store.read_notes()] == ["default", "a", "b"]


def test_timestamps_are_stamped_by_the_store(store):
    store.save_note({"id": "n1", "content": "x", "createdAt": "1999", "updatedAt": "1999"})
    first = store.read_notes()[-1]
    assert first["createdAt"] != "1999"
    assert first["createdAt"] == first["updatedAt"]
    assert first["createdAt"].endswith("Z")

    store.save_note({"id": "n1", "content": "y", "createdAt": "2999-01-01T00:00:00.000Z"})
    second = store.read_notes()[-1]
    assert second["createdAt"] == first["createdAt"]
    assert second["updatedAt"] >= first["updatedAt"]


def test_updated_at_never_goes_backwards(store):
    store.data_dir.mkdir(parents=True)
    future = "2999-01-01T00:00:00.000Z"
    (store.data_dir / NOTES_FILENAME).write_text(json.dumps([
        {"id": "n1", "content": "", "createdAt": future, "updatedAt": future},
    ]))
    store.save_note({"id": "n1", "content": "later"})
    assert store.read_notes()[0]["updatedAt"] == future


def test_deleting_every_note_leaves_the_default(store):
    for note_id in ("a", "b", "c"):
        store.save_note({"id": note_id, "content": note_id})
    for note in list(store.read_notes()):
        store.delete_note(note["id"])

    notes = store.read_notes()
    assert [n["id"] for n in notes] == ["default"]
    assert notes[0]["content"] == ""


def test_delete_returns_the_removed_note(store):
    store.save_note({"id": "n1", "content": "x", "hotkey": "Alt+1", "isGlobalHotkey": True})
    deleted, remaining, ok = store.delete_note("n1")
    assert ok
    assert deleted["hotkey"] == "Alt+1"
    assert [n["id"] for n in remaining] == ["default"]

    deleted, remaining, ok = store.delete_note("missing")
    assert deleted is None


def test_write_failures_are_reported(tmp_path):
    store = NoteStore(tmp_path)
    # a directory where the file should be makes every write fail
    store.notes_file.mkdir()
    store.config_file.mkdir()

    assert store.write_notes([{"id": "x"}]) is False
    assert store.save_note({"id": "x", "content": ""}) is False
    store.write_config({"width": 320})
    assert store.read_config() == DEFAULT_CONFIG


def test_out_of_range_and_mistyped_config_is_normalized(store):
    store.data_dir.mkdir(parents=True)
    (store.data_dir / CONFIG_FILENAME).write_text(json.dumps({
        "width": 50, "height": 10, "opacity": 7, "fontSize": 99,
        "x": "12.7", "y": [1], "hotkey": 5, "autoLaunch": 1,
    }))
    config = store.read_config()
    assert (config["width"], config["height"]) == (200, 150)
    assert config["opacity"] == 1.0
    assert config["fontSize"] == 24
    assert (config["x"], config["y"]) == (12, None)
    assert config["hotkey"] == DEFAULT_HOTKEY
    assert config["autoLaunch"] is True

    (store.data_dir / CONFIG_FILENAME).write_text(
        '{"width": null, "height": "tall", "opacity": "dim", "fontSize": null}')
    config = store.read_config()
    assert (config["width"], config["height"]) == (300, 400)
    assert config["opacity"] == 0.8
    assert config["fontSize"] == 14


def test_unknown_position_is_not_written(store):
    store.write_config({"width": 320})
    document = json.loads(store.config_file.read_text(encoding="utf-8"))
    assert "x" not in document
    assert "y" not in document
    assert store.read_config()["x"] is None

    store.write_config({"x": 0, "y": 15})
    document = json.loads(store.config_file.read_text(encoding="utf-8"))
    assert (document["x"], document["y"]) == (0, 15)
