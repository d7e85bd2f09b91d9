"""Tests for pmplanner.storage: JSON layout, date round-trips and load fallbacks."""

from __future__ import annotations

import json
from datetime import date
from pathlib import Path

import pytest

from pmplanner.errors import StorageDecodeError
from pmplanner.io_utils import read_text, write_text
from pmplanner.storage import (
    FileBackend,
    decode_tasks,
    decode_timestamp,
    encode_tasks,
    encode_timestamp,
    load_store,
    save_store,
)
from pmplanner.store import TaskStore
from pmplanner.tasks.model import Category


class TestTimestamps:
    @pytest.mark.parametrize("d", [date(2024, 1, 1), date(2024, 2, 29), date(2030, 12, 31)])
    def test_round_trip_keeps_calendar_date(self, d):
        assert decode_timestamp(encode_timestamp(d)) == d

    def test_encoded_shape(self):
        assert encode_timestamp(date(2024, 1, 5)) == "2024-01-05T00:00:00.000Z"

    @pytest.mark.parametrize(
        "raw",
        ["2024-01-05", "2024-01-05T00:00:00.000Z", "2024-01-05T13:45:00", "2024-01-05T10:00:00+02:00"],
    )
    def test_accepted_inputs(self, raw):
        assert decode_timestamp(raw) == date(2024, 1, 5)

    @pytest.mark.parametrize("raw", ["", "yesterday", None, 20240105])
    def test_rejected_inputs(self, raw):
        with pytest.raises(StorageDecodeError):
            decode_timestamp(raw)


class TestEncodeDecode:
    def test_record_layout(self, make_task):
        text = encode_tasks([make_task("1", "Design", start="2024-01-01", end="2024-01-05",
                                       category="planning", dependencies=["0"], assignee="ana")])
        record = json.loads(text)[0]
        assert record == {
            "id": "1",
            "name": "Design",
            "startDate": "2024-01-01T00:00:00.000Z",
            "endDate": "2024-01-05T00:00:00.000Z",
            "duration": 5,
            "progress": 0,
            "category": "planning",
            "dependencies": ["0"],
            "description": "",
            "assignee": "ana",
        }

    def test_round_trip(self, make_task):
        tasks = [
            make_task("1", start="2024-01-01", end="2024-01-05", progress=30),
            make_task("2", start="2024-01-08", end="2024-01-09", category="testing", dependencies=["1"]),
        ]
        assert decode_tasks(encode_tasks(tasks)) == tasks

    def test_decode_tolerates_missing_optional_fields(self):
        text = json.dumps([{"id": 7, "name": "x", "startDate": "2024-01-01", "endDate": "2024-01-03"}])
        task = decode_tasks(text)[0]
        assert task.id == "7"
        assert task.duration == 3
        assert task.progress == 0
        assert task.category is Category.DEVELOPMENT
        assert task.dependencies == ()

    def test_stored_duration_is_recomputed(self):
        text = json.dumps([{"id": "1", "name": "x", "startDate": "2024-01-01",
                            "endDate": "2024-01-02", "duration": 40}])
        assert decode_tasks(text)[0].duration == 2

    @pytest.mark.parametrize(
        "text",
        [
            "not json",
            '{"id": "1"}',
            '[1, 2]',
            '[{"id": "1", "name": "x"}]',
            '[{"id": "1", "name": "x", "startDate": "bad", "endDate": "2024-01-01"}]',
            '[{"id": "1", "name": "x", "startDate": "2024-01-01", "endDate": "2024-01-01", "dependencies": "a"}]',
            '[{"id": "1", "name": "x", "startDate": "2024-01-01", "endDate": "2024-01-01", "progress": "lots"}]',
        ],
    )
    def test_malformed_raises(self, text):
        with pytest.raises(StorageDecodeError):
            decode_tasks(text)


class TestFileBackend:
    def test_missing_file_loads_none(self, tmp_path: Path):
        assert FileBackend(tmp_path / "none.json").load() is None

    def test_save_then_load(self, tmp_path: Path):
        backend = FileBackend(tmp_path / "nested" / "tasks.json")
        backend.save("[]\n")
        assert backend.load() == "[]\n"
        assert list((tmp_path / "nested").iterdir()) == [tmp_path / "nested" / "tasks.json"]

    def test_save_failure_is_swallowed(self, tmp_path: Path):
        blocker = tmp_path / "file"
        write_text(blocker, "x")
        FileBackend(blocker / "tasks.json").save("[]")  # parent is a file
        assert read_text(blocker) == "x"


class TestLoadStore:
    def test_no_state_is_empty(self, tmp_path: Path):
        assert len(load_store(FileBackend(tmp_path / "t.json"))) == 0

    def test_malformed_state_is_empty(self, tmp_path: Path, capsys):
        path = tmp_path / "t.json"
        write_text(path, "{broken")
        store = load_store(FileBackend(path))
        assert len(store) == 0
        assert "WARN" in capsys.readouterr().out
        assert read_text(path) == "{broken"

    def test_save_and_reload(self, tmp_path: Path, make_task):
        backend = FileBackend(tmp_path / "t.json")
        store = TaskStore([make_task("1", start="2024-03-01", end="2024-03-04", progress=50)])
        save_store(backend, store)
        again = load_store(backend)
        assert again.tasks == store.tasks

    def test_reads_browser_export(self, tmp_path: Path):
        """Data copied out of the web planner's local storage loads as-is."""
        path = tmp_path / "t.json"
        write_text(path, json.dumps([
            {"id": "1704067200000", "name": "Kickoff", "startDate": "2024-01-01T00:00:00.000Z",
             "endDate": "2024-01-02T00:00:00.000Z", "duration": 2, "progress": 100,
             "category": "planning", "dependencies": [], "description": "", "assignee": ""},
        ]))
        task = load_store(FileBackend(path)).require("1704067200000")
        assert task.start_date == date(2024, 1, 1)
        assert task.progress == 100

    def test_duplicate_ids_keep_latest_record(self, tmp_path: Path, capsys):
        path = tmp_path / "t.json"
        write_text(path, json.dumps([
            {"id": "1", "name": "Old", "startDate": "2024-01-01", "endDate": "2024-01-02"},
            {"id": "2", "name": "Other", "startDate": "2024-01-03", "endDate": "2024-01-04"},
            {"id": "1", "name": "New", "startDate": "2024-01-05", "endDate": "2024-01-06"},
        ]))
        store = load_store(FileBackend(path))
        assert [t.name for t in store.tasks] == ["Other", "New"]
        assert "duplicate task id 1" in capsys.readouterr().out

        store.delete("1")
        assert len(store) == 1
