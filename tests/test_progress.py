import json
import logging

import pytest

from aocauto.progress import DayProgress
from aocauto.progress import ProgressStore
from aocauto.responses import Outcome


@pytest.fixture
def store(aocauto_data_dir):
    s = ProgressStore(2022, aocauto_data_dir)
    s.load(3)
    return s


def test_fresh_state_when_nothing_saved(store):
    progress = store.progress
    assert progress.day == 3
    assert not progress.first.solved
    assert progress.first.attempts == []
    assert progress.first.low is None
    assert progress.second.high is None


def test_state_file_name(store, aocauto_data_dir):
    assert store.path_for(3) == aocauto_data_dir / "2022_03_state.json"


def test_save_load_roundtrip(store, aocauto_data_dir):
    store.record_attempt(1, "10")
    store.update_bounds(1, 10, Outcome.TOO_LOW)
    store.record_attempt(1, "30")
    store.update_bounds(1, 30, Outcome.TOO_HIGH)
    store.record_attempt(1, "20")
    store.mark_solved(1, "20")
    store.save()
    reloaded = ProgressStore(2022, aocauto_data_dir).load(3)
    assert reloaded == store.progress
    assert reloaded.first.attempts == ["10", "30", "20"]
    assert reloaded.first.low == 10
    assert reloaded.first.high == 30
    assert reloaded.first.solved
    assert reloaded.first.answer == "20"
    assert not reloaded.second.solved


def test_on_disk_format(store, aocauto_data_dir):
    store.mark_solved(2, "abc")
    store.save()
    data = json.loads((aocauto_data_dir / "2022_03_state.json").read_text())
    assert list(data) == ["SchemaVersion", "Day", "First", "Second"]
    assert data["Day"] == 3
    assert data["Second"] == {
        "Solved": True,
        "Answer": "abc",
        "Attempts": [],
        "Low": None,
        "High": None,
    }


def test_bounds_only_tighten(store):
    store.update_bounds(1, 50, Outcome.TOO_HIGH)
    store.update_bounds(1, 80, Outcome.TOO_HIGH)
    store.update_bounds(1, 5, Outcome.TOO_LOW)
    store.update_bounds(1, 2, Outcome.TOO_LOW)
    assert store.progress.first.high == 50
    assert store.progress.first.low == 5
    store.update_bounds(1, 40, Outcome.TOO_HIGH)
    store.update_bounds(1, 7, Outcome.TOO_LOW)
    assert store.progress.first.high == 40
    assert store.progress.first.low == 7


def test_other_outcomes_leave_bounds_alone(store):
    store.update_bounds(2, 50, Outcome.WRONG)
    store.update_bounds(2, 50, Outcome.GOOD)
    assert store.progress.second.low is None
    assert store.progress.second.high is None


def test_day_mismatch_gives_fresh_state(aocauto_data_dir, caplog):
    path = aocauto_data_dir / "2022_03_state.json"
    path.write_text(DayProgress(day=4).to_json())
    progress = ProgressStore(2022, aocauto_data_dir).load(3)
    assert progress == DayProgress(day=3)
    msg = "failed to restore state, day does not match expectation: 4 instead of 3"
    assert ("aocauto.progress", logging.WARNING, msg) in caplog.record_tuples


@pytest.mark.parametrize(
    "txt",
    [
        b"{not json",
        b"[1, 2]",
        b'{"Day": 3, "First": "nope"}',
        b'{"Day": 3, "First": {"Low": "12"}}',
        b'{"Day": 3, "Second": {"High": true}}',
        b'{"Day": 3, "First": {"Solved": "yes"}}',
        b'{"Day": 3, "First": {"Answer": 12}}',
        b'{"Day": 3, "First": {"Attempts": "12"}}',
        b'{"Day": 3, "First": {"Answer": "\xff\xfe"}}',
    ],
)
def test_corrupt_state_gives_fresh_state(aocauto_data_dir, caplog, txt):
    path = aocauto_data_dir / "2022_03_state.json"
    path.write_bytes(txt)
    progress = ProgressStore(2022, aocauto_data_dir).load(3)
    assert progress == DayProgress(day=3)
    [record] = [r for r in caplog.records if r.levelno == logging.ERROR]
    assert record.getMessage().startswith("failed to load the saved state")


def test_missing_keys_are_tolerated(aocauto_data_dir):
    path = aocauto_data_dir / "2022_03_state.json"
    path.write_text('{"Day": 3, "First": {"Solved": true, "Answer": "7"}}')
    progress = ProgressStore(2022, aocauto_data_dir).load(3)
    assert progress.first.solved
    assert progress.first.answer == "7"
    assert progress.first.attempts == []
    assert not progress.second.solved


def test_solved_needs_both_parts():
    progress = DayProgress(day=1)
    progress.first.solved = True
    assert not progress.solved
    progress.second.solved = True
    assert progress.solved


def test_bad_part_number():
    with pytest.raises(ValueError("part must be 1 or 2, got 3")):
        DayProgress(day=1).part(3)


def test_save_without_load_is_noop(aocauto_data_dir):
    ProgressStore(2022, aocauto_data_dir).save()
    assert list(aocauto_data_dir.iterdir()) == []
