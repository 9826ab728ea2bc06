"""Tests for worker spawning, startup re-arming and the delivery worker."""

import os
from pathlib import Path
from unittest.mock import Mock, patch

import pytest

from reminders.executor import MAX_SLEEP_SECONDS, execute_reminder, main, parse_args, retire_reminder
from reminders.models import Reminder
from reminders.scheduler import arm_reminder, reconcile_on_startup, spawn_worker, worker_command

NOW = 1_700_000_000_000
TEN_MINUTES = 600_000


@pytest.fixture
def reminder():
    return Reminder("reminder_1_abc", "-Stand up", "Stretch", trigger_time=NOW + TEN_MINUTES, created=NOW)


# =============================================================================
# Spawning
# =============================================================================

def test_worker_command_separates_options(reminder, tmp_path):
    cmd = worker_command(tmp_path / "r.json", reminder, 1500, tmp_path / "w.log")

    assert cmd[1:4] == ["-m", "reminders.executor", "--"]
    assert cmd[4:] == [
        str(tmp_path / "r.json"), "reminder_1_abc", "-Stand up", "Stretch", "1500", str(tmp_path / "w.log")
    ]


def test_worker_command_parses_back(reminder, tmp_path):
    cmd = worker_command(tmp_path / "r.json", reminder, 1500, tmp_path / "w.log")

    args = parse_args(cmd[3:])

    assert args.store == tmp_path / "r.json"
    assert args.reminder_id == "reminder_1_abc"
    assert args.title == "-Stand up"
    assert args.delay_ms == 1500


@patch("reminders.scheduler.subprocess.Popen")
def test_spawn_worker_detaches(mock_popen, reminder, tmp_path):
    mock_popen.return_value = Mock(pid=4321)

    pid = spawn_worker(tmp_path / "r.json", reminder, 0, tmp_path / "w.log")

    assert pid == 4321
    kwargs = mock_popen.call_args.kwargs
    assert kwargs["stdout"] is not None and kwargs["stdin"] is not None
    if os.name == "nt":
        assert kwargs["creationflags"]
    else:
        assert kwargs["start_new_session"] is True


@patch("reminders.scheduler.subprocess.Popen", side_effect=OSError("fork failed"))
def test_spawn_failure_returns_none(mock_popen, reminder, tmp_path):
    assert spawn_worker(tmp_path / "r.json", reminder, 0, tmp_path / "w.log") is None


@pytest.mark.parametrize("trigger_offset,expected_delay", [
    (TEN_MINUTES, TEN_MINUTES),
    (-TEN_MINUTES, 0),
])
def test_arm_delay_is_time_remaining(trigger_offset, expected_delay, tmp_path):
    reminder = Reminder("r", "t", "m", trigger_time=NOW + trigger_offset)

    with patch("reminders.scheduler.spawn_worker", return_value=7) as mock_spawn:
        assert arm_reminder(reminder, tmp_path / "r.json", tmp_path / "w.log", now=NOW) == 7

    mock_spawn.assert_called_once_with(tmp_path / "r.json", reminder, expected_delay, tmp_path / "w.log")


# =============================================================================
# Startup reconciliation
# =============================================================================

def test_reconcile_rearms_active_and_drops_expired(store, armed):
    future = Reminder("future", "t", "m", trigger_time=NOW + TEN_MINUTES)
    past = Reminder("past", "t", "m", trigger_time=NOW - TEN_MINUTES)
    store.save([future, past])

    active = reconcile_on_startup(store, armed, now=NOW)

    assert active == [future]
    armed.assert_called_once_with(future)
    assert store.load() == [future]


def test_reconcile_without_expired_does_not_rewrite(store, armed):
    store.save([Reminder("future", "t", "m", trigger_time=NOW + TEN_MINUTES)])
    mtime = store.path.stat().st_mtime_ns

    with patch.object(store, "save") as mock_save:
        reconcile_on_startup(store, armed, now=NOW)

    mock_save.assert_not_called()
    assert store.path.stat().st_mtime_ns == mtime


def test_reconcile_empty_store(store, armed):
    assert reconcile_on_startup(store, armed, now=NOW) == []
    armed.assert_not_called()


# =============================================================================
# Delivery worker
# =============================================================================

def test_execute_sleeps_fires_and_retires(store, recording_notifier, make_reminder):
    target = make_reminder("target", 2_000, title="Tea", message="Kettle")
    other = make_reminder("other", 60_000)
    store.save([target, other])
    sleep = Mock()

    execute_reminder(store, "target", "Tea", "Kettle", 2_000, notifier=recording_notifier, sleep=sleep)

    sleep.assert_called_once_with(2.0)
    assert recording_notifier.shown == [("Tea", "Kettle")]
    assert store.load() == [other]


def test_cancelled_reminder_still_fires(store, recording_notifier):
    execute_reminder(store, "gone", "Tea", "Kettle", 0, notifier=recording_notifier, sleep=Mock())

    assert recording_notifier.shown == [("Tea", "Kettle")]
    assert store.load() == []


def test_retire_reports_whether_removed(store, make_reminder):
    store.save([make_reminder("a", 1_000)])

    assert retire_reminder(store, "a") is True
    assert retire_reminder(store, "a") is False


def test_retire_failure_is_logged_not_raised(store, recording_notifier, make_reminder, monkeypatch):
    store.save([make_reminder("a", 1_000)])

    def fail(reminders):
        raise OSError("Read-only file system")
    monkeypatch.setattr(store, "save", fail)

    execute_reminder(store, "a", "Tea", "Kettle", 0, notifier=recording_notifier, sleep=Mock())
    assert recording_notifier.shown == [("Tea", "Kettle")]


@patch("reminders.executor.execute_reminder")
@patch("reminders.executor.setup_logging")
def test_main_logs_to_given_file(mock_setup, mock_execute, tmp_path):
    argv = ["--", str(tmp_path / "r.json"), "id1", "Tea", "Kettle", "250", str(tmp_path / "w.log")]

    assert main(argv) == 0

    mock_setup.assert_called_once_with(log_file=Path(tmp_path / "w.log"))
    store, reminder_id, title, message, delay_ms = mock_execute.call_args.args
    assert store.path == tmp_path / "r.json"
    assert (reminder_id, title, message, delay_ms) == ("id1", "Tea", "Kettle", 250)


def test_long_delay_sleeps_in_bounded_chunks(store, recording_notifier):
    sleep = Mock()
    delay_ms = (3 * MAX_SLEEP_SECONDS + 7) * 1000

    execute_reminder(store, "far", "Tea", "Kettle", delay_ms, notifier=recording_notifier, sleep=sleep)

    chunks = [c.args[0] for c in sleep.call_args_list]
    assert max(chunks) <= MAX_SLEEP_SECONDS
    assert sum(chunks) == pytest.approx(delay_ms / 1000)
    assert recording_notifier.shown == [("Tea", "Kettle")]
