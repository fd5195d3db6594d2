import json
import pytest
from rich.console import Console
from typer.testing import CliRunner

from tasklist.api import cli


runner = CliRunner()


@pytest.fixture(autouse=True)
def quiet_env(monkeypatch):
    # keep the runner's streams free of handlers installed by earlier invocations
    monkeypatch.setattr(cli, "setup_logging", lambda *args, **kwargs: None)
    monkeypatch.setattr(cli, "console", Console(width=200))
    for name in ("TASKLIST_DB_URL", "TASKLIST_STORAGE_KEY", "TASKLIST_STRICT_LOAD", "TASKLIST_DATA_DIR"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def data_dir(tmp_path):
    return tmp_path / "data"


def run(data_dir, *args, input=None):
    return runner.invoke(cli.app, ["--file", str(data_dir), *args], input=input)


def stored(data_dir) -> list[dict]:
    return json.loads((data_dir / "tasks.json").read_text(encoding="utf-8"))


def test_add_then_list(data_dir):
    # Act
    added = run(data_dir, "add", "Buy milk", "-p", "High", "-d", "2%")
    listed = run(data_dir, "list")

    # Assert
    assert added.exit_code == 0, added.output
    assert "Task added" in added.output
    assert listed.exit_code == 0, listed.output
    assert "Buy milk" in listed.output
    assert "High" in listed.output
    assert "No due date" in listed.output
    [row] = stored(data_dir)
    assert row["title"] == "Buy milk"
    assert row["description"] == "2%"
    assert row["priority"] == "High"
    assert row["completed"] is False


def test_add_rejects_blank_title(data_dir):
    result = run(data_dir, "add", "   ")

    assert result.exit_code == 1
    assert "Title is required!" in result.output
    assert not (data_dir / "tasks.json").exists()


def test_add_rejects_bad_priority_and_date(data_dir):
    assert run(data_dir, "add", "A", "-p", "Urgent").exit_code == 1
    assert run(data_dir, "add", "A", "--due", "tomorrow").exit_code == 1
    assert not (data_dir / "tasks.json").exists()


def test_list_empty_says_no_tasks(data_dir):
    result = run(data_dir, "list")

    assert result.exit_code == 0
    assert "No tasks found" in result.output


def test_list_filter_and_search(data_dir):
    # Arrange
    run(data_dir, "add", "Lunch plan")
    run(data_dir, "add", "Buy milk")
    run(data_dir, "add", "lunch with Bob", "-p", "Medium")
    bob_id = stored(data_dir)[0]["id"]
    run(data_dir, "toggle", bob_id)

    # Act
    completed = run(data_dir, "list", "--filter", "completed")
    searched = run(data_dir, "list", "-s", "LUNCH", "-F", "Pending")

    # Assert
    assert "lunch with Bob" in completed.output
    assert "Buy milk" not in completed.output
    assert "Lunch plan" in searched.output
    assert "lunch with Bob" not in searched.output
    assert "Buy milk" not in searched.output


def test_list_unknown_filter_fails(data_dir):
    result = run(data_dir, "list", "--filter", "Done")

    assert result.exit_code == 1
    assert "filter" in result.output


def test_toggle_twice_round_trips(data_dir):
    run(data_dir, "add", "A")
    task_id = stored(data_dir)[0]["id"]

    first = run(data_dir, "toggle", task_id)
    assert first.exit_code == 0, first.output
    assert "Completed" in first.output
    assert stored(data_dir)[0]["completed"] is True

    second = run(data_dir, "toggle", task_id)
    assert "Undone" in second.output
    assert stored(data_dir)[0]["completed"] is False


def test_toggle_unknown_id_is_not_an_error(data_dir):
    run(data_dir, "add", "A")
    before = stored(data_dir)

    result = run(data_dir, "toggle", "nope")

    assert result.exit_code == 0
    assert "Not found" in result.output
    assert stored(data_dir) == before


def test_rm_asks_for_confirmation(data_dir):
    # Arrange
    run(data_dir, "add", "Keep me")
    task_id = stored(data_dir)[0]["id"]

    # Act
    declined = run(data_dir, "rm", task_id, input="n\n")
    accepted = run(data_dir, "rm", task_id, input="y\n")

    # Assert
    assert "Are you sure you want to delete this task?" in declined.output
    assert "Cancelled" in declined.output
    assert accepted.exit_code == 0, accepted.output
    assert "Task deleted" in accepted.output
    assert stored(data_dir) == []


def test_rm_yes_skips_prompt_and_repeat_is_noop(data_dir):
    run(data_dir, "add", "A")
    run(data_dir, "add", "B")
    b_id = stored(data_dir)[0]["id"]

    result = run(data_dir, "rm", b_id, "--yes")
    again = run(data_dir, "rm", b_id, "--yes")

    assert "Are you sure" not in result.output
    assert [r["title"] for r in stored(data_dir)] == ["A"]
    assert again.exit_code == 0
    assert "Not found" in again.output


def test_show_accepts_unique_prefix(data_dir):
    run(data_dir, "add", "Report", "-d", "Q3 numbers", "--due", "2025-03-01")
    task_id = stored(data_dir)[0]["id"]

    result = run(data_dir, "show", task_id[:-3])

    assert result.exit_code == 0, result.output
    assert "Q3 numbers" in result.output
    assert "2025-03-01" in result.output


def test_show_unknown_id_fails(data_dir):
    result = run(data_dir, "show", "missing")

    assert result.exit_code == 1
    assert "does not exist" in result.output


def test_malformed_file_warns_and_starts_empty(data_dir):
    data_dir.mkdir(parents=True)
    (data_dir / "tasks.json").write_text("{broken", encoding="utf-8")

    result = run(data_dir, "list")

    assert result.exit_code == 0
    assert "Warning" in result.output
    assert "No tasks found" in result.output


def test_malformed_file_is_fatal_with_strict(data_dir):
    data_dir.mkdir(parents=True)
    (data_dir / "tasks.json").write_text("{broken", encoding="utf-8")

    result = runner.invoke(cli.app, ["--file", str(data_dir), "--strict", "list"])

    assert result.exit_code == 1
    assert "Storage error" in result.output


def test_storage_key_from_environment(data_dir, monkeypatch):
    monkeypatch.setenv("TASKLIST_STORAGE_KEY", "work")

    run(data_dir, "add", "A")

    assert (data_dir / "work.json").exists()
    assert not (data_dir / "tasks.json").exists()


def test_sql_backend(tmp_path):
    url = f"sqlite:///{tmp_path / 'tasks.db'}"

    runner.invoke(cli.app, ["--db", url, "add", "Stored in SQL"])
    result = runner.invoke(cli.app, ["--db", url, "list"])

    assert result.exit_code == 0, result.output
    assert "Stored in SQL" in result.output


def test_demo_runs():
    result = runner.invoke(cli.app, ["--memory", "demo"])

    assert result.exit_code == 0, result.output
    assert "Demo finished" in result.output


def test_unusable_file_location_falls_back_to_memory(tmp_path):
    # Arrange: --file points at a regular file, not a directory
    not_a_dir = tmp_path / "plain.txt"
    not_a_dir.write_text("x", encoding="utf-8")

    # Act
    result = runner.invoke(cli.app, ["--file", str(not_a_dir), "add", "Still works"])

    # Assert
    assert result.exit_code == 0, result.output
    assert "Not saved" in result.output
    assert "Task added" in result.output
    assert "--strict" not in result.output
    assert not_a_dir.read_text(encoding="utf-8") == "x"


def test_bad_db_url_falls_back_to_memory():
    result = runner.invoke(cli.app, ["--db", "nosuchdialect://nowhere", "list"])

    assert result.exit_code == 0, result.output
    assert "Not saved" in result.output
    assert "No tasks found" in result.output


def test_unusable_file_location_is_fatal_with_strict(tmp_path):
    not_a_dir = tmp_path / "plain.txt"
    not_a_dir.write_text("x", encoding="utf-8")

    result = runner.invoke(cli.app, ["--file", str(not_a_dir), "--strict", "list"])

    assert result.exit_code == 1
    assert "Storage error" in result.output


def test_ids_with_markup_characters_are_printed_literally(data_dir):
    # Arrange
    data_dir.mkdir(parents=True)
    (data_dir / "tasks.json").write_text(
        json.dumps([{"id": "[/]x", "title": "A", "dueDate": "[bold]"}]), encoding="utf-8"
    )

    # Act
    listed = run(data_dir, "list")
    shown = run(data_dir, "show", "[/]x")
    toggled = run(data_dir, "toggle", "[/]x")
    removed = run(data_dir, "rm", "[/]x", "--yes")

    # Assert
    for result in (listed, shown, toggled, removed):
        assert result.exit_code == 0, result.output
        assert "[/]x" in result.output
    assert "[bold]" in shown.output
    assert stored(data_dir) == []


def test_demo_does_not_touch_configured_storage(tmp_path, monkeypatch):
    data_dir = tmp_path / "never-created"
    monkeypatch.setenv("TASKLIST_DATA_DIR", str(data_dir))

    result = runner.invoke(cli.app, ["demo"])

    assert result.exit_code == 0, result.output
    assert "Demo finished" in result.output
    assert not data_dir.exists()


@pytest.mark.parametrize("raw, expected", [("high", "High"), ("MEDIUM", "Medium"), (" low ", "Low")])
def test_add_priority_ignores_case(data_dir, raw, expected):
    result = run(data_dir, "add", "A", "-p", raw)

    assert result.exit_code == 0, result.output
    assert stored(data_dir)[0]["priority"] == expected
