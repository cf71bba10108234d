"""Tests for the command line interface."""
import io

import pytest

import main
from meeting import Meeting
from models import SalaryCategory


@pytest.fixture
def cli(tmp_path):
    """Run the CLI against files inside tmp_path."""
    base = [
        "--config", str(tmp_path / "config.yaml"),
        "--categories", str(tmp_path / "categories.yaml"),
        "--attendees", str(tmp_path / "attendees.yaml"),
    ]

    def run(*args):
        return main.main(base + list(args))
    return run


def test_no_command_prints_help(cli, capsys):
    assert cli() == 0
    assert "usage" in capsys.readouterr().out


def test_category_and_attendee_commands(cli, capsys):
    assert cli("add-category", "Engineer", "120000") == 0
    assert cli("add-category", "Manager", "156000") == 0
    assert cli("add-attendee", "Engineer", "3") == 0
    assert cli("add-attendee", "Manager") == 0
    assert cli("remove-attendee", "Manager") == 0
    capsys.readouterr()

    assert cli("list-attendees") == 0
    out = capsys.readouterr().out
    assert "Engineer x 3" in out
    assert "Manager" not in out

    assert cli("cost", "--minutes", "60") == 0
    assert capsys.readouterr().out.strip() == "3 attendees for 01:00:00: $173.08 ($173.08/hour)"


def test_invalid_category_reports_error(cli, capsys):
    assert cli("add-category", "   ", "100") == 1
    assert "Category name must not be empty" in capsys.readouterr().err
    assert cli("add-category", "Intern", "-1") == 1
    assert "zero or greater" in capsys.readouterr().err


def test_unknown_attendee_category(cli, capsys):
    assert cli("add-attendee", "Intern", "2") == 1
    assert "Unknown category: Intern" in capsys.readouterr().err


def test_zero_count_rejected_by_parser(cli):
    with pytest.raises(SystemExit):
        cli("add-attendee", "Engineer", "0")


def test_remove_category_and_clear(cli, capsys):
    cli("add-category", "Engineer", "120000")
    cli("add-attendee", "Engineer", "2")
    assert cli("clear-attendees") == 0
    assert cli("remove-category", "Engineer") == 0
    capsys.readouterr()
    cli("list-categories")
    assert "No categories found." in capsys.readouterr().out


def test_cost_with_zero_minutes(cli, capsys):
    cli("add-category", "Engineer", "120000")
    cli("add-attendee", "Engineer", "2")
    capsys.readouterr()
    assert cli("cost", "--minutes", "0") == 0
    assert "$0.00" in capsys.readouterr().out


def test_bad_config_file(tmp_path, capsys):
    config = tmp_path / "config.yaml"
    config.write_text("just a string\n")
    assert main.main(["--config", str(config), "list-categories"]) == 1
    assert "mapping" in capsys.readouterr().err


def test_track_with_limit_zero(cli, capsys):
    cli("add-category", "Engineer", "120000")
    cli("add-attendee", "Engineer", "1")
    capsys.readouterr()
    assert cli("track", "--limit", "0") == 0
    out = capsys.readouterr().out
    assert "\r[Running] 00:00:00" in out
    assert "Meeting lasted 00:00:00" in out


def test_track_stops_on_interrupt(clock, monkeypatch):
    meeting = Meeting(clock=clock)
    meeting.add_attendee(SalaryCategory.create("Manager", 156_000), 2)

    def fake_sleep(seconds):
        clock.advance(seconds)
        if clock.now >= 1800:
            raise KeyboardInterrupt

    monkeypatch.setattr(main.time, "sleep", fake_sleep)
    out = io.StringIO()
    main.track(meeting, 600, out=out)
    assert not meeting.is_running
    assert meeting.total_cost() == pytest.approx(75.0)
    assert out.getvalue().endswith("\n")
    assert "[Running] 00:20:00  $50.00  (2 attendees)" in out.getvalue()


def test_ui_command_launches_streamlit(cli, monkeypatch):
    calls = []
    monkeypatch.setattr(main.subprocess, "call", lambda cmd: calls.append(cmd) or 0)
    assert cli("ui") == 0
    cmd = calls[0]
    assert cmd[1:4] == ["-m", "streamlit", "run"]
    assert cmd[4].endswith("ui.py")
    assert "--categories" in cmd


def test_malformed_categories_file(tmp_path, capsys):
    categories = tmp_path / "categories.yaml"
    categories.write_text("categories: 5\n")
    argv = ["--config", str(tmp_path / "config.yaml"), "--categories", str(categories), "list-categories"]
    assert main.main(argv) == 1
    assert "'categories' must be a list" in capsys.readouterr().err


def test_malformed_attendees_file(cli, tmp_path, capsys):
    (tmp_path / "attendees.yaml").write_text("attendees:\n  Engineer: 3\n")
    assert cli("list-attendees") == 1
    assert "'attendees' must be a list" in capsys.readouterr().err
