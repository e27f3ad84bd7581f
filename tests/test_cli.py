"""Tests for the gathering-kiosk CLI."""

import json
from unittest.mock import patch

import pytest
from click.testing import CliRunner

from gathering_kiosk.adapters.file_gatherings import FileGatheringRepository
from gathering_kiosk.cli import main
from gathering_kiosk.config import Config


@pytest.fixture(autouse=True)
def config():
    with patch("gathering_kiosk.cli.load_config", return_value=Config()) as mock_load:
        yield mock_load


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def gatherings_file(tmp_path):
    path = tmp_path / "gatherings.json"
    path.write_text(
        json.dumps(
            {
                "gatherings": [
                    {
                        "id": 1,
                        "name": "Sunday Service",
                        "dayOfWeek": "Sunday",
                        "startTime": "10:00",
                        "frequency": "weekly",
                        "attendanceType": "standard",
                        "kioskEnabled": True,
                    },
                    {
                        "id": 2,
                        "name": "Youth Night",
                        "dayOfWeek": "Wednesday",
                        "startTime": "19:00",
                        "frequency": "weekly",
                        "attendanceType": "standard",
                    },
                    {
                        "id": 3,
                        "name": "Easter Breakfast",
                        "attendanceType": "headcount",
                        "customSchedule": {"type": "one_off", "startDate": "2024-03-31"},
                    },
                    {
                        "id": 4,
                        "name": "Lent Prayer",
                        "attendanceType": "headcount",
                        "customSchedule": {
                            "type": "recurring",
                            "startDate": "2024-02-14",
                            "endDate": "2024-03-28",
                            "pattern": {
                                "frequency": "weekly",
                                "interval": 1,
                                "daysOfWeek": ["Tuesday", "Thursday"],
                            },
                        },
                    },
                ]
            }
        )
    )
    return path


class TestNext:
    def test_json(self, runner, gatherings_file):
        result = runner.invoke(
            main, ["next", "--file", str(gatherings_file), "--today", "2024-03-04", "--json"]
        )
        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert data == [
            {"id": 1, "name": "Sunday Service", "date": "2024-03-10", "daysAway": 6},
            {"id": 2, "name": "Youth Night", "date": "2024-03-06", "daysAway": 2},
            {"id": 3, "name": "Easter Breakfast", "date": "2024-03-31", "daysAway": 27},
            {"id": 4, "name": "Lent Prayer", "date": "2024-03-05", "daysAway": 1},
        ]

    def test_text(self, runner, gatherings_file):
        result = runner.invoke(main, ["next", "--file", str(gatherings_file), "--today", "2024-03-06"])
        assert result.exit_code == 0, result.output
        assert "Youth Night" in result.output
        assert "Wed 2024-03-06 (today)" in result.output
        assert "Thu 2024-03-07 (tomorrow)" in result.output

    def test_kiosk_only(self, runner, gatherings_file):
        result = runner.invoke(
            main,
            ["next", "--file", str(gatherings_file), "--today", "2024-03-04", "--kiosk-only", "--json"],
        )
        assert [g["id"] for g in json.loads(result.output)] == [1]

    def test_bad_today(self, runner, gatherings_file):
        result = runner.invoke(main, ["next", "--file", str(gatherings_file), "--today", "soon"])
        assert result.exit_code != 0
        assert "expected YYYY-MM-DD" in result.output

    def test_missing_file(self, runner, tmp_path):
        result = runner.invoke(main, ["next", "--file", str(tmp_path / "none.json")])
        assert result.exit_code == 1
        assert "Gatherings file not found" in result.output


class TestOccurrences:
    def test_recurring_json(self, runner, gatherings_file):
        result = runner.invoke(main, ["occurrences", "4", "--file", str(gatherings_file), "--json"])
        assert result.exit_code == 0, result.output
        dates = json.loads(result.output)
        assert len(dates) == 12
        assert dates[0] == "2024-02-15"
        assert dates[-1] == "2024-03-26"

    def test_one_off_text(self, runner, gatherings_file):
        result = runner.invoke(main, ["occurrences", "3", "--file", str(gatherings_file)])
        assert result.exit_code == 0, result.output
        assert "### Easter Breakfast (One-off)" in result.output
        assert "Sunday, March 31 2024" in result.output

    def test_without_custom_schedule(self, runner, gatherings_file):
        result = runner.invoke(main, ["occurrences", "1", "--file", str(gatherings_file)])
        assert result.exit_code == 1
        assert "has no custom schedule" in result.output

    def test_unknown_gathering(self, runner, gatherings_file):
        result = runner.invoke(main, ["occurrences", "99", "--file", str(gatherings_file)])
        assert result.exit_code == 1
        assert "no gathering with id 99" in result.output

    def test_looks_up_through_repository(self, runner, gatherings_file):
        with patch.object(
            FileGatheringRepository, "get_gathering", autospec=True, return_value=None
        ) as mock_get:
            result = runner.invoke(main, ["occurrences", "4", "--file", str(gatherings_file)])

        assert result.exit_code == 1
        mock_get.assert_called_once()
        assert mock_get.call_args[0][1] == 4

    def test_missing_file(self, runner, tmp_path):
        result = runner.invoke(main, ["occurrences", "4", "--file", str(tmp_path / "none.json")])
        assert result.exit_code == 1
        assert "Gatherings file not found" in result.output


class TestMode:
    def test_checkout_near_end(self, runner):
        result = runner.invoke(main, ["mode", "--start", "10:00", "--end", "11:00", "--at", "10:50"])
        assert result.exit_code == 0, result.output
        assert "10:50 -> Check-out" in result.output

    def test_checkin_before_threshold(self, runner):
        result = runner.invoke(main, ["mode", "--start", "10:00", "--end", "11:00", "--at", "10:30"])
        assert "10:30 -> Check-in" in result.output

    def test_end_defaults_to_start_plus_one_hour(self, runner):
        result = runner.invoke(main, ["mode", "--start", "10:00", "--at", "10:46"])
        assert "Check-out" in result.output
        assert "before 11:00" in result.output

    def test_requires_a_time(self, runner):
        result = runner.invoke(main, ["mode"])
        assert result.exit_code == 1
        assert "a start or end time is required" in result.output

    def test_uses_configured_times(self, runner, config):
        config.return_value = Config(kiosk_start_time="18:00", kiosk_end_time="20:00")
        result = runner.invoke(main, ["mode", "--at", "19:50"])
        assert "Check-out" in result.output
        assert "before 20:00" in result.output

    def test_bad_time(self, runner):
        result = runner.invoke(main, ["mode", "--end", "noonish"])
        assert result.exit_code != 0
        assert "expected HH:MM" in result.output


class TestValidate:
    def test_valid_file(self, runner, gatherings_file):
        result = runner.invoke(main, ["validate", str(gatherings_file)])
        assert result.exit_code == 0, result.output
        assert "✓ Sunday Service" in result.output
        assert "✓ Lent Prayer" in result.output

    def test_invalid_entries(self, runner, tmp_path):
        path = tmp_path / "gatherings.json"
        path.write_text(
            json.dumps(
                [
                    {"name": "Prayer", "attendanceType": "standard"},
                    "junk",
                ]
            )
        )
        result = runner.invoke(main, ["validate", str(path)])
        assert result.exit_code == 1
        assert "✗ Prayer" in result.output
        assert "Standard gatherings require day of week, start time, and frequency" in result.output
        assert "✗ #1" in result.output
        assert "2 of 2 gatherings invalid." in result.output
