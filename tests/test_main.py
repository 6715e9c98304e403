import json

from calsplit.calendar_google import SplitPlan
from calsplit.main import EXIT_BAD_DATA, main


def test_range_command_prints_window(capsys):
    assert main(["range", "2025-01-02"]) == 0

    out = json.loads(capsys.readouterr().out)
    assert out == {"timeMin": "2025-01-02T00:00:00Z", "timeMax": "2025-01-03T00:00:00Z"}


def test_until_command(capsys):
    assert main(["until", "2025-01-02"]) == 0

    assert capsys.readouterr().out.strip() == "20250101"


def test_truncate_command(capsys):
    code = main(
        ["truncate", "--cutoff", "2025-01-05T10:00:00Z", "RRULE:FREQ=DAILY;COUNT=10", "EXDATE:20250103T100000Z"]
    )

    assert code == 0
    assert json.loads(capsys.readouterr().out) == [
        "RRULE:FREQ=DAILY;UNTIL=20250105T100000Z",
        "EXDATE:20250103T100000Z",
    ]


def test_malformed_input_reports_raw_text(capsys):
    assert main(["truncate", "--cutoff", "2025-01-05", "RRULE:FREQ"]) == EXIT_BAD_DATA

    err = capsys.readouterr().err
    assert "could not interpret recurrence/timestamp data: RRULE:FREQ" in err


def test_split_dry_run_does_not_write(tmp_path, monkeypatch, capsys):
    calls = []

    def fake_plan(service, calendar_id, event_id, original_start, **kwargs):
        calls.append(("plan", calendar_id, event_id, original_start, kwargs))
        return SplitPlan(
            calendar_id=calendar_id,
            event_id=event_id,
            instance_id="series1_20250105",
            original_start=original_start,
            parent_recurrence=["RRULE:FREQ=DAILY;UNTIL=20250104"],
            new_event={"summary": kwargs["summary"]},
        )

    monkeypatch.setattr("calsplit.main.get_service", lambda *_args: object())
    monkeypatch.setattr("calsplit.main.plan_split", fake_plan)
    monkeypatch.setattr(
        "calsplit.main.apply_split",
        lambda *_args, **_kwargs: (_ for _ in ()).throw(AssertionError("should not write")),
    )

    code = main(
        [
            "--config",
            str(tmp_path / "config.yaml"),
            "split",
            "series1",
            "--original-start",
            "2025-01-05",
            "--summary",
            "Renamed",
            "--dry-run",
        ]
    )

    assert code == 0
    assert calls[0][1] == "primary"
    out = json.loads(capsys.readouterr().out)
    assert out["parentRecurrence"] == ["RRULE:FREQ=DAILY;UNTIL=20250104"]
    assert out["newEvent"] == {"summary": "Renamed"}
    assert "created" not in out


def test_out_of_range_timestamp_is_reported_as_bad_data(capsys):
    assert main(["until", "0001-01-01"]) == EXIT_BAD_DATA

    assert "could not interpret recurrence/timestamp data: 0001-01-01" in capsys.readouterr().err


def test_instance_command_prints_matching_instance(tmp_path, monkeypatch, capsys):
    found = {"id": "series1_20250105", "start": {"date": "2025-01-05"}}
    monkeypatch.setattr("calsplit.main.get_service", lambda *_args: object())
    monkeypatch.setattr("calsplit.main.find_instance", lambda *_args: found)
    monkeypatch.setattr(
        "calsplit.main.plan_split",
        lambda *_args, **_kwargs: (_ for _ in ()).throw(AssertionError("should not split")),
    )

    code = main(
        ["--config", str(tmp_path / "config.yaml"), "instance", "series1", "--original-start", "2025-01-05"]
    )

    assert code == 0
    assert json.loads(capsys.readouterr().out) == found
