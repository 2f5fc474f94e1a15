import json
import shutil
from pathlib import Path

from scripts.run_close_check import main


FIXTURES = Path(__file__).parent / "fixtures" / "maryland"


def test_cli_reports_passing_meeting(capsys):
    code = main(["--fixtures-dir", str(FIXTURES), "--meeting-id", "mtg-3", "--on", "2024-03-01"])
    payload = json.loads(capsys.readouterr().out)
    assert code == 0
    assert payload["can_close"] is True
    assert payload["rule_pack_id"] == "rp-md-iep"
    assert payload["resolution"]["precedence"]["matched"]["scope_id"] == "MD"
    assert payload["report"]["blocking_reasons"] == []


def test_cli_reports_blocked_meeting(capsys):
    code = main(["--fixtures-dir", str(FIXTURES), "--meeting-id", "mtg-2", "--on", "2024-03-01"])
    payload = json.loads(capsys.readouterr().out)
    assert code == 1
    assert payload["can_close"] is False
    assert {r["rule_key"] for r in payload["report"]["blocking_reasons"]} == {
        "CONFERENCE_NOTES_REQUIRED",
        "AUDIO_RECORDING_RULE",
    }


def test_cli_close_writes_back_meeting(tmp_path, capsys):
    fixtures = tmp_path / "maryland"
    shutil.copytree(FIXTURES, fixtures)

    code = main(
        [
            "--fixtures-dir",
            str(fixtures),
            "--meeting-id",
            "mtg-1",
            "--close",
            "--actor-id",
            "user-7",
            "--on",
            "2024-03-01",
            "--write-back",
        ]
    )
    payload = json.loads(capsys.readouterr().out)
    assert code == 0
    assert payload["closed"] is True
    assert payload["meeting"]["rule_pack_version"] == 1

    stored = {m["id"]: m for m in json.loads((fixtures / "meetings.json").read_text(encoding="utf-8"))}
    assert stored["mtg-1"]["status"] == "CLOSED"
    assert stored["mtg-1"]["closedByUserId"] == "user-7"
    assert stored["mtg-2"]["status"] == "HELD"


def test_cli_close_refused_for_scheduled_meeting(capsys):
    code = main(["--fixtures-dir", str(FIXTURES), "--meeting-id", "mtg-4", "--close"])
    payload = json.loads(capsys.readouterr().out)
    assert code == 2
    assert payload["closed"] is False


def test_cli_unknown_meeting_reports_error(capsys):
    code = main(["--fixtures-dir", str(FIXTURES), "--meeting-id", "mtg-missing"])
    payload = json.loads(capsys.readouterr().out)
    assert code == 3
    assert payload == {"meeting_id": "mtg-missing", "error": "Meeting not found: mtg-missing"}

    code = main(["--fixtures-dir", str(FIXTURES), "--meeting-id", "mtg-missing", "--close"])
    assert code == 3
    assert json.loads(capsys.readouterr().out)["error"] == "Meeting not found: mtg-missing"
