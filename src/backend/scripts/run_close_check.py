from __future__ import annotations

import argparse
import json
import os
import sys
from datetime import date, datetime, timezone
from pathlib import Path


def _ensure_backend_on_path() -> None:
    backend_dir = Path(__file__).resolve().parents[1]
    if str(backend_dir) not in sys.path:
        sys.path.insert(0, str(backend_dir))


def _check_payload(meeting_id: str, check) -> dict:
    return {
        "meeting_id": meeting_id,
        "can_close": check.can_close,
        "rule_pack_id": check.rule_pack_id,
        "rule_pack_version": check.rule_pack_version,
        "resolution": check.resolution.model_dump(mode="json"),
        "report": check.report.model_dump(mode="json"),
    }


def run_close_check(
    *,
    fixtures_dir: Path,
    meeting_id: str,
    close: bool = False,
    actor_id: str | None = None,
    on: date | None = None,
    write_back: bool = False,
) -> tuple[int, dict]:
    """Evaluate (or close) one meeting from a fixtures directory; returns (exit code, payload)."""
    _ensure_backend_on_path()

    from common.compliance_rules.errors import ComplianceGateFailed, InvalidTransition
    from common.compliance_rules.settings import get_engine_settings
    from pipelines.data_source import get_data_source
    from pipelines.meeting_close import close_meeting, evaluate_meeting

    settings = get_engine_settings()
    source = get_data_source(
        os.getenv("DATA_SOURCE", "fixtures"),
        fixtures_dir=fixtures_dir,
        write_back=write_back,
    )

    try:
        source.get_meeting(meeting_id)
    except KeyError:
        return 3, {"meeting_id": meeting_id, "error": f"Meeting not found: {meeting_id}"}

    if not close:
        check = evaluate_meeting(source, meeting_id, on=on, fallback=settings.plan_type_fallback)
        return (0 if check.can_close else 1), _check_payload(meeting_id, check)

    now = datetime.combine(on, datetime.min.time(), tzinfo=timezone.utc) if on else None
    try:
        meeting = close_meeting(source, meeting_id, actor_id, now=now, fallback=settings.plan_type_fallback)
    except ComplianceGateFailed as exc:
        return 1, {
            "meeting_id": meeting_id,
            "closed": False,
            "error": str(exc),
            "blocking_reasons": [r.model_dump(mode="json") for r in exc.blocking_reasons],
        }
    except InvalidTransition as exc:
        return 2, {"meeting_id": meeting_id, "closed": False, "error": str(exc)}

    return 0, {"meeting_id": meeting_id, "closed": True, "meeting": meeting.model_dump(mode="json")}


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        description="Evaluate the close gates for a meeting in a fixtures directory, or close it."
    )
    parser.add_argument(
        "--fixtures-dir",
        required=True,
        help="Directory holding students.json, rule_packs.json and meetings.json.",
    )
    parser.add_argument("--meeting-id", required=True, help="Meeting to evaluate.")
    parser.add_argument(
        "--close",
        action="store_true",
        help="Move the meeting to CLOSED instead of only reporting the gates.",
    )
    parser.add_argument("--actor-id", default=None, help="User id stamped on a successful close.")
    parser.add_argument(
        "--on",
        default=None,
        help="Evaluation date (YYYY-MM-DD) for rule pack effectiveness (defaults to today).",
    )
    parser.add_argument(
        "--write-back",
        action="store_true",
        help="Rewrite meetings.json after a successful close.",
    )
    args = parser.parse_args(argv)

    _ensure_backend_on_path()
    from common.compliance_rules.logging_utils import configure_logging
    from common.compliance_rules.settings import get_engine_settings

    configure_logging(get_engine_settings().log_level)

    code, payload = run_close_check(
        fixtures_dir=Path(args.fixtures_dir).resolve(),
        meeting_id=args.meeting_id,
        close=args.close,
        actor_id=args.actor_id,
        on=date.fromisoformat(args.on) if args.on else None,
        write_back=args.write_back,
    )
    print(json.dumps(payload, indent=2))
    return code


if __name__ == "__main__":
    raise SystemExit(main())
