from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Protocol

from adapters.records import (
    meeting_from_record,
    meeting_to_record,
    rule_pack_from_record,
    scope_chain_from_record,
)
from common.compliance_rules.models import Meeting, PlanType, RulePack, ScopeChain

logger = logging.getLogger(__name__)


class ComplianceDataSource(Protocol):
    def get_scope_chain(self, student_id: str) -> ScopeChain | None:
        """Return the student's school -> district -> state chain, or None if unknown."""
        ...

    def list_rule_packs(self, scope_chain: ScopeChain, plan_type: PlanType) -> list[RulePack]:
        """Return candidate rule packs for the chain's scopes (the resolver filters them)."""
        ...

    def get_meeting(self, meeting_id: str) -> Meeting:
        """Return a meeting snapshot with its evidence and continuation source."""
        ...

    def save_meeting(self, meeting: Meeting) -> None:
        """Persist status, timestamps and the rule pack audit stamp in one write."""
        ...


def get_data_source(
    name: str,
    *,
    fixtures_dir: Path | None = None,
    write_back: bool = False,
) -> ComplianceDataSource:
    """Resolve a data source implementation by name (fixtures)."""
    source = (name or "").strip().lower()
    if source in ("fixtures", ""):
        return FixturesDataSource(fixtures_dir=fixtures_dir, write_back=write_back)
    raise ValueError(f"Unknown data source '{name}' (expected 'fixtures').")


class FixturesDataSource:
    """
    Reads students, rule packs and meetings from a JSON fixtures directory.

    Expected files (each a JSON list of records in the stored camelCase shape):
      students.json, rule_packs.json, meetings.json

    Saved meetings are kept in memory; pass `write_back=True` to also rewrite meetings.json.
    """

    def __init__(self, *, fixtures_dir: Path | None = None, write_back: bool = False) -> None:
        self._fixtures_dir = fixtures_dir or _default_fixtures_dir()
        self._write_back = write_back
        self._students = {str(r["id"]): r for r in self._load("students.json")}
        self._packs = [rule_pack_from_record(r) for r in self._load("rule_packs.json")]
        self._meetings = {str(r["id"]): r for r in self._load("meetings.json")}

    def get_scope_chain(self, student_id: str) -> ScopeChain | None:
        record = self._students.get(student_id)
        if record is None:
            return None
        return scope_chain_from_record(record)

    def list_rule_packs(self, scope_chain: ScopeChain, plan_type: PlanType) -> list[RulePack]:
        scopes = {(s.scope_type, s.scope_id) for s in scope_chain.candidates()}
        wanted = {plan_type, PlanType.ALL}
        return [p for p in self._packs if (p.scope_type, p.scope_id) in scopes and p.plan_type in wanted]

    def get_meeting(self, meeting_id: str) -> Meeting:
        record = self._meetings.get(meeting_id)
        if record is None:
            raise KeyError(f"Meeting not found: {meeting_id}")
        record = dict(record)
        source_id = record.get("continuedFromMeetingId")
        if record.get("continuedFrom") is None and source_id in self._meetings:
            source = self._meetings[source_id]
            record["continuedFrom"] = {"id": source_id, "scheduledAt": source.get("scheduledAt")}
        return meeting_from_record(record)

    def save_meeting(self, meeting: Meeting) -> None:
        self._meetings[meeting.id] = meeting_to_record(meeting)
        if self._write_back:
            path = self._fixtures_dir / "meetings.json"
            path.write_text(json.dumps(list(self._meetings.values()), indent=2), encoding="utf-8")
            logger.info("Wrote %d meetings to %s", len(self._meetings), path)

    def _load(self, name: str) -> list[dict[str, Any]]:
        path = self._fixtures_dir / name
        if not path.exists():
            return []
        data = json.loads(path.read_text(encoding="utf-8"))
        if not isinstance(data, list):
            raise ValueError(f"{path} must contain a JSON list.")
        return data


def _default_fixtures_dir() -> Path:
    return Path(__file__).resolve().parents[1] / "tests" / "pipelines" / "fixtures" / "maryland"
