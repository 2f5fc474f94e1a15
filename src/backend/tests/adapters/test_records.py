import json
from datetime import date, datetime, timezone
from pathlib import Path

import pytest

from adapters.records import (
    meeting_from_record,
    meeting_to_record,
    rule_pack_from_record,
    scope_chain_from_record,
)
from common.compliance_rules.config import RuleKey, effective_config_for_pack
from common.compliance_rules.models import (
    DeliveryMethod,
    MeetingStatus,
    MeetingTypeCode,
    PlanType,
    ScopeType,
)


FIXTURE_DIR = Path(__file__).parent / "fixtures" / "records"


def _load(name: str) -> dict:
    return json.loads((FIXTURE_DIR / name).read_text(encoding="utf-8"))


def test_rule_pack_from_record_maps_rules_and_evidence():
    pack = rule_pack_from_record(_load("rule_pack.json"))
    assert pack.id == "rp-md-iep-2"
    assert pack.scope_type == ScopeType.STATE
    assert pack.plan_type == PlanType.IEP
    assert pack.version == 2
    assert pack.effective_from == date(2024, 1, 1)
    assert pack.effective_to is None
    assert [r.rule_key for r in pack.ordered_rules()] == [
        "PRE_MEETING_DOCS_DAYS",
        "AUDIO_RECORDING_RULE",
        "CONTINUED_MEETING_NOTICE_DAYS",
    ]

    pre = pack.ordered_rules()[0]
    assert pre.config is None
    assert [e.evidence_type_key for e in pre.evidence_requirements] == ["PARENT_DOCS_SENT"]


def test_rule_pack_record_drives_effective_config():
    config = effective_config_for_pack(rule_pack_from_record(_load("rule_pack.json")))
    assert config.get(RuleKey.CONTINUED_MEETING_NOTICE_DAYS).days == 5
    assert config.get(RuleKey.PRE_MEETING_DOCS_DAYS).days == 5
    assert not config.is_enabled(RuleKey.AUDIO_RECORDING_RULE)


def test_rule_pack_record_missing_field_raises():
    record = _load("rule_pack.json")
    del record["scopeId"]
    with pytest.raises(ValueError, match="scopeId"):
        rule_pack_from_record(record)


def test_rule_pack_rule_missing_key_raises():
    record = _load("rule_pack.json")
    record["rules"][0]["ruleDefinition"] = {}
    with pytest.raises(ValueError, match="ruleDefinition.key"):
        rule_pack_from_record(record)


def test_meeting_from_record_maps_nested_fields():
    meeting = meeting_from_record(_load("meeting.json"))
    assert meeting.id == "mtg-204"
    assert meeting.status == MeetingStatus.HELD
    assert meeting.meeting_type == MeetingTypeCode.CONTINUED
    assert meeting.is_continued is True
    assert meeting.continued_from_scheduled_at == datetime(2024, 1, 15, 14, 0, tzinfo=timezone.utc)
    assert meeting.parent_delivery_method == DeliveryMethod.US_MAIL
    assert meeting.consent_status is None
    assert meeting.evidence_keys() == {"CONFERENCE_NOTES", "RECORDING_ACK"}
    assert meeting.evidence[0].note == "Uploaded by case manager"


def test_meeting_record_round_trip():
    meeting = meeting_from_record(_load("meeting.json"))
    assert meeting_from_record(meeting_to_record(meeting)) == meeting


def test_meeting_record_missing_scheduled_at_raises():
    record = _load("meeting.json")
    record["scheduledAt"] = None
    with pytest.raises(ValueError, match="scheduledAt"):
        meeting_from_record(record)


def test_meeting_evidence_without_type_raises():
    record = _load("meeting.json")
    record["evidence"].append({"note": "orphan"})
    with pytest.raises(ValueError, match="evidenceType.key"):
        meeting_from_record(record)


def test_scope_chain_from_nested_and_flat_records():
    nested = {
        "id": "stu-17",
        "school": {"id": "sch-3", "district": {"id": "dst-1", "state": {"code": "MD"}}},
    }
    chain = scope_chain_from_record(nested)
    assert (chain.school_id, chain.district_id, chain.state_code) == ("sch-3", "dst-1", "MD")

    flat = scope_chain_from_record({"schoolId": "sch-3", "districtId": None, "stateCode": "MD"})
    assert [s.scope_type for s in flat.candidates()] == [ScopeType.SCHOOL]
