import os
import sys


# Ensure `src/backend` is on sys.path so imports like `import common...` work.
BACKEND_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), "../.."))
if BACKEND_DIR not in sys.path:
    sys.path.insert(0, BACKEND_DIR)

from datetime import date, datetime

import pytest

from common.compliance_rules.config import EffectiveConfig, merge_config, system_defaults
from common.compliance_rules.context import GateContext
from common.compliance_rules.models import (
    Meeting,
    MeetingEvidence,
    MeetingStatus,
    MeetingTypeCode,
    PlanType,
    RulePack,
    RulePackRule,
    ScopeChain,
    ScopeType,
)


@pytest.fixture
def on() -> date:
    return date(2024, 3, 1)


@pytest.fixture
def scope_chain() -> ScopeChain:
    return ScopeChain(school_id="school-1", district_id="district-1", state_code="MD")


@pytest.fixture
def make_meeting():
    def _make(*, evidence=("CONFERENCE_NOTES",), **fields) -> Meeting:
        data = {
            "id": "meeting-1",
            "student_id": "student-1",
            "status": MeetingStatus.HELD,
            "meeting_type": MeetingTypeCode.ANNUAL,
            "plan_type": PlanType.IEP,
            "scheduled_at": datetime(2024, 1, 15, 10, 0),
        }
        data.update(fields)
        data["evidence"] = [MeetingEvidence(evidence_type_key=key) for key in evidence]
        return Meeting(**data)

    return _make


@pytest.fixture
def make_rule_pack():
    def _make(
        *,
        id: str = "pack-1",
        scope_type: ScopeType = ScopeType.STATE,
        scope_id: str = "MD",
        plan_type: PlanType = PlanType.IEP,
        version: int = 1,
        is_active: bool = True,
        effective_from: date = date(2024, 1, 1),
        effective_to: date | None = None,
        rules: dict | list | None = None,
    ) -> RulePack:
        if isinstance(rules, dict):
            rules = [
                RulePackRule(rule_key=key, config=cfg, sort_order=i) for i, (key, cfg) in enumerate(rules.items())
            ]
        return RulePack(
            id=id,
            scope_type=scope_type,
            scope_id=scope_id,
            plan_type=plan_type,
            name=f"{scope_id} {plan_type.value} rules",
            version=version,
            is_active=is_active,
            effective_from=effective_from,
            effective_to=effective_to,
            rules=rules or [],
        )

    return _make


@pytest.fixture
def make_config():
    def _make(overrides: dict | None = None, *, disabled=()) -> EffectiveConfig:
        return merge_config(system_defaults(), overrides or {}, disabled=disabled)

    return _make


@pytest.fixture
def make_ctx(make_config):
    def _make(meeting: Meeting, overrides: dict | None = None, *, disabled=()) -> GateContext:
        return GateContext(meeting=meeting, config=make_config(overrides, disabled=disabled))

    return _make
