from datetime import date

from common.compliance_rules.models import (
    EvidenceRequirement,
    MeetingTypeCode,
    PlanType,
    RulePackRule,
    ScopeType,
)
from common.compliance_rules.rules_context import build_rules_context


def test_context_for_state_pack(scope_chain, make_rule_pack, on):
    pack = make_rule_pack(
        id="md-iep",
        rules=[
            RulePackRule(rule_key="PRE_MEETING_DOCS_DAYS", config={"days": 7}),
            RulePackRule(rule_key="AUDIO_RECORDING_RULE", is_enabled=False),
            RulePackRule(
                rule_key="POST_MEETING_DOCS_DAYS",
                evidence_requirements=[EvidenceRequirement(evidence_type_key="FINAL_DOC_SENT", is_required=False)],
            ),
        ],
    )
    ctx = build_rules_context(
        scope_chain,
        PlanType.IEP,
        [pack],
        meeting_type=MeetingTypeCode.ANNUAL,
        scheduled_at=date(2024, 1, 15),
        on=on,
    )
    assert ctx.resolved is True
    assert ctx.rule_pack.id == "md-iep"
    assert ctx.precedence.matched.scope_type == ScopeType.STATE
    assert ctx.meeting_type == MeetingTypeCode.ANNUAL

    gates = {g.key: g for g in ctx.gates}
    assert len(gates) == 5
    assert gates["AUDIO_RECORDING_RULE"].enabled is False
    assert gates["CONFERENCE_NOTES_REQUIRED"].name == "Conference Notes Required"

    assert ctx.deadlines.pre_meeting_docs.business_days == 7
    assert ctx.deadlines.pre_meeting_docs.standard_deadline == date(2024, 1, 4)
    assert ctx.deadlines.post_meeting_docs.standard_deadline == date(2024, 1, 22)

    assert [(r.key, r.is_required, r.linked_rule) for r in ctx.evidence_requirements] == [
        ("FINAL_DOC_SENT", False, "POST_MEETING_DOCS_DAYS")
    ]
    assert ctx.defaults["PRE_MEETING_DOCS_DAYS"] == {"days": 5}


def test_context_without_pack_uses_defaults(scope_chain, on):
    ctx = build_rules_context(scope_chain, PlanType.BIP, [], on=on)
    assert ctx.resolved is False
    assert ctx.rule_pack is None
    assert ctx.deadlines is None
    assert all(g.enabled for g in ctx.gates)
    assert len(ctx.defaults) == 10
