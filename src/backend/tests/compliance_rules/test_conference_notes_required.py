from common.compliance_rules.config import RuleKey
from common.compliance_rules.gates.conference_notes_required import ConferenceNotesRequiredGate


def test_conference_notes_pass_with_evidence(make_meeting, make_ctx):
    res = ConferenceNotesRequiredGate().evaluate(make_ctx(make_meeting()))
    assert res.enabled is True
    assert res.passed is True
    assert res.reason is None


def test_conference_notes_fail_without_evidence(make_meeting, make_ctx):
    res = ConferenceNotesRequiredGate().evaluate(make_ctx(make_meeting(evidence=())))
    assert res.passed is False
    assert res.reason.code == "MISSING_CONFERENCE_NOTES"
    assert res.reason.rule_key == "CONFERENCE_NOTES_REQUIRED"


def test_conference_notes_not_applicable_when_not_required(make_meeting, make_ctx):
    ctx = make_ctx(make_meeting(evidence=()), {"CONFERENCE_NOTES_REQUIRED": {"required": False}})
    res = ConferenceNotesRequiredGate().evaluate(ctx)
    assert res.enabled is False
    assert res.passed is True
    assert res.config == {"required": False}


def test_conference_notes_not_applicable_when_rule_disabled(make_meeting, make_ctx):
    ctx = make_ctx(make_meeting(evidence=()), disabled=[RuleKey.CONFERENCE_NOTES_REQUIRED])
    res = ConferenceNotesRequiredGate().evaluate(ctx)
    assert res.enabled is False
    assert res.passed is True
