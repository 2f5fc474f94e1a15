from common.compliance_rules.gates.initial_iep_consent_gate import InitialIepConsentGate
from common.compliance_rules.models import ConsentStatus, MeetingTypeCode


def test_consent_not_applicable_to_annual_meeting(make_meeting, make_ctx):
    meeting = make_meeting(consent_status=ConsentStatus.PENDING)
    res = InitialIepConsentGate().evaluate(make_ctx(meeting))
    assert res.enabled is False
    assert res.passed is True


def test_consent_pass_when_obtained(make_meeting, make_ctx):
    meeting = make_meeting(meeting_type=MeetingTypeCode.INITIAL, consent_status=ConsentStatus.OBTAINED)
    res = InitialIepConsentGate().evaluate(make_ctx(meeting))
    assert res.enabled is True
    assert res.passed is True


def test_consent_pass_with_consent_form_on_file(make_meeting, make_ctx):
    meeting = make_meeting(
        meeting_type=MeetingTypeCode.INITIAL,
        consent_status=ConsentStatus.PENDING,
        evidence=("CONFERENCE_NOTES", "CONSENT_FORM"),
    )
    assert InitialIepConsentGate().evaluate(make_ctx(meeting)).passed is True


def test_consent_fail_when_pending(make_meeting, make_ctx):
    meeting = make_meeting(meeting_type=MeetingTypeCode.INITIAL, consent_status=ConsentStatus.PENDING)
    res = InitialIepConsentGate().evaluate(make_ctx(meeting))
    assert res.passed is False
    assert res.reason.code == "MISSING_CONSENT"


def test_consent_fail_when_refused(make_meeting, make_ctx):
    meeting = make_meeting(meeting_type=MeetingTypeCode.INITIAL, consent_status=ConsentStatus.REFUSED)
    assert InitialIepConsentGate().evaluate(make_ctx(meeting)).passed is False


def test_consent_not_applicable_when_config_turns_it_off(make_meeting, make_ctx):
    meeting = make_meeting(meeting_type=MeetingTypeCode.INITIAL)
    res = InitialIepConsentGate().evaluate(make_ctx(meeting, {"INITIAL_IEP_CONSENT_GATE": {"enabled": False}}))
    assert res.enabled is False
    assert res.passed is True
