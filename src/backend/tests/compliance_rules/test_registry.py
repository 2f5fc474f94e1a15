import pytest

from common.compliance_rules.config import RuleKey
from common.compliance_rules.gates import AudioRecordingRuleGate, ConferenceNotesRequiredGate
from common.compliance_rules.registry import GateRegistry, registry


def test_builtin_gates_are_keyed_by_rule_key():
    assert set(registry.keys()) == {
        RuleKey.CONFERENCE_NOTES_REQUIRED,
        RuleKey.INITIAL_IEP_CONSENT_GATE,
        RuleKey.CONTINUED_MEETING_NOTICE_DAYS,
        RuleKey.CONTINUED_MEETING_MUTUAL_AGREEMENT,
        RuleKey.AUDIO_RECORDING_RULE,
    }
    assert registry.get(RuleKey.AUDIO_RECORDING_RULE) is AudioRecordingRuleGate
    assert RuleKey.PRE_MEETING_DOCS_DAYS not in registry


def test_create_all_follows_registration_order():
    local = GateRegistry()
    local.register(AudioRecordingRuleGate)
    local.register(ConferenceNotesRequiredGate)
    assert [g.rule_key for g in local.create_all()] == [
        RuleKey.AUDIO_RECORDING_RULE,
        RuleKey.CONFERENCE_NOTES_REQUIRED,
    ]


def test_duplicate_rule_key_is_rejected():
    local = GateRegistry()
    local.register(ConferenceNotesRequiredGate)
    with pytest.raises(ValueError, match="Duplicate gate"):
        local.register(ConferenceNotesRequiredGate)


def test_gate_class_without_rule_key_is_rejected():
    class Keyless:
        pass

    with pytest.raises(ValueError, match="missing rule_key"):
        GateRegistry().register(Keyless)
