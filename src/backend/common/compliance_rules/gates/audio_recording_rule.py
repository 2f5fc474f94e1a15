from __future__ import annotations

from ..config import AudioRecordingRuleConfig, RuleKey
from ..context import GateContext
from ..gate import Gate
from ..registry import register_gate


@register_gate
class AudioRecordingRuleGate(Gate):
    rule_key = RuleKey.AUDIO_RECORDING_RULE
    title = "Staff recording when the parent records"
    config_model = AudioRecordingRuleConfig
    failure_code = "STAFF_RECORDING_REQUIRED"

    def is_applicable(self, ctx: GateContext, cfg: AudioRecordingRuleConfig) -> bool:
        return cfg.staff_must_record_if_parent_records and ctx.meeting.parent_recording

    def passes(self, ctx: GateContext, cfg: AudioRecordingRuleConfig) -> bool:
        return ctx.meeting.staff_recording

    def failure_message(self, ctx: GateContext, cfg: AudioRecordingRuleConfig) -> str:
        return "Staff recording is required when parent is recording"
