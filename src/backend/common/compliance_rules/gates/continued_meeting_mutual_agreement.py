from __future__ import annotations

from ..config import ContinuedMeetingMutualAgreementConfig, RuleKey
from ..context import GateContext
from ..gate import Gate
from ..registry import register_gate


@register_gate
class ContinuedMeetingMutualAgreementGate(Gate):
    rule_key = RuleKey.CONTINUED_MEETING_MUTUAL_AGREEMENT
    title = "Mutual agreement on the continued meeting date recorded"
    config_model = ContinuedMeetingMutualAgreementConfig
    failure_code = "MISSING_MUTUAL_AGREEMENT"

    def is_applicable(self, ctx: GateContext, cfg: ContinuedMeetingMutualAgreementConfig) -> bool:
        return ctx.meeting.is_continued and cfg.required

    def passes(self, ctx: GateContext, cfg: ContinuedMeetingMutualAgreementConfig) -> bool:
        # Any recorded answer satisfies the gate; only a missing record blocks.
        return ctx.meeting.mutual_agreement_for_continued_date is not None

    def failure_message(self, ctx: GateContext, cfg: ContinuedMeetingMutualAgreementConfig) -> str:
        return "Mutual agreement for continued meeting date must be recorded"
