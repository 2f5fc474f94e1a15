from __future__ import annotations

from typing import List

from ..config import ContinuedMeetingNoticeDaysConfig, RuleKey
from ..context import GateContext
from ..gate import Gate
from ..models import RequiredEvidenceItem
from ..registry import register_gate

NOTICE_WAIVER = "NOTICE_WAIVER"


@register_gate
class ContinuedMeetingNoticeDaysGate(Gate):
    rule_key = RuleKey.CONTINUED_MEETING_NOTICE_DAYS
    title = "Continued meeting scheduled with sufficient notice, or notice waived"
    config_model = ContinuedMeetingNoticeDaysConfig
    failure_code = "MISSING_NOTICE_WAIVER"

    def is_applicable(self, ctx: GateContext, cfg: ContinuedMeetingNoticeDaysConfig) -> bool:
        return ctx.meeting.is_continued

    def _notice_met(self, ctx: GateContext, cfg: ContinuedMeetingNoticeDaysConfig) -> bool:
        # Unknown original date: notice cannot be shown, only a waiver satisfies the gate.
        notice = ctx.continued_notice_business_days()
        return notice is not None and notice >= cfg.days

    def _waived(self, ctx: GateContext) -> bool:
        return ctx.meeting.notice_waiver_signed is True or ctx.has_evidence(NOTICE_WAIVER)

    def passes(self, ctx: GateContext, cfg: ContinuedMeetingNoticeDaysConfig) -> bool:
        return self._notice_met(ctx, cfg) or self._waived(ctx)

    def failure_message(self, ctx: GateContext, cfg: ContinuedMeetingNoticeDaysConfig) -> str:
        notice = ctx.continued_notice_business_days()
        if notice is None:
            return (
                f"Continued meeting requires {cfg.days} business days notice; "
                "original meeting date is unknown and no waiver is on file"
            )
        return (
            f"Continued meeting scheduled with {notice} business days notice "
            f"(less than {cfg.days}) requires a waiver"
        )

    def required_evidence(self, ctx: GateContext, cfg: ContinuedMeetingNoticeDaysConfig) -> List[RequiredEvidenceItem]:
        if self._notice_met(ctx, cfg):
            return []
        return [
            RequiredEvidenceItem(
                evidence_type_key=NOTICE_WAIVER,
                rule_key=self.rule_key.value,
                is_provided=self._waived(ctx),
            )
        ]
