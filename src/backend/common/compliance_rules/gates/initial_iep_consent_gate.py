from __future__ import annotations

from typing import List

from ..config import InitialIepConsentGateConfig, RuleKey
from ..context import GateContext
from ..gate import Gate
from ..models import ConsentStatus, MeetingTypeCode, RequiredEvidenceItem
from ..registry import register_gate

CONSENT_FORM = "CONSENT_FORM"


@register_gate
class InitialIepConsentGate(Gate):
    rule_key = RuleKey.INITIAL_IEP_CONSENT_GATE
    title = "Parent consent obtained for an initial plan"
    config_model = InitialIepConsentGateConfig
    failure_code = "MISSING_CONSENT"

    def is_applicable(self, ctx: GateContext, cfg: InitialIepConsentGateConfig) -> bool:
        return ctx.meeting.meeting_type == MeetingTypeCode.INITIAL and cfg.enabled

    def passes(self, ctx: GateContext, cfg: InitialIepConsentGateConfig) -> bool:
        return ctx.meeting.consent_status == ConsentStatus.OBTAINED or ctx.has_evidence(CONSENT_FORM)

    def failure_message(self, ctx: GateContext, cfg: InitialIepConsentGateConfig) -> str:
        return "Parent consent is required for an initial IEP"

    def required_evidence(self, ctx: GateContext, cfg: InitialIepConsentGateConfig) -> List[RequiredEvidenceItem]:
        return [
            RequiredEvidenceItem(
                evidence_type_key=CONSENT_FORM,
                rule_key=self.rule_key.value,
                is_provided=self.passes(ctx, cfg),
            )
        ]
