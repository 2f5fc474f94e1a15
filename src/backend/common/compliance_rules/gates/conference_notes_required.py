from __future__ import annotations

from typing import List

from ..config import ConferenceNotesRequiredConfig, RuleKey
from ..context import GateContext
from ..gate import Gate
from ..models import RequiredEvidenceItem
from ..registry import register_gate

CONFERENCE_NOTES = "CONFERENCE_NOTES"


@register_gate
class ConferenceNotesRequiredGate(Gate):
    rule_key = RuleKey.CONFERENCE_NOTES_REQUIRED
    title = "Conference notes recorded before close"
    config_model = ConferenceNotesRequiredConfig
    failure_code = "MISSING_CONFERENCE_NOTES"

    def is_applicable(self, ctx: GateContext, cfg: ConferenceNotesRequiredConfig) -> bool:
        return cfg.required

    def passes(self, ctx: GateContext, cfg: ConferenceNotesRequiredConfig) -> bool:
        return ctx.has_evidence(CONFERENCE_NOTES)

    def failure_message(self, ctx: GateContext, cfg: ConferenceNotesRequiredConfig) -> str:
        return "Conference notes are required before closing this meeting"

    def required_evidence(self, ctx: GateContext, cfg: ConferenceNotesRequiredConfig) -> List[RequiredEvidenceItem]:
        return [
            RequiredEvidenceItem(
                evidence_type_key=CONFERENCE_NOTES,
                rule_key=self.rule_key.value,
                is_provided=ctx.has_evidence(CONFERENCE_NOTES),
            )
        ]
