from __future__ import annotations

import logging
from typing import Iterable, List, Optional

from .config import EffectiveConfig, RuleKey
from .context import GateContext
from .gate import Gate
from .models import (
    ComplianceWarning,
    GateReport,
    Meeting,
    MeetingStatus,
    RequiredEvidenceItem,
)
from .registry import registry

# Import built-in gates so they self-register with the global registry.
from . import gates as _builtin_gates  # noqa: F401

logger = logging.getLogger(__name__)

PARENT_DOCS_SENT = "PARENT_DOCS_SENT"
FINAL_DOC_SENT = "FINAL_DOC_SENT"
RECORDING_ACK = "RECORDING_ACK"


class GateEvaluator:
    def __init__(self, gates: Optional[Iterable[Gate]] = None):
        self._gates = list(gates) if gates is not None else registry.create_all()

    def evaluate(self, config: EffectiveConfig, meeting: Meeting) -> GateReport:
        ctx = GateContext(meeting=meeting, config=config)

        outcomes = []
        required: List[RequiredEvidenceItem] = []
        for gate in self._gates:
            outcome = gate.evaluate(ctx)
            outcomes.append(outcome)
            if outcome.enabled:
                required.extend(gate.required_evidence(ctx, config.get(gate.rule_key)))

        blocking = [o.reason for o in outcomes if o.reason is not None]
        consent = next((o for o in outcomes if o.key == RuleKey.INITIAL_IEP_CONSENT_GATE.value), None)
        applicable = {o.key for o in outcomes if o.enabled}

        required.extend(_pack_evidence(ctx, applicable, required))
        report = GateReport(
            gates=outcomes,
            can_close=not blocking,
            can_implement=consent is None or consent.passed,
            blocking_reasons=blocking,
            warnings=_warnings(ctx, required),
            required_evidence=required,
        )
        if blocking:
            logger.debug(
                "Meeting %s blocked by %s",
                meeting.id,
                ", ".join(r.rule_key for r in blocking),
            )
        return report


def evaluate_close_gates(config: EffectiveConfig, meeting: Meeting) -> GateReport:
    """Evaluate every close gate against a meeting snapshot.

    `can_close` is true only when no applicable gate fails; gates that are
    disabled or do not apply pass and add no blocking reason.
    """
    return GateEvaluator().evaluate(config, meeting)


def _pack_evidence(
    ctx: GateContext,
    applicable_gates: set[str],
    already: List[RequiredEvidenceItem],
) -> List[RequiredEvidenceItem]:
    seen = {(item.rule_key, item.evidence_type_key) for item in already}
    items: List[RequiredEvidenceItem] = []
    for key, reqs in ctx.config.evidence_requirements.items():
        if not ctx.config.is_enabled(key):
            continue
        # Evidence linked to a gate is only owed when that gate applies to the meeting.
        if key in registry and key.value not in applicable_gates:
            continue
        for req in reqs:
            marker = (key.value, req.evidence_type_key)
            if marker in seen:
                continue
            seen.add(marker)
            items.append(
                RequiredEvidenceItem(
                    evidence_type_key=req.evidence_type_key,
                    rule_key=key.value,
                    is_required=req.is_required,
                    is_provided=ctx.has_evidence(req.evidence_type_key),
                )
            )
    return items


def _warnings(ctx: GateContext, required: List[RequiredEvidenceItem]) -> List[ComplianceWarning]:
    meeting = ctx.meeting
    config = ctx.config
    warnings: List[ComplianceWarning] = []

    if config.is_enabled(RuleKey.PRE_MEETING_DOCS_DAYS):
        if not (ctx.has_evidence(PARENT_DOCS_SENT) or meeting.pre_docs_delivered_at is not None):
            warnings.append(
                ComplianceWarning(
                    rule_key=RuleKey.PRE_MEETING_DOCS_DAYS.value,
                    code="PRE_DOCS_NOT_SENT",
                    message="Pre-meeting documents have not been marked as sent",
                )
            )

    if config.is_enabled(RuleKey.POST_MEETING_DOCS_DAYS) and meeting.status == MeetingStatus.HELD:
        if not (ctx.has_evidence(FINAL_DOC_SENT) or meeting.post_docs_delivered_at is not None):
            warnings.append(
                ComplianceWarning(
                    rule_key=RuleKey.POST_MEETING_DOCS_DAYS.value,
                    code="POST_DOCS_NOT_SENT",
                    message="Post-meeting documents have not been marked as sent",
                )
            )

    recording = config.get(RuleKey.AUDIO_RECORDING_RULE)
    if (
        config.is_enabled(RuleKey.AUDIO_RECORDING_RULE)
        and recording.staff_must_record_if_parent_records
        and meeting.parent_recording
        and not ctx.has_evidence(RECORDING_ACK)
    ):
        warnings.append(
            ComplianceWarning(
                rule_key=RuleKey.AUDIO_RECORDING_RULE.value,
                code="MISSING_RECORDING_ACK",
                message="Recording acknowledgment should be filed when recording occurs",
            )
        )

    for item in required:
        if item.is_required and not item.is_provided and item.rule_key not in {
            k.value for k in registry.keys()
        }:
            warnings.append(
                ComplianceWarning(
                    rule_key=item.rule_key,
                    code="MISSING_REQUIRED_EVIDENCE",
                    message=f"Required evidence {item.evidence_type_key} has not been provided",
                )
            )

    return warnings
