from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime, timezone
from types import MappingProxyType
from typing import FrozenSet, Iterable, Mapping, Optional

from .config import EffectiveConfig, RuleKey, effective_config_for_pack
from .errors import ComplianceGateFailed, InvalidTransition
from .evaluator import evaluate_close_gates
from .models import (
    BlockingReason,
    GateReport,
    Meeting,
    MeetingStatus,
    PrecedenceResult,
    RulePack,
    ScopeChain,
)
from .resolver import resolve_rule_pack
from .settings import PlanTypeFallback

logger = logging.getLogger(__name__)

ALLOWED_TRANSITIONS: Mapping[MeetingStatus, FrozenSet[MeetingStatus]] = MappingProxyType(
    {
        MeetingStatus.SCHEDULED: frozenset({MeetingStatus.HELD, MeetingStatus.CANCELED}),
        MeetingStatus.HELD: frozenset({MeetingStatus.CLOSED, MeetingStatus.CANCELED}),
        MeetingStatus.CLOSED: frozenset(),
        MeetingStatus.CANCELED: frozenset(),
    }
)

# Audit stamp written when a close was governed by the built-in defaults.
DEFAULTS_RULE_PACK_ID: Optional[str] = None
DEFAULTS_RULE_PACK_VERSION = 0


def allowed_targets(current: MeetingStatus) -> FrozenSet[MeetingStatus]:
    return ALLOWED_TRANSITIONS.get(current, frozenset())


def can_transition(current: MeetingStatus, target: MeetingStatus) -> bool:
    return target in allowed_targets(current)


@dataclass(frozen=True)
class CloseCheck:
    resolution: PrecedenceResult
    config: EffectiveConfig
    report: GateReport

    @property
    def can_close(self) -> bool:
        return self.report.can_close

    @property
    def rule_pack_id(self) -> Optional[str]:
        pack = self.resolution.rule_pack
        return pack.id if pack else DEFAULTS_RULE_PACK_ID

    @property
    def rule_pack_version(self) -> int:
        pack = self.resolution.rule_pack
        return pack.version if pack else DEFAULTS_RULE_PACK_VERSION


def check_close(
    meeting: Meeting,
    scope_chain: Optional[ScopeChain],
    packs: Iterable[RulePack] = (),
    *,
    on: Optional[date] = None,
    defaults: Optional[EffectiveConfig] = None,
    fallback: Optional[PlanTypeFallback] = None,
) -> CloseCheck:
    """Resolve the governing pack, merge its config and evaluate the close gates."""
    resolution = resolve_rule_pack(
        scope_chain or ScopeChain(),
        meeting.plan_type,
        packs,
        on=on,
        fallback=fallback,
    )
    config = effective_config_for_pack(resolution.pack, defaults)
    report = evaluate_close_gates(config, meeting)
    return CloseCheck(resolution=resolution, config=config, report=report)


def check_implement(
    meeting: Meeting,
    scope_chain: Optional[ScopeChain],
    packs: Iterable[RulePack] = (),
    *,
    on: Optional[date] = None,
    defaults: Optional[EffectiveConfig] = None,
    fallback: Optional[PlanTypeFallback] = None,
) -> tuple[bool, list[BlockingReason]]:
    """Whether the plan discussed at `meeting` may be implemented (consent gate only)."""
    check = check_close(meeting, scope_chain, packs, on=on, defaults=defaults, fallback=fallback)
    consent = [r for r in check.report.blocking_reasons if r.rule_key == RuleKey.INITIAL_IEP_CONSENT_GATE.value]
    return check.report.can_implement, consent


def transition_meeting(
    meeting: Meeting,
    target: MeetingStatus,
    actor_id: Optional[str],
    *,
    scope_chain: Optional[ScopeChain] = None,
    packs: Iterable[RulePack] = (),
    now: Optional[datetime] = None,
    defaults: Optional[EffectiveConfig] = None,
    fallback: Optional[PlanTypeFallback] = None,
) -> Meeting:
    """Move a meeting to `target` and return the updated copy.

    The input snapshot is never modified. HELD -> CLOSED runs the close gates
    and stamps which rule pack version governed the decision; a blocked close
    raises ComplianceGateFailed and the meeting stays HELD. Callers persist
    the returned meeting (status and audit stamp) in one transaction.
    """
    if not can_transition(meeting.status, target):
        raise InvalidTransition(meeting.status, target)

    now = now or datetime.now(timezone.utc)
    update: dict = {"status": target}

    if target == MeetingStatus.HELD and meeting.held_at is None:
        update["held_at"] = now

    if target == MeetingStatus.CLOSED:
        check = check_close(
            meeting,
            scope_chain,
            packs,
            on=now.date(),
            defaults=defaults,
            fallback=fallback,
        )
        if not check.can_close:
            logger.warning(
                "Close blocked for meeting %s: %s",
                meeting.id,
                ", ".join(r.code for r in check.report.blocking_reasons),
            )
            raise ComplianceGateFailed(check.report.blocking_reasons, check.report)

        update.update(
            closed_at=now,
            closed_by_user_id=actor_id,
            rule_pack_id=check.rule_pack_id,
            rule_pack_version=check.rule_pack_version,
        )

    logger.info(
        "Meeting %s moved %s -> %s by %s",
        meeting.id,
        meeting.status.value,
        target.value,
        actor_id,
    )
    return meeting.model_copy(update=update, deep=True)
