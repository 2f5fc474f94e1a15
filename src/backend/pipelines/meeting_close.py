from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Optional

from common.compliance_rules.models import Meeting, MeetingStatus, ScopeChain
from common.compliance_rules.settings import PlanTypeFallback
from common.compliance_rules.workflow import CloseCheck, check_close, transition_meeting

from .data_source import ComplianceDataSource

logger = logging.getLogger(__name__)


def _scope_chain_for(source: ComplianceDataSource, meeting: Meeting) -> ScopeChain:
    if not meeting.student_id:
        return ScopeChain()
    chain = source.get_scope_chain(meeting.student_id)
    if chain is None:
        logger.warning("No scope chain for student %s; system defaults apply", meeting.student_id)
        return ScopeChain()
    return chain


def evaluate_meeting(
    source: ComplianceDataSource,
    meeting_id: str,
    *,
    on: Optional[date] = None,
    fallback: Optional[PlanTypeFallback] = None,
) -> CloseCheck:
    """Run the close gates for a stored meeting without changing it."""
    meeting = source.get_meeting(meeting_id)
    chain = _scope_chain_for(source, meeting)
    packs = source.list_rule_packs(chain, meeting.plan_type)
    return check_close(meeting, chain, packs, on=on, fallback=fallback)


def move_meeting(
    source: ComplianceDataSource,
    meeting_id: str,
    target: MeetingStatus,
    actor_id: Optional[str],
    *,
    now: Optional[datetime] = None,
    fallback: Optional[PlanTypeFallback] = None,
) -> Meeting:
    """Fetch, transition and save a meeting. Nothing is saved when the transition is refused."""
    meeting = source.get_meeting(meeting_id)
    chain = _scope_chain_for(source, meeting)
    packs = source.list_rule_packs(chain, meeting.plan_type) if target == MeetingStatus.CLOSED else []
    updated = transition_meeting(
        meeting,
        target,
        actor_id,
        scope_chain=chain,
        packs=packs,
        now=now,
        fallback=fallback,
    )
    source.save_meeting(updated)
    return updated


def close_meeting(
    source: ComplianceDataSource,
    meeting_id: str,
    actor_id: Optional[str],
    *,
    now: Optional[datetime] = None,
    fallback: Optional[PlanTypeFallback] = None,
) -> Meeting:
    return move_meeting(source, meeting_id, MeetingStatus.CLOSED, actor_id, now=now, fallback=fallback)
