from __future__ import annotations

from datetime import date
from typing import Any, Dict, Iterable, List, Optional

from pydantic import BaseModel, Field

from .config import RULE_DEFINITIONS, EffectiveConfig, RuleKey, effective_config_for_pack, system_defaults
from .deadlines import calculate_due_dates
from .models import (
    MeetingTypeCode,
    PlanType,
    PrecedenceSearch,
    RulePack,
    RulePackSummary,
    ScopeChain,
)
from .registry import registry
from .resolver import resolve_rule_pack
from .settings import PlanTypeFallback

# Import built-in gates so they self-register with the global registry.
from . import gates as _builtin_gates  # noqa: F401


class GateRuleInfo(BaseModel):
    key: str
    name: str
    description: str
    enabled: bool
    config: Dict[str, Any] = Field(default_factory=dict)


class DocsDeadline(BaseModel):
    standard_deadline: Optional[date] = None
    us_mail_deadline: Optional[date] = None
    business_days: int


class Deadlines(BaseModel):
    pre_meeting_docs: DocsDeadline
    post_meeting_docs: DocsDeadline


class EvidenceRequirementInfo(BaseModel):
    key: str
    is_required: bool
    linked_rule: str


class RulesContext(BaseModel):
    """What governs a student's meetings for one plan type, for UI and assistant consumption."""

    resolved: bool
    rule_pack: Optional[RulePackSummary] = None
    precedence: PrecedenceSearch
    meeting_type: Optional[MeetingTypeCode] = None
    gates: List[GateRuleInfo] = Field(default_factory=list)
    deadlines: Optional[Deadlines] = None
    evidence_requirements: List[EvidenceRequirementInfo] = Field(default_factory=list)
    defaults: Dict[str, Dict[str, Any]] = Field(default_factory=dict)


def _gate_rules(config: EffectiveConfig) -> List[GateRuleInfo]:
    gates: List[GateRuleInfo] = []
    for key in registry.keys():
        definition = RULE_DEFINITIONS[key]
        gates.append(
            GateRuleInfo(
                key=key.value,
                name=definition.name,
                description=definition.description,
                enabled=config.is_enabled(key),
                config=config.get(key).to_payload(),
            )
        )
    return gates


def _deadlines(scheduled_at: date, config: EffectiveConfig) -> Deadlines:
    due = calculate_due_dates(scheduled_at, config)
    return Deadlines(
        pre_meeting_docs=DocsDeadline(
            standard_deadline=due.pre_docs_deadline,
            us_mail_deadline=due.us_mail_pre_docs_deadline,
            business_days=config.get(RuleKey.PRE_MEETING_DOCS_DAYS).days,
        ),
        post_meeting_docs=DocsDeadline(
            standard_deadline=due.post_docs_deadline,
            us_mail_deadline=due.us_mail_post_docs_deadline,
            business_days=config.get(RuleKey.POST_MEETING_DOCS_DAYS).days,
        ),
    )


def build_rules_context(
    scope_chain: ScopeChain,
    plan_type: PlanType,
    packs: Iterable[RulePack],
    *,
    meeting_type: Optional[MeetingTypeCode] = None,
    scheduled_at: Optional[date] = None,
    on: Optional[date] = None,
    fallback: Optional[PlanTypeFallback] = None,
) -> RulesContext:
    precedence = resolve_rule_pack(scope_chain, plan_type, packs, on=on, fallback=fallback)
    defaults = system_defaults()
    config = effective_config_for_pack(precedence.pack, defaults)

    requirements = [
        EvidenceRequirementInfo(
            key=req.evidence_type_key,
            is_required=req.is_required,
            linked_rule=key.value,
        )
        for key, reqs in config.evidence_requirements.items()
        for req in reqs
    ]

    return RulesContext(
        resolved=precedence.resolved,
        rule_pack=precedence.rule_pack,
        precedence=precedence.precedence,
        meeting_type=meeting_type,
        gates=_gate_rules(config),
        deadlines=_deadlines(scheduled_at, config) if scheduled_at is not None else None,
        evidence_requirements=requirements,
        defaults=defaults.as_dict(),
    )
