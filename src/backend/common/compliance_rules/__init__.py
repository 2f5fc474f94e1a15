"""Rule resolution and meeting-compliance engine for special-education plans.

This package intentionally contains only domain logic:
- Inputs are already-fetched rule packs, scope chains and meeting snapshots.
- No database, HTTP or session handling lives here.
"""

from .business_days import add_business_days, business_days_between
from .config import (
    EffectiveConfig,
    RuleKey,
    effective_config_for_pack,
    merge_config,
    system_defaults,
)
from .errors import ComplianceError, ComplianceGateFailed, InvalidTransition, RuleConfigError
from .evaluator import evaluate_close_gates
from .models import (
    Meeting,
    MeetingEvidence,
    MeetingStatus,
    PlanType,
    PrecedenceResult,
    RulePack,
    RulePackRule,
    ScopeChain,
    ScopeType,
)
from .resolver import resolve_rule_pack
from .workflow import check_close, transition_meeting

# Import built-in gates so they self-register with the global registry.
from . import gates as _builtin_gates  # noqa: F401
