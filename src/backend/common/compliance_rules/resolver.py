from __future__ import annotations

import logging
from datetime import date
from typing import Iterable, List, Optional, Sequence, Tuple

from .business_days import as_calendar_date
from .models import (
    PlanType,
    PrecedenceResult,
    PrecedenceSearch,
    RulePack,
    ScopeChain,
    ScopeRef,
)
from .settings import PlanTypeFallback, get_engine_settings

logger = logging.getLogger(__name__)


def build_scope_candidates(chain: ScopeChain) -> List[ScopeRef]:
    """SCHOOL -> DISTRICT -> STATE, truncated at the first missing ancestor."""
    return chain.candidates()


def find_live_pack(
    packs: Iterable[RulePack],
    scope: ScopeRef,
    plan_type: PlanType,
    on: date,
) -> Optional[RulePack]:
    """Highest-version pack that is active and effective for exactly (scope, plan_type)."""
    matches = [
        pack
        for pack in packs
        if pack.scope_type == scope.scope_type
        and pack.scope_id == scope.scope_id
        and pack.plan_type == plan_type
        and pack.is_live(on)
    ]
    if not matches:
        return None
    return max(matches, key=lambda p: p.version)


def _search_order(
    scopes: Sequence[ScopeRef],
    plan_type: PlanType,
    fallback: PlanTypeFallback,
) -> List[Tuple[ScopeRef, PlanType]]:
    if plan_type == PlanType.ALL or fallback == PlanTypeFallback.NONE:
        return [(scope, plan_type) for scope in scopes]
    if fallback == PlanTypeFallback.SPECIFIC_FIRST:
        return [(scope, plan_type) for scope in scopes] + [(scope, PlanType.ALL) for scope in scopes]
    order: List[Tuple[ScopeRef, PlanType]] = []
    for scope in scopes:
        order.append((scope, plan_type))
        order.append((scope, PlanType.ALL))
    return order


def resolve_rule_pack(
    scope_chain: ScopeChain,
    plan_type: PlanType,
    packs: Iterable[RulePack],
    *,
    on: Optional[date] = None,
    fallback: Optional[PlanTypeFallback] = None,
) -> PrecedenceResult:
    """Pick the most specific live rule pack for a student's scope chain.

    `packs` is the candidate set already fetched by the caller. Strict
    precedence: the first (scope, plan type) in search order with a live pack
    wins; nothing is merged across levels. No match is a normal outcome
    (`resolved=False`) and callers fall back to the system defaults.
    """
    on = as_calendar_date(on) if on is not None else date.today()
    if fallback is None:
        fallback = get_engine_settings().plan_type_fallback

    candidates = list(packs)
    scopes = build_scope_candidates(scope_chain)
    search = PrecedenceSearch(searched=scopes)

    for scope, wanted in _search_order(scopes, plan_type, fallback):
        pack = find_live_pack(candidates, scope, wanted, on)
        if pack is None:
            continue
        logger.debug(
            "Resolved rule pack %s v%s at %s %s (plan type %s)",
            pack.id,
            pack.version,
            scope.scope_type.value,
            scope.scope_id,
            wanted.value,
        )
        return PrecedenceResult(
            resolved=True,
            rule_pack=pack.summary(),
            precedence=PrecedenceSearch(searched=scopes, matched=scope),
            pack=pack,
        )

    logger.debug(
        "No rule pack for plan type %s across %d scope(s); using system defaults",
        plan_type.value,
        len(scopes),
    )
    return PrecedenceResult(resolved=False, rule_pack=None, precedence=search, pack=None)
