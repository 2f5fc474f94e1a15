from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from enum import Enum

from dotenv import load_dotenv


load_dotenv()


class PlanTypeFallback(str, Enum):
    # Specific plan type, then ALL, at each scope level before moving up a level.
    SAME_SCOPE = "same_scope"
    # Every scope level for the specific plan type, then every level for ALL.
    SPECIFIC_FIRST = "specific_first"
    # Exact plan type only; ALL packs never match.
    NONE = "none"


@dataclass(frozen=True)
class EngineSettings:
    plan_type_fallback: PlanTypeFallback = PlanTypeFallback.SAME_SCOPE
    log_level: int = logging.INFO


def get_engine_settings() -> EngineSettings:
    """
    Load engine settings from environment variables.

    Reads:
      COMPLIANCE_PLAN_TYPE_FALLBACK (same_scope | specific_first | none)
      COMPLIANCE_LOG_LEVEL (DEBUG | INFO | WARNING | ERROR)
    """
    return EngineSettings(
        plan_type_fallback=_plan_type_fallback_from_env(),
        log_level=_log_level_from_env(),
    )


def _plan_type_fallback_from_env() -> PlanTypeFallback:
    raw = os.getenv("COMPLIANCE_PLAN_TYPE_FALLBACK", "").strip().lower()
    if not raw:
        return PlanTypeFallback.SAME_SCOPE
    try:
        return PlanTypeFallback(raw)
    except ValueError:
        allowed = ", ".join(p.value for p in PlanTypeFallback)
        raise ValueError(f"COMPLIANCE_PLAN_TYPE_FALLBACK must be one of: {allowed}.") from None


def _log_level_from_env() -> int:
    raw = os.getenv("COMPLIANCE_LOG_LEVEL", "INFO").strip().upper()
    level = logging.getLevelName(raw)
    if not isinstance(level, int):
        raise ValueError(f"COMPLIANCE_LOG_LEVEL is not a valid log level: {raw}")
    return level
