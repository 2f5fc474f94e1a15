from __future__ import annotations

from datetime import date, datetime
from typing import Any, Iterable

from common.compliance_rules.models import (
    EvidenceRequirement,
    PlanType,
    RulePack,
    RulePackRule,
    ScopeChain,
    ScopeType,
)


def rule_pack_from_record(record: dict[str, Any]) -> RulePack:
    """
    Build a RulePack from a stored rule pack row with its rules included.

    Expected shape:
      {
        "id": "...",
        "scopeType": "STATE",
        "scopeId": "MD",
        "planType": "IEP",
        "name": "...",
        "version": 1,
        "isActive": true,
        "effectiveFrom": "YYYY-MM-DD",
        "effectiveTo": null,
        "rules": [
          {
            "ruleDefinition": {"key": "PRE_MEETING_DOCS_DAYS"},
            "isEnabled": true,
            "config": {"days": 5},
            "sortOrder": 0,
            "evidenceRequirements": [
              {"evidenceType": {"key": "PARENT_DOCS_SENT"}, "isRequired": true}
            ]
          }
        ]
      }

    Notes:
    - id, scopeType, scopeId, planType and effectiveFrom are required
    - a rule may carry its key directly as "ruleKey" instead of "ruleDefinition"
    """
    for field in ("id", "scopeType", "scopeId", "planType", "effectiveFrom"):
        if record.get(field) in (None, ""):
            raise ValueError(f"Rule pack record missing required field: {field}")

    return RulePack(
        id=str(record["id"]),
        scope_type=ScopeType(record["scopeType"]),
        scope_id=str(record["scopeId"]),
        plan_type=PlanType(record["planType"]),
        name=str(record.get("name") or ""),
        version=int(record.get("version") or 1),
        is_active=bool(record.get("isActive", False)),
        effective_from=_parse_date(record["effectiveFrom"]),
        effective_to=_parse_date(record.get("effectiveTo")),
        rules=[_rule_from_record(entry) for entry in _as_list(record.get("rules"))],
    )


def scope_chain_from_record(record: dict[str, Any]) -> ScopeChain:
    """
    Build a ScopeChain from a student row with school and district included.

    Accepts {"school": {"id": ..., "district": {"id": ..., "state": {"code": ...}}}}
    or the flat {"schoolId", "districtId", "stateCode"} form.
    """
    school = record.get("school")
    if isinstance(school, dict):
        district = school.get("district") if isinstance(school.get("district"), dict) else {}
        state = district.get("state") if isinstance(district.get("state"), dict) else {}
        return ScopeChain(
            school_id=school.get("id"),
            district_id=district.get("id"),
            state_code=state.get("code") or district.get("stateCode"),
        )
    return ScopeChain(
        school_id=record.get("schoolId"),
        district_id=record.get("districtId"),
        state_code=record.get("stateCode"),
    )


def _rule_from_record(entry: Any) -> RulePackRule:
    if not isinstance(entry, dict):
        raise ValueError("Rule pack rules must be objects.")
    definition = entry.get("ruleDefinition")
    key = definition.get("key") if isinstance(definition, dict) else entry.get("ruleKey")
    if not key:
        raise ValueError("Rule pack rule missing required field: ruleDefinition.key")

    config = entry.get("config")
    if config is not None and not isinstance(config, dict):
        raise ValueError(f"Rule {key} config must be an object or null.")

    return RulePackRule(
        rule_key=str(key),
        is_enabled=bool(entry.get("isEnabled", True)),
        config=config,
        sort_order=int(entry.get("sortOrder") or 0),
        evidence_requirements=list(_evidence_requirements(entry.get("evidenceRequirements"))),
    )


def _evidence_requirements(raw: Any) -> Iterable[EvidenceRequirement]:
    for req in _as_list(raw):
        if not isinstance(req, dict):
            raise ValueError("Evidence requirements must be objects.")
        evidence_type = req.get("evidenceType")
        key = evidence_type.get("key") if isinstance(evidence_type, dict) else req.get("evidenceTypeKey")
        if not key:
            raise ValueError("Evidence requirement missing required field: evidenceType.key")
        yield EvidenceRequirement(evidence_type_key=str(key), is_required=bool(req.get("isRequired", True)))


def _as_list(value: Any) -> list:
    if value is None:
        return []
    if not isinstance(value, list):
        raise ValueError("Expected a list.")
    return value


def _parse_date(value: Any) -> date | None:
    if value in (None, ""):
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value)
    # Stored timestamps ("2024-01-01T00:00:00.000Z") are read as calendar dates.
    return date.fromisoformat(text[:10])
