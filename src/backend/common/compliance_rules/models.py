from __future__ import annotations

from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class ScopeType(str, Enum):
    STATE = "STATE"
    DISTRICT = "DISTRICT"
    SCHOOL = "SCHOOL"


class PlanType(str, Enum):
    IEP = "IEP"
    PLAN504 = "PLAN504"
    BIP = "BIP"
    ALL = "ALL"


class MeetingStatus(str, Enum):
    SCHEDULED = "SCHEDULED"
    HELD = "HELD"
    CLOSED = "CLOSED"
    CANCELED = "CANCELED"


class ConsentStatus(str, Enum):
    PENDING = "PENDING"
    OBTAINED = "OBTAINED"
    REFUSED = "REFUSED"


class MeetingTypeCode(str, Enum):
    INITIAL = "INITIAL"
    ANNUAL = "ANNUAL"
    REVIEW = "REVIEW"
    AMENDMENT = "AMENDMENT"
    CONTINUED = "CONTINUED"


class DeliveryMethod(str, Enum):
    SEND_HOME = "SEND_HOME"
    US_MAIL = "US_MAIL"
    PICK_UP = "PICK_UP"


class EvidenceRequirement(BaseModel):
    evidence_type_key: str
    is_required: bool = True


class RulePackRule(BaseModel):
    # Kept as a plain string: packs may reference rule definitions this engine does not know.
    rule_key: str
    is_enabled: bool = True
    # None means "no override"; the system default for the rule applies.
    config: Optional[Dict[str, Any]] = None
    sort_order: int = 0
    evidence_requirements: List[EvidenceRequirement] = Field(default_factory=list)


class RulePackSummary(BaseModel):
    id: str
    name: str
    version: int
    scope_type: ScopeType
    scope_id: str
    plan_type: PlanType


class RulePack(BaseModel):
    id: str
    scope_type: ScopeType
    scope_id: str
    plan_type: PlanType
    name: str
    version: int = Field(default=1, ge=1)
    is_active: bool = False
    effective_from: date
    effective_to: Optional[date] = None
    rules: List[RulePackRule] = Field(default_factory=list)

    def is_effective(self, on: date) -> bool:
        if self.effective_from > on:
            return False
        return self.effective_to is None or self.effective_to >= on

    def is_live(self, on: date) -> bool:
        return self.is_active and self.is_effective(on)

    def ordered_rules(self) -> List[RulePackRule]:
        return sorted(self.rules, key=lambda r: r.sort_order)

    def summary(self) -> RulePackSummary:
        return RulePackSummary(
            id=self.id,
            name=self.name,
            version=self.version,
            scope_type=self.scope_type,
            scope_id=self.scope_id,
            plan_type=self.plan_type,
        )


class MeetingEvidence(BaseModel):
    evidence_type_key: str
    note: Optional[str] = None


class Meeting(BaseModel):
    """Snapshot of a compliance meeting as fetched by the caller.

    `continued_from_scheduled_at` carries the scheduled date of the meeting this one continues;
    the core never fetches it on its own.
    """

    id: str
    student_id: Optional[str] = None
    status: MeetingStatus = MeetingStatus.SCHEDULED
    meeting_type: MeetingTypeCode = MeetingTypeCode.ANNUAL
    plan_type: PlanType = PlanType.IEP

    scheduled_at: datetime
    held_at: Optional[datetime] = None

    is_continued: bool = False
    continued_from_meeting_id: Optional[str] = None
    continued_from_scheduled_at: Optional[datetime] = None

    parent_recording: bool = False
    staff_recording: bool = False
    consent_status: Optional[ConsentStatus] = None
    notice_waiver_signed: Optional[bool] = None
    mutual_agreement_for_continued_date: Optional[bool] = None

    parent_delivery_method: Optional[DeliveryMethod] = None
    pre_docs_delivered_at: Optional[datetime] = None
    post_docs_delivered_at: Optional[datetime] = None

    evidence: List[MeetingEvidence] = Field(default_factory=list)

    closed_at: Optional[datetime] = None
    closed_by_user_id: Optional[str] = None
    rule_pack_id: Optional[str] = None
    rule_pack_version: Optional[int] = None

    def has_evidence(self, evidence_type_key: str) -> bool:
        return any(item.evidence_type_key == evidence_type_key for item in self.evidence)

    def evidence_keys(self) -> set[str]:
        return {item.evidence_type_key for item in self.evidence}


class ScopeRef(BaseModel):
    model_config = ConfigDict(frozen=True)

    scope_type: ScopeType
    scope_id: str


class ScopeChain(BaseModel):
    """A student's organisational location: school -> district -> state."""

    school_id: Optional[str] = None
    district_id: Optional[str] = None
    state_code: Optional[str] = None

    def candidates(self) -> List[ScopeRef]:
        # Truncate at the first missing link; never skip a level.
        scopes: List[ScopeRef] = []
        if not self.school_id:
            return scopes
        scopes.append(ScopeRef(scope_type=ScopeType.SCHOOL, scope_id=self.school_id))
        if not self.district_id:
            return scopes
        scopes.append(ScopeRef(scope_type=ScopeType.DISTRICT, scope_id=self.district_id))
        if not self.state_code:
            return scopes
        scopes.append(ScopeRef(scope_type=ScopeType.STATE, scope_id=self.state_code))
        return scopes


class PrecedenceSearch(BaseModel):
    searched: List[ScopeRef] = Field(default_factory=list)
    matched: Optional[ScopeRef] = None


class PrecedenceResult(BaseModel):
    resolved: bool
    rule_pack: Optional[RulePackSummary] = None
    precedence: PrecedenceSearch = Field(default_factory=PrecedenceSearch)
    # Full aggregate for the config merge; not part of the serialised result.
    pack: Optional[RulePack] = Field(default=None, exclude=True)


class BlockingReason(BaseModel):
    rule_key: str
    code: str
    message: str


class ComplianceWarning(BaseModel):
    rule_key: str
    code: str
    message: str


class RequiredEvidenceItem(BaseModel):
    evidence_type_key: str
    rule_key: str
    is_required: bool = True
    is_provided: bool = False


class GateOutcome(BaseModel):
    key: str
    enabled: bool
    config: Dict[str, Any] = Field(default_factory=dict)
    passed: bool = True
    reason: Optional[BlockingReason] = None


class GateReport(BaseModel):
    gates: List[GateOutcome] = Field(default_factory=list)
    can_close: bool = True
    can_implement: bool = True
    blocking_reasons: List[BlockingReason] = Field(default_factory=list)
    warnings: List[ComplianceWarning] = Field(default_factory=list)
    required_evidence: List[RequiredEvidenceItem] = Field(default_factory=list)

    def gate(self, key: str) -> Optional[GateOutcome]:
        for outcome in self.gates:
            if outcome.key == key:
                return outcome
        return None
