from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, Iterable, Mapping, Optional, Tuple, Type, TypeVar, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic.alias_generators import to_camel

from .errors import RuleConfigError
from .models import DeliveryMethod, EvidenceRequirement, RulePack

logger = logging.getLogger(__name__)

T = TypeVar("T", bound="RuleConfigBase")


class RuleKey(str, Enum):
    PRE_MEETING_DOCS_DAYS = "PRE_MEETING_DOCS_DAYS"
    POST_MEETING_DOCS_DAYS = "POST_MEETING_DOCS_DAYS"
    DEFAULT_DELIVERY_METHOD = "DEFAULT_DELIVERY_METHOD"
    US_MAIL_PRE_MEETING_DAYS = "US_MAIL_PRE_MEETING_DAYS"
    US_MAIL_POST_MEETING_DAYS = "US_MAIL_POST_MEETING_DAYS"
    CONFERENCE_NOTES_REQUIRED = "CONFERENCE_NOTES_REQUIRED"
    INITIAL_IEP_CONSENT_GATE = "INITIAL_IEP_CONSENT_GATE"
    CONTINUED_MEETING_NOTICE_DAYS = "CONTINUED_MEETING_NOTICE_DAYS"
    CONTINUED_MEETING_MUTUAL_AGREEMENT = "CONTINUED_MEETING_MUTUAL_AGREEMENT"
    AUDIO_RECORDING_RULE = "AUDIO_RECORDING_RULE"


class RuleConfigBase(BaseModel):
    # Stored pack configs use camelCase keys; snake_case is accepted too.
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        extra="ignore",
    )

    def to_payload(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, mode="json")


class PreMeetingDocsDaysConfig(RuleConfigBase):
    days: int = Field(default=5, ge=0)


class PostMeetingDocsDaysConfig(RuleConfigBase):
    days: int = Field(default=5, ge=0)


class DefaultDeliveryMethodConfig(RuleConfigBase):
    method: DeliveryMethod = DeliveryMethod.SEND_HOME


class UsMailPreMeetingDaysConfig(RuleConfigBase):
    # Extra business days added on top of PRE_MEETING_DOCS_DAYS when mailing.
    days: int = Field(default=3, ge=0)


class UsMailPostMeetingDaysConfig(RuleConfigBase):
    days: int = Field(default=3, ge=0)


class ConferenceNotesRequiredConfig(RuleConfigBase):
    required: bool = True


class InitialIepConsentGateConfig(RuleConfigBase):
    enabled: bool = True


class ContinuedMeetingNoticeDaysConfig(RuleConfigBase):
    days: int = Field(default=10, ge=0)


class ContinuedMeetingMutualAgreementConfig(RuleConfigBase):
    required: bool = True


class AudioRecordingRuleConfig(RuleConfigBase):
    staff_must_record_if_parent_records: bool = True
    mark_as_not_official_record: bool = True


@dataclass(frozen=True)
class RuleDefinition:
    key: RuleKey
    name: str
    description: str
    config_model: Type[RuleConfigBase]


RULE_DEFINITIONS: Mapping[RuleKey, RuleDefinition] = MappingProxyType(
    {
        d.key: d
        for d in (
            RuleDefinition(
                RuleKey.PRE_MEETING_DOCS_DAYS,
                "Pre-Meeting Documents Days",
                "Requires draft documents to be delivered to parents before the meeting",
                PreMeetingDocsDaysConfig,
            ),
            RuleDefinition(
                RuleKey.POST_MEETING_DOCS_DAYS,
                "Post-Meeting Documents Days",
                "Requires final documents to be delivered to parents after the meeting",
                PostMeetingDocsDaysConfig,
            ),
            RuleDefinition(
                RuleKey.DEFAULT_DELIVERY_METHOD,
                "Default Delivery Method",
                "Sets the default method for document delivery to parents",
                DefaultDeliveryMethodConfig,
            ),
            RuleDefinition(
                RuleKey.US_MAIL_PRE_MEETING_DAYS,
                "US Mail Pre-Meeting Days",
                "Additional days when using US Mail for pre-meeting documents",
                UsMailPreMeetingDaysConfig,
            ),
            RuleDefinition(
                RuleKey.US_MAIL_POST_MEETING_DAYS,
                "US Mail Post-Meeting Days",
                "Additional days when using US Mail for post-meeting documents",
                UsMailPostMeetingDaysConfig,
            ),
            RuleDefinition(
                RuleKey.CONFERENCE_NOTES_REQUIRED,
                "Conference Notes Required",
                "Requires conference notes before meeting can be closed",
                ConferenceNotesRequiredConfig,
            ),
            RuleDefinition(
                RuleKey.INITIAL_IEP_CONSENT_GATE,
                "Initial IEP Consent Gate",
                "Blocks initial IEP implementation until parent consent is obtained",
                InitialIepConsentGateConfig,
            ),
            RuleDefinition(
                RuleKey.CONTINUED_MEETING_NOTICE_DAYS,
                "Continued Meeting Notice Days",
                "Minimum notice days for continued meetings; waiver required if less",
                ContinuedMeetingNoticeDaysConfig,
            ),
            RuleDefinition(
                RuleKey.CONTINUED_MEETING_MUTUAL_AGREEMENT,
                "Continued Meeting Mutual Agreement",
                "Requires mutual agreement for continued meeting dates",
                ContinuedMeetingMutualAgreementConfig,
            ),
            RuleDefinition(
                RuleKey.AUDIO_RECORDING_RULE,
                "Audio Recording Rule",
                "Policy for audio recording during meetings",
                AudioRecordingRuleConfig,
            ),
        )
    }
)


def parse_rule_key(value: Union[str, RuleKey]) -> Optional[RuleKey]:
    try:
        return RuleKey(value)
    except ValueError:
        return None


@dataclass(frozen=True)
class EffectiveConfig:
    """Resolved per-rule configuration.

    Built by `merge_config`; never mutated afterwards. `disabled` holds rules a
    pack switched off, which gates treat as not applicable.
    """

    rules: Mapping[RuleKey, RuleConfigBase]
    disabled: frozenset = field(default_factory=frozenset)
    evidence_requirements: Mapping[RuleKey, Tuple[EvidenceRequirement, ...]] = field(
        default_factory=lambda: MappingProxyType({})
    )

    def get(self, key: RuleKey, model: Optional[Type[T]] = None) -> T:
        cfg = self.rules[key]
        if model is not None and not isinstance(cfg, model):
            raise TypeError(f"{key.value} config is {type(cfg).__name__}, not {model.__name__}")
        return cfg  # type: ignore[return-value]

    def is_enabled(self, key: RuleKey) -> bool:
        return key in self.rules and key not in self.disabled

    def keys(self) -> Iterable[RuleKey]:
        return self.rules.keys()

    def as_dict(self) -> Dict[str, Dict[str, Any]]:
        return {key.value: cfg.to_payload() for key, cfg in self.rules.items()}


def system_defaults() -> EffectiveConfig:
    """The built-in configuration used when no rule pack resolves."""
    return EffectiveConfig(
        rules=MappingProxyType({key: d.config_model() for key, d in RULE_DEFINITIONS.items()}),
    )


def _override_payload(
    model: Type[RuleConfigBase],
    raw: Union[Mapping[str, Any], RuleConfigBase],
) -> Dict[str, Any]:
    # Only the fields the override sets, keyed by alias whichever spelling it used.
    # A null field keeps its default.
    if not isinstance(raw, RuleConfigBase):
        raw = model.model_validate({k: v for k, v in dict(raw).items() if v is not None})
    return raw.model_dump(by_alias=True, exclude_unset=True)


def merge_config(
    defaults: EffectiveConfig,
    overrides: Mapping[Union[str, RuleKey], Optional[Union[Mapping[str, Any], RuleConfigBase]]],
    *,
    disabled: Iterable[RuleKey] = (),
    evidence_requirements: Optional[Mapping[RuleKey, Iterable[EvidenceRequirement]]] = None,
) -> EffectiveConfig:
    """Shallow-merge per-rule overrides onto `defaults`.

    - A key whose override is None (or missing) keeps a copy of its default,
      and so does a single field set to None.
    - Override fields win; fields it leaves out keep their default values.
    - Keys unknown to `defaults` are ignored.
    """
    by_key: Dict[RuleKey, Any] = {}
    for raw_key, raw in overrides.items():
        key = parse_rule_key(raw_key)
        if key is None or key not in defaults.rules:
            logger.warning("Ignoring override for unknown rule key %s", raw_key)
            continue
        if raw is None:
            continue
        by_key[key] = raw

    merged: Dict[RuleKey, RuleConfigBase] = {}
    for key, base in defaults.rules.items():
        raw = by_key.get(key)
        if raw is None:
            merged[key] = base.model_copy(deep=True)
            continue
        payload = base.model_dump(by_alias=True)
        try:
            payload.update(_override_payload(type(base), raw))
            merged[key] = type(base).model_validate(payload)
        except ValidationError as exc:
            raise RuleConfigError(key.value, str(exc)) from exc

    requirements: Dict[RuleKey, Tuple[EvidenceRequirement, ...]] = dict(defaults.evidence_requirements)
    for key, reqs in (evidence_requirements or {}).items():
        requirements[key] = tuple(reqs)

    return EffectiveConfig(
        rules=MappingProxyType(merged),
        disabled=frozenset(defaults.disabled) | frozenset(disabled),
        evidence_requirements=MappingProxyType(requirements),
    )


def effective_config_for_pack(
    pack: Optional[RulePack],
    defaults: Optional[EffectiveConfig] = None,
) -> EffectiveConfig:
    """Effective configuration for a resolved pack, or the defaults when `pack` is None."""
    base = defaults if defaults is not None else system_defaults()
    if pack is None:
        return merge_config(base, {})

    overrides: Dict[str, Optional[Dict[str, Any]]] = {}
    disabled: list[RuleKey] = []
    requirements: Dict[RuleKey, list[EvidenceRequirement]] = {}
    for rule in pack.ordered_rules():
        key = parse_rule_key(rule.rule_key)
        if key is None:
            logger.warning("Rule pack %s v%s references unknown rule %s", pack.id, pack.version, rule.rule_key)
            continue
        overrides[key.value] = rule.config
        if not rule.is_enabled:
            disabled.append(key)
        if rule.evidence_requirements:
            requirements.setdefault(key, []).extend(rule.evidence_requirements)

    return merge_config(base, overrides, disabled=disabled, evidence_requirements=requirements)
