from __future__ import annotations

from abc import ABC, abstractmethod
from typing import List, Type

from .config import RuleConfigBase, RuleKey
from .context import GateContext
from .models import BlockingReason, GateOutcome, RequiredEvidenceItem


class Gate(ABC):
    """A precondition that must hold before a meeting may be closed.

    Subclasses answer two questions: does the gate apply to this meeting
    under this config, and if so, does the meeting satisfy it. A gate that
    does not apply always passes.
    """

    rule_key: RuleKey
    title: str
    config_model: Type[RuleConfigBase]
    failure_code: str

    def __init__(self):
        if not getattr(self, "rule_key", None):
            raise ValueError("Gate must define rule_key")

    @abstractmethod
    def is_applicable(self, ctx: GateContext, cfg) -> bool:  # pragma: no cover
        raise NotImplementedError

    @abstractmethod
    def passes(self, ctx: GateContext, cfg) -> bool:  # pragma: no cover
        raise NotImplementedError

    @abstractmethod
    def failure_message(self, ctx: GateContext, cfg) -> str:  # pragma: no cover
        raise NotImplementedError

    def required_evidence(self, ctx: GateContext, cfg) -> List[RequiredEvidenceItem]:
        return []

    def evaluate(self, ctx: GateContext) -> GateOutcome:
        cfg = ctx.config.get(self.rule_key, self.config_model)
        payload = cfg.to_payload()
        if not ctx.config.is_enabled(self.rule_key) or not self.is_applicable(ctx, cfg):
            return GateOutcome(key=self.rule_key.value, enabled=False, config=payload, passed=True)

        if self.passes(ctx, cfg):
            return GateOutcome(key=self.rule_key.value, enabled=True, config=payload, passed=True)

        return GateOutcome(
            key=self.rule_key.value,
            enabled=True,
            config=payload,
            passed=False,
            reason=BlockingReason(
                rule_key=self.rule_key.value,
                code=self.failure_code,
                message=self.failure_message(ctx, cfg),
            ),
        )
