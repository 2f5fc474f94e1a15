from __future__ import annotations

from typing import TYPE_CHECKING, List, Optional

if TYPE_CHECKING:
    from .models import BlockingReason, GateReport, MeetingStatus


class ComplianceError(Exception):
    """Base class for errors raised by the compliance rules engine."""


class InvalidTransition(ComplianceError):
    def __init__(self, current: "MeetingStatus", target: "MeetingStatus"):
        super().__init__(f"Meeting cannot move from {current.value} to {target.value}.")
        self.current = current
        self.target = target


class ComplianceGateFailed(ComplianceError):
    def __init__(self, blocking_reasons: List["BlockingReason"], report: Optional["GateReport"] = None):
        keys = ", ".join(r.rule_key for r in blocking_reasons)
        super().__init__(f"Meeting close blocked by compliance gates: {keys}")
        self.blocking_reasons = list(blocking_reasons)
        self.report = report


class RuleConfigError(ComplianceError, ValueError):
    def __init__(self, rule_key: str, message: str):
        super().__init__(f"Invalid configuration for rule {rule_key}: {message}")
        self.rule_key = rule_key
