from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from .business_days import business_days_between
from .config import EffectiveConfig, system_defaults
from .models import Meeting


@dataclass(frozen=True)
class GateContext:
    meeting: Meeting
    config: EffectiveConfig = field(default_factory=system_defaults)

    def has_evidence(self, evidence_type_key: str) -> bool:
        return self.meeting.has_evidence(evidence_type_key)

    def continued_notice_business_days(self) -> Optional[int]:
        """Business days between the original meeting and this continuation, if known."""
        original = self.meeting.continued_from_scheduled_at
        if original is None:
            return None
        return business_days_between(original, self.meeting.scheduled_at)
