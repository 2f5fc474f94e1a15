from __future__ import annotations

from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel

from .business_days import add_business_days
from .config import EffectiveConfig, RuleKey


class DueDates(BaseModel):
    pre_docs_deadline: Optional[date] = None
    post_docs_deadline: Optional[date] = None
    us_mail_pre_docs_deadline: Optional[date] = None
    us_mail_post_docs_deadline: Optional[date] = None


def _as_day(value: date) -> date:
    return value.date() if isinstance(value, datetime) else value


def calculate_due_dates(meeting_date: date, config: EffectiveConfig) -> DueDates:
    """Document delivery deadlines for a meeting, in business days.

    US-mail deadlines are pulled earlier than the standard deadline by the
    mail offset. A disabled rule leaves its deadline (and any mail deadline
    derived from it) unset.
    """
    day = _as_day(meeting_date)
    due = DueDates()

    if config.is_enabled(RuleKey.PRE_MEETING_DOCS_DAYS):
        pre_days = config.get(RuleKey.PRE_MEETING_DOCS_DAYS).days
        due.pre_docs_deadline = add_business_days(day, -pre_days)

    if config.is_enabled(RuleKey.POST_MEETING_DOCS_DAYS):
        post_days = config.get(RuleKey.POST_MEETING_DOCS_DAYS).days
        due.post_docs_deadline = add_business_days(day, post_days)

    if config.is_enabled(RuleKey.US_MAIL_PRE_MEETING_DAYS) and due.pre_docs_deadline is not None:
        extra = config.get(RuleKey.US_MAIL_PRE_MEETING_DAYS).days
        due.us_mail_pre_docs_deadline = add_business_days(due.pre_docs_deadline, -extra)

    if config.is_enabled(RuleKey.US_MAIL_POST_MEETING_DAYS) and due.post_docs_deadline is not None:
        extra = config.get(RuleKey.US_MAIL_POST_MEETING_DAYS).days
        due.us_mail_post_docs_deadline = add_business_days(due.post_docs_deadline, -extra)

    return due
