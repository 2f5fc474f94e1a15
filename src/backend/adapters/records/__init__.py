"""Adapters from persisted (camelCase) repository rows to compliance models (no I/O)."""

from .meeting import meeting_from_record, meeting_to_record
from .rule_pack import rule_pack_from_record, scope_chain_from_record

__all__ = [
    "meeting_from_record",
    "meeting_to_record",
    "rule_pack_from_record",
    "scope_chain_from_record",
]
