from __future__ import annotations

from typing import Any

from common.compliance_rules.models import Meeting, MeetingEvidence

# Scalar columns stored under the same camelCase name as the model field.
_SCALAR_FIELDS = {
    "studentId": "student_id",
    "status": "status",
    "planType": "plan_type",
    "scheduledAt": "scheduled_at",
    "heldAt": "held_at",
    "isContinued": "is_continued",
    "continuedFromMeetingId": "continued_from_meeting_id",
    "parentRecording": "parent_recording",
    "staffRecording": "staff_recording",
    "consentStatus": "consent_status",
    "noticeWaiverSigned": "notice_waiver_signed",
    "mutualAgreementForContinuedDate": "mutual_agreement_for_continued_date",
    "parentDeliveryMethod": "parent_delivery_method",
    "preDocsDeliveredAt": "pre_docs_delivered_at",
    "postDocsDeliveredAt": "post_docs_delivered_at",
    "closedAt": "closed_at",
    "closedByUserId": "closed_by_user_id",
    "rulePackId": "rule_pack_id",
    "rulePackVersion": "rule_pack_version",
}


def meeting_from_record(record: dict[str, Any]) -> Meeting:
    """
    Build a Meeting snapshot from a stored meeting row.

    The row is expected to include its meeting type ({"meetingType": {"code": ...}}),
    its evidence ({"evidence": [{"evidenceType": {"key": ...}, "note": ...}]}) and,
    for a continued meeting, the meeting it continues ({"continuedFrom": {"scheduledAt": ...}}).
    Timestamps are left for pydantic to parse.
    """
    if not record.get("id"):
        raise ValueError("Meeting record missing required field: id")
    if not record.get("scheduledAt"):
        raise ValueError("Meeting record missing required field: scheduledAt")

    data: dict[str, Any] = {"id": str(record["id"])}
    for column, field in _SCALAR_FIELDS.items():
        if record.get(column) is not None:
            data[field] = record[column]

    meeting_type = record.get("meetingType")
    if isinstance(meeting_type, dict):
        if not meeting_type.get("code"):
            raise ValueError("Meeting record missing required field: meetingType.code")
        data["meeting_type"] = meeting_type["code"]
    elif meeting_type:
        data["meeting_type"] = meeting_type

    continued_from = record.get("continuedFrom")
    if isinstance(continued_from, dict):
        data["continued_from_scheduled_at"] = continued_from.get("scheduledAt")
        data.setdefault("continued_from_meeting_id", continued_from.get("id"))

    data["evidence"] = [_evidence_from_record(entry) for entry in record.get("evidence") or []]
    return Meeting.model_validate(data)


def meeting_to_record(meeting: Meeting) -> dict[str, Any]:
    """Inverse of `meeting_from_record`, for writing a meeting back to a JSON store."""
    payload = meeting.model_dump(mode="json")
    record: dict[str, Any] = {"id": meeting.id}
    for column, field in _SCALAR_FIELDS.items():
        record[column] = payload[field]
    record["meetingType"] = {"code": payload["meeting_type"]}
    if meeting.continued_from_scheduled_at is not None:
        record["continuedFrom"] = {
            "id": meeting.continued_from_meeting_id,
            "scheduledAt": payload["continued_from_scheduled_at"],
        }
    record["evidence"] = [
        {"evidenceType": {"key": item.evidence_type_key}, "note": item.note} for item in meeting.evidence
    ]
    return record


def _evidence_from_record(entry: Any) -> MeetingEvidence:
    if not isinstance(entry, dict):
        raise ValueError("Meeting evidence entries must be objects.")
    evidence_type = entry.get("evidenceType")
    key = evidence_type.get("key") if isinstance(evidence_type, dict) else entry.get("evidenceTypeKey")
    if not key:
        raise ValueError("Meeting evidence missing required field: evidenceType.key")
    return MeetingEvidence(evidence_type_key=str(key), note=entry.get("note"))
