from .conference_notes_required import ConferenceNotesRequiredGate
from .initial_iep_consent_gate import InitialIepConsentGate
from .continued_meeting_notice_days import ContinuedMeetingNoticeDaysGate
from .continued_meeting_mutual_agreement import ContinuedMeetingMutualAgreementGate
from .audio_recording_rule import AudioRecordingRuleGate

__all__ = [
    "ConferenceNotesRequiredGate",
    "InitialIepConsentGate",
    "ContinuedMeetingNoticeDaysGate",
    "ContinuedMeetingMutualAgreementGate",
    "AudioRecordingRuleGate",
]
