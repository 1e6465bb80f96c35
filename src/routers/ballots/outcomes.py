"""
Tagged outcomes shared by the ballot stages.

Each stage returns either its success value or a :class:`BallotError`.
Callers branch on ``isinstance(result, BallotError)``; expected failures
never travel as exceptions.
"""
import enum
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple


class ErrorKind(str, enum.Enum):
    ADMISSION = "admission"
    VALIDATION = "validation"
    RECORDING = "recording"


class ErrorCode(str, enum.Enum):
    # admission
    STUDENT_ID_REQUIRED = "student_id_required"
    IDENTITY_REQUIRED = "identity_required"
    ELECTION_NOT_FOUND = "election_not_found"
    ELECTION_ARCHIVED = "election_archived"
    ELECTION_NOT_OPEN = "election_not_open"
    NOT_IN_MASTERLIST = "not_in_masterlist"
    ALREADY_VOTED = "already_voted"
    VOTER_REGISTRATION_FAILED = "voter_registration_failed"
    # validation
    NO_POSITIONS = "no_positions"
    TOO_MANY_SELECTIONS = "too_many_selections"
    NO_SELECTIONS = "no_selections"
    INVALID_CANDIDATE = "invalid_candidate"
    POSITION_MISMATCH = "position_mismatch"
    CANDIDATE_NOT_APPROVED = "candidate_not_approved"
    # recording
    VOTE_INSERT_FAILED = "vote_insert_failed"
    SELECTIONS_INSERT_FAILED = "selections_insert_failed"


@dataclass(frozen=True)
class BallotError:
    kind: ErrorKind
    code: ErrorCode
    message: str
    detail: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {"error": self.message, "code": self.code.value, "kind": self.kind.value, **self.detail}


def admission_error(code: ErrorCode, message: str, **detail) -> BallotError:
    return BallotError(ErrorKind.ADMISSION, code, message, detail)


def validation_error(code: ErrorCode, message: str, **detail) -> BallotError:
    return BallotError(ErrorKind.VALIDATION, code, message, detail)


def recording_error(code: ErrorCode, message: str, **detail) -> BallotError:
    return BallotError(ErrorKind.RECORDING, code, message, detail)


def already_voted() -> BallotError:
    return admission_error(
        ErrorCode.ALREADY_VOTED,
        "This student ID has already voted in this election.",
    )


def election_not_found() -> BallotError:
    return admission_error(ErrorCode.ELECTION_NOT_FOUND, "Election not found.")


# -------------------------
#  Stage success values
# -------------------------
@dataclass(frozen=True)
class VoterHandle:
    """Admission result: the voter row a ballot will be recorded against."""
    voter_id: int
    election_id: int
    student_id: str
    self_registered: bool = False


@dataclass(frozen=True)
class ValidatedBallot:
    election_id: int
    # flattened (position_id, candidate_id) pairs
    selections: List[Tuple[int, int]]

    @property
    def candidate_ids(self) -> List[int]:
        return [candidate_id for _, candidate_id in self.selections]


@dataclass(frozen=True)
class BallotReceipt:
    vote_id: int
    voter_id: int
    selection_count: int
    # False only when the final is_voted update failed after the ballot was stored
    voter_marked: bool = True


@dataclass(frozen=True)
class CandidateTally:
    candidate_id: int
    full_name: str
    partylist: Optional[Dict[str, str]]
    vote_count: int


@dataclass(frozen=True)
class PositionTally:
    position_id: int
    title: str
    max_votes: int
    candidates: List[CandidateTally]


@dataclass(frozen=True)
class ElectionTally:
    election_id: int
    positions: List[PositionTally]
    total_voters_who_voted: int
