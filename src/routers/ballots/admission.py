# src/routers/ballots/admission.py
from datetime import date
from typing import Optional, Union
from loguru import logger
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from src.utils.dates import within_window
from src.utils.jwt import CallerIdentity
from . import models
from .outcomes import (
    BallotError, ErrorCode, VoterHandle,
    admission_error, already_voted, election_not_found,
)


def open_election(db: Session, election_id: int,
                  today: Optional[date] = None) -> Union[models.Election, BallotError]:
    """
    Return the election when it accepts ballots today.

    The voting window is compared on calendar-day strings, with both the
    start and end days included.
    """
    election = (
        db.query(models.Election)
        .filter(models.Election.election_id == election_id)
        .first()
    )
    if election is None:
        return election_not_found()
    if election.is_archived:
        return admission_error(ErrorCode.ELECTION_ARCHIVED, "This election has been archived.")
    if not within_window(election.start_date, election.end_date, today):
        return admission_error(
            ErrorCode.ELECTION_NOT_OPEN,
            "Voting is not currently open for this election.",
        )
    return election


def masterlist_exists(db: Session, election_id: int) -> bool:
    """True when officers seeded at least one voter row for the election."""
    count = (
        db.query(func.count(models.Voter.voter_id))
        .filter(
            models.Voter.election_id == election_id,
            models.Voter.source == models.VoterSourceEnum.masterlist,
        )
        .scalar()
    )
    return bool(count)


class VoterAdmissionLedger:
    """Decides whether a student may cast a ballot in an election.

    Admission never flips ``is_voted``; that belongs to the recorder. The
    writes done here (attaching the caller's email, inserting a
    self-registered row) are safe to repeat.
    """

    def __init__(self, db: Session, today: Optional[date] = None):
        self.db = db
        self.today = today

    def _find_voter(self, election_id: int, student_id: str) -> Optional[models.Voter]:
        return (
            self.db.query(models.Voter)
            .filter(
                models.Voter.election_id == election_id,
                models.Voter.student_id == student_id,
            )
            .first()
        )

    def admit(self, election_id: int, student_id: str,
              caller: CallerIdentity) -> Union[VoterHandle, BallotError]:
        student_id = (student_id or "").strip()
        if not student_id:
            return admission_error(ErrorCode.STUDENT_ID_REQUIRED, "Student ID is required.")
        if not caller.email:
            return admission_error(
                ErrorCode.IDENTITY_REQUIRED,
                "Could not determine your email address.",
            )

        election = open_election(self.db, election_id, self.today)
        if isinstance(election, BallotError):
            return election

        if masterlist_exists(self.db, election_id):
            return self._admit_from_masterlist(election_id, student_id, caller)
        return self._admit_open(election_id, student_id, caller)

    def _admit_from_masterlist(self, election_id: int, student_id: str,
                               caller: CallerIdentity) -> Union[VoterHandle, BallotError]:
        voter = self._find_voter(election_id, student_id)
        if voter is None or voter.source != models.VoterSourceEnum.masterlist:
            logger.info(f"Student {student_id} not in masterlist of election {election_id}")
            return admission_error(
                ErrorCode.NOT_IN_MASTERLIST,
                "Your student ID is not in the voter masterlist for this election.",
            )
        if voter.is_voted:
            return already_voted()

        if voter.email != caller.email:
            voter.email = caller.email
            self.db.commit()

        return VoterHandle(voter_id=voter.voter_id, election_id=election_id, student_id=student_id)

    def _admit_open(self, election_id: int, student_id: str,
                    caller: CallerIdentity) -> Union[VoterHandle, BallotError]:
        voter = self._find_voter(election_id, student_id)
        if voter is not None:
            if voter.is_voted:
                return already_voted()
            return VoterHandle(voter_id=voter.voter_id, election_id=election_id, student_id=student_id)

        voter = models.Voter(
            election_id=election_id,
            student_id=student_id,
            email=caller.email,
            is_voted=False,
            source=models.VoterSourceEnum.self_registered,
        )
        self.db.add(voter)
        try:
            self.db.commit()
        except IntegrityError:
            # another request registered the same student first
            self.db.rollback()
            logger.info(f"Voter row for {student_id} in election {election_id} created concurrently")
            voter = self._find_voter(election_id, student_id)
            if voter is None:
                return admission_error(
                    ErrorCode.VOTER_REGISTRATION_FAILED,
                    "Failed to register voter. Please try again.",
                )
            if voter.is_voted:
                return already_voted()
            return VoterHandle(voter_id=voter.voter_id, election_id=election_id, student_id=student_id)

        logger.info(f"Self-registered voter {voter.voter_id} ({student_id}) for election {election_id}")
        return VoterHandle(
            voter_id=voter.voter_id,
            election_id=election_id,
            student_id=student_id,
            self_registered=True,
        )
