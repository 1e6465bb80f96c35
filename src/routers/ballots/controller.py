# src/routers/ballots/controller.py
from dataclasses import asdict
from datetime import date
from typing import Any, Dict, Iterable, Mapping, Optional, Union
from loguru import logger
from sqlalchemy.orm import Session, joinedload
from src.utils.dates import within_window
from src.utils.jwt import CallerIdentity
from . import models
from .admission import VoterAdmissionLedger
from .outcomes import BallotError, BallotReceipt, ElectionTally, election_not_found
from .recorder import BallotRecorder
from .tally import TallyAggregator, partylist_dict
from .validator import BallotValidator


def submit_ballot(
    db: Session,
    election_id: int,
    student_id: str,
    selections: Mapping[int, Iterable[int]],
    caller: CallerIdentity,
    today: Optional[date] = None,
) -> Union[BallotReceipt, BallotError]:
    """
    Admit, validate and record one ballot. The first stage to reject
    decides the outcome.
    """
    handle = VoterAdmissionLedger(db, today=today).admit(election_id, student_id, caller)
    if isinstance(handle, BallotError):
        logger.info(f"Ballot for election {election_id} refused at admission: {handle.code.value}")
        return handle

    ballot = BallotValidator(db).validate(election_id, selections)
    if isinstance(ballot, BallotError):
        logger.info(f"Ballot from voter {handle.voter_id} rejected: {ballot.code.value}")
        return ballot

    return BallotRecorder(db).record(handle, ballot)


def get_election_results(db: Session, election_id: int) -> Union[ElectionTally, BallotError]:
    return TallyAggregator(db).tally(election_id)


def results_payload(tally: ElectionTally) -> Dict[str, Any]:
    return {
        "results": [asdict(position) for position in tally.positions],
        "totalVoters": tally.total_voters_who_voted,
    }


def get_ballot_sheet(
    db: Session,
    election_id: int,
    caller: CallerIdentity,
    today: Optional[date] = None,
) -> Union[Dict[str, Any], BallotError]:
    """Positions with their approved candidates, plus the caller's voting state."""
    election = (
        db.query(models.Election)
        .filter(models.Election.election_id == election_id)
        .first()
    )
    if election is None:
        return election_not_found()

    voting_open = not election.is_archived and within_window(election.start_date, election.end_date, today)

    already_voted = False
    if caller.email:
        already_voted = (
            db.query(models.Voter.voter_id)
            .filter(
                models.Voter.election_id == election_id,
                models.Voter.email == caller.email,
                models.Voter.is_voted == True,
            )
            .first()
        ) is not None

    positions = (
        db.query(models.Position)
        .filter(models.Position.election_id == election_id)
        .order_by(models.Position.created_at.asc(), models.Position.position_id.asc())
        .all()
    )
    candidates = (
        db.query(models.Candidate)
        .options(joinedload(models.Candidate.partylist))
        .filter(
            models.Candidate.election_id == election_id,
            models.Candidate.application_status == models.ApplicationStatusEnum.approved,
        )
        .order_by(models.Candidate.candidate_id.asc())
        .all()
    )

    election_type = election.election_type
    return {
        "election_id": election.election_id,
        "name": election.name,
        "election_type": getattr(election_type, "value", str(election_type)),
        "start_date": election.start_date,
        "end_date": election.end_date,
        "voting_open": voting_open,
        "already_voted": already_voted,
        "positions": [
            {
                "position_id": position.position_id,
                "title": position.title,
                "max_votes": position.max_votes,
                "candidates": [
                    {
                        "candidate_id": c.candidate_id,
                        "full_name": c.full_name,
                        "position_id": c.position_id,
                        "partylist": partylist_dict(c),
                    }
                    for c in candidates
                    if c.position_id == position.position_id
                ],
            }
            for position in positions
        ],
    }
