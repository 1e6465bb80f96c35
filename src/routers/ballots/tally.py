# src/routers/ballots/tally.py
from typing import Union
from sqlalchemy import func
from sqlalchemy.orm import Session, joinedload
from . import models
from .outcomes import (
    BallotError, CandidateTally, ElectionTally, PositionTally, election_not_found,
)


def partylist_dict(candidate: models.Candidate):
    if candidate.partylist is None:
        return None
    return {"name": candidate.partylist.name, "acronym": candidate.partylist.acronym}


class TallyAggregator:
    """
    Recomputes election results from the stored ballots on every call.

    Candidates are sorted by vote count, highest first. The sort is stable
    over candidates fetched in id order, so ties keep ascending candidate id.
    """

    def __init__(self, db: Session):
        self.db = db

    def tally(self, election_id: int) -> Union[ElectionTally, BallotError]:
        election = (
            self.db.query(models.Election.election_id)
            .filter(models.Election.election_id == election_id)
            .first()
        )
        if election is None:
            return election_not_found()

        positions = (
            self.db.query(models.Position)
            .filter(models.Position.election_id == election_id)
            .order_by(models.Position.created_at.asc(), models.Position.position_id.asc())
            .all()
        )
        candidates = (
            self.db.query(models.Candidate)
            .options(joinedload(models.Candidate.partylist))
            .filter(
                models.Candidate.election_id == election_id,
                models.Candidate.application_status == models.ApplicationStatusEnum.approved,
            )
            .order_by(models.Candidate.candidate_id.asc())
            .all()
        )

        counts = dict(
            self.db.query(models.VoteSelection.candidate_id, func.count())
            .join(models.Vote, models.Vote.vote_id == models.VoteSelection.vote_id)
            .join(models.Voter, models.Voter.voter_id == models.Vote.voter_id)
            .filter(models.Voter.election_id == election_id)
            .group_by(models.VoteSelection.candidate_id)
            .all()
        )

        total_voted = (
            self.db.query(func.count(models.Voter.voter_id))
            .filter(models.Voter.election_id == election_id, models.Voter.is_voted == True)
            .scalar()
        ) or 0

        results = []
        for position in positions:
            rows = [
                CandidateTally(
                    candidate_id=c.candidate_id,
                    full_name=c.full_name,
                    partylist=partylist_dict(c),
                    vote_count=counts.get(c.candidate_id, 0),
                )
                for c in candidates
                if c.position_id == position.position_id
            ]
            rows.sort(key=lambda row: row.vote_count, reverse=True)
            results.append(PositionTally(
                position_id=position.position_id,
                title=position.title,
                max_votes=position.max_votes,
                candidates=rows,
            ))

        return ElectionTally(
            election_id=election_id,
            positions=results,
            total_voters_who_voted=total_voted,
        )
