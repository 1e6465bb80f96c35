# src/routers/ballots/recorder.py
from typing import Union
from loguru import logger
from sqlalchemy import update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session
from . import models
from .outcomes import (
    BallotError, BallotReceipt, ErrorCode, ValidatedBallot, VoterHandle,
    already_voted, recording_error,
)


class BallotRecorder:
    """
    Persists a validated ballot for an admitted voter.

    A ballot attempt moves through
    ``VoteInserted -> SelectionsInserted -> VoterMarked``. Each step is its own
    commit. A failed selections insert, or losing the race on the final
    ``is_voted`` flip, deletes the vote header again. A failure of the flip
    itself leaves the ballot in place and is only logged; a later attempt by
    the same voter is answered as already voted and sets the flag.
    Nothing is retried here.
    """

    def __init__(self, db: Session):
        self.db = db

    def record(self, handle: VoterHandle,
               ballot: ValidatedBallot) -> Union[BallotReceipt, BallotError]:
        try:
            vote_id = self._insert_vote(handle.voter_id)
        except IntegrityError as exc:
            self.db.rollback()
            if self._existing_vote(handle.voter_id) is not None:
                logger.warning(f"Voter {handle.voter_id} already owns a stored ballot: {exc}")
                self._heal_mark(handle.voter_id)
                return already_voted()
            logger.error(f"Vote insert failed for voter {handle.voter_id}: {exc}")
            return recording_error(
                ErrorCode.VOTE_INSERT_FAILED,
                "Failed to record vote. Please try again.",
            )
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.error(f"Vote insert failed for voter {handle.voter_id}: {exc}")
            return recording_error(
                ErrorCode.VOTE_INSERT_FAILED,
                "Failed to record vote. Please try again.",
            )

        try:
            self._insert_selections(vote_id, ballot)
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.error(f"Selections insert failed for vote {vote_id}, rolling back: {exc}")
            self._discard_vote(vote_id)
            return recording_error(
                ErrorCode.SELECTIONS_INSERT_FAILED,
                "Failed to record selections. Please try again.",
            )

        try:
            marked = self._mark_voted(handle.voter_id)
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.error(
                f"Ballot {vote_id} stored but voter {handle.voter_id} could not be marked as voted: {exc}"
            )
            return BallotReceipt(
                vote_id=vote_id,
                voter_id=handle.voter_id,
                selection_count=len(ballot.selections),
                voter_marked=False,
            )

        if not marked:
            logger.warning(
                f"Voter {handle.voter_id} was marked as voted by another submission; discarding vote {vote_id}"
            )
            self._discard_vote(vote_id)
            return already_voted()

        logger.info(f"Recorded vote {vote_id} for voter {handle.voter_id} "
                    f"with {len(ballot.selections)} selection(s)")
        return BallotReceipt(
            vote_id=vote_id,
            voter_id=handle.voter_id,
            selection_count=len(ballot.selections),
        )

    def _insert_vote(self, voter_id: int) -> int:
        vote = models.Vote(voter_id=voter_id)
        self.db.add(vote)
        self.db.flush()
        vote_id = vote.vote_id
        self.db.commit()
        return vote_id

    def _insert_selections(self, vote_id: int, ballot: ValidatedBallot):
        self.db.add_all([
            models.VoteSelection(vote_id=vote_id, candidate_id=candidate_id, position_id=position_id)
            for position_id, candidate_id in ballot.selections
        ])
        self.db.commit()

    def _mark_voted(self, voter_id: int) -> int:
        """Flip ``is_voted`` only if still unset; returns the affected row count."""
        result = self.db.execute(
            update(models.Voter)
            .where(models.Voter.voter_id == voter_id, models.Voter.is_voted == False)
            .values(is_voted=True)
        )
        self.db.commit()
        return result.rowcount

    def _existing_vote(self, voter_id: int):
        return (
            self.db.query(models.Vote)
            .filter(models.Vote.voter_id == voter_id)
            .first()
        )

    def _heal_mark(self, voter_id: int):
        """Set a missing ``is_voted`` flag once the stored ballot has its selections."""
        vote = self._existing_vote(voter_id)
        if vote is None:
            return
        has_selections = (
            self.db.query(models.VoteSelection.vote_id)
            .filter(models.VoteSelection.vote_id == vote.vote_id)
            .first()
        ) is not None
        # a ballot still mid-insert belongs to the concurrent submission
        if not has_selections:
            return
        try:
            if self._mark_voted(voter_id):
                logger.info(f"Marked voter {voter_id} as voted for stored ballot {vote.vote_id}")
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.error(f"Voter {voter_id} still unmarked after ballot {vote.vote_id}: {exc}")

    def _discard_vote(self, vote_id: int):
        try:
            (self.db.query(models.VoteSelection)
             .filter(models.VoteSelection.vote_id == vote_id)
             .delete(synchronize_session=False))
            (self.db.query(models.Vote)
             .filter(models.Vote.vote_id == vote_id)
             .delete(synchronize_session=False))
            self.db.commit()
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.critical(f"Could not remove vote {vote_id} after a failed submission: {exc}")
