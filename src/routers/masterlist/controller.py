# src/routers/masterlist/controller.py
import re
from typing import Dict, List
from loguru import logger
from fastapi import HTTPException, status
from sqlalchemy import select
from sqlalchemy.orm import Session
from src.routers.ballots import models

_SEPARATORS = re.compile(r"\s+")


def parse_student_ids(raw_ids: str) -> List[str]:
    """Split pasted text on any whitespace, dropping blanks and repeats."""
    ids = [part.strip() for part in _SEPARATORS.split(raw_ids or "")]
    return list(dict.fromkeys(i for i in ids if i))


def _get_writable_election(db: Session, election_id: int) -> models.Election:
    election = (
        db.query(models.Election)
        .filter(models.Election.election_id == election_id)
        .first()
    )
    if not election:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Election not found.")
    if election.is_archived:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="This election has been archived.")
    return election


def add_to_masterlist(db: Session, election_id: int, raw_ids: str) -> Dict[str, int]:
    """
    Seed student IDs into the election's masterlist.

    IDs already on the masterlist are skipped. A student who self-registered
    before the masterlist existed is moved onto it.
    """
    _get_writable_election(db, election_id)
    student_ids = parse_student_ids(raw_ids)
    if not student_ids:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No student IDs provided.")

    existing = {
        voter.student_id: voter
        for voter in db.query(models.Voter).filter(
            models.Voter.election_id == election_id,
            models.Voter.student_id.in_(student_ids),
        )
    }

    added = skipped = 0
    for student_id in student_ids:
        voter = existing.get(student_id)
        if voter is None:
            db.add(models.Voter(
                election_id=election_id,
                student_id=student_id,
                is_voted=False,
                source=models.VoterSourceEnum.masterlist,
            ))
            added += 1
        elif voter.source != models.VoterSourceEnum.masterlist:
            voter.source = models.VoterSourceEnum.masterlist
            added += 1
        else:
            skipped += 1

    db.commit()
    logger.info(f"Masterlist of election {election_id}: {added} added, {skipped} skipped")
    return {"added": added, "skipped": skipped}


def _has_ballot(db: Session, voter_id: int) -> bool:
    # a stored ballot whose voter could not be marked still owns the row
    return db.query(models.Vote.vote_id).filter(models.Vote.voter_id == voter_id).first() is not None


def remove_voter(db: Session, election_id: int, voter_id: int) -> None:
    _get_writable_election(db, election_id)
    voter = (
        db.query(models.Voter)
        .filter(models.Voter.voter_id == voter_id, models.Voter.election_id == election_id)
        .first()
    )
    if not voter:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Voter not found.")
    if voter.is_voted or _has_ballot(db, voter.voter_id):
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Voters who already voted cannot be removed.",
        )
    db.delete(voter)
    db.commit()


def clear_unvoted(db: Session, election_id: int) -> int:
    """Remove every voter row that has not voted yet; returns how many went."""
    _get_writable_election(db, election_id)
    removed = (
        db.query(models.Voter)
        .filter(
            models.Voter.election_id == election_id,
            models.Voter.is_voted == False,
            ~models.Voter.voter_id.in_(select(models.Vote.voter_id)),
        )
        .delete(synchronize_session=False)
    )
    db.commit()
    logger.info(f"Cleared {removed} unvoted voter(s) from election {election_id}")
    return removed


def masterlist_summary(db: Session, election_id: int) -> Dict:
    election = (
        db.query(models.Election.election_id)
        .filter(models.Election.election_id == election_id)
        .first()
    )
    if not election:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Election not found.")

    voters = (
        db.query(models.Voter)
        .filter(models.Voter.election_id == election_id)
        .order_by(models.Voter.student_id.asc())
        .all()
    )
    voted = sum(1 for v in voters if v.is_voted)
    return {
        "total": len(voters),
        "voted": voted,
        "not_voted": len(voters) - voted,
        "voters": voters,
    }
