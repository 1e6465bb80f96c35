# src/routers/ballots/validator.py
from typing import Dict, Iterable, List, Mapping, Set, Union
from sqlalchemy.orm import Session
from . import models
from .outcomes import BallotError, ErrorCode, ValidatedBallot, validation_error


def normalize_selections(selections: Mapping[int, Iterable[int]]) -> Dict[int, List[int]]:
    """De-duplicate the candidates picked for each position, keeping order."""
    normalized = {}
    for position_id, candidate_ids in (selections or {}).items():
        normalized[position_id] = list(dict.fromkeys(candidate_ids or []))
    return normalized


class BallotValidator:
    """Pure check of a proposed ballot; never writes."""

    def __init__(self, db: Session):
        self.db = db

    def validate(self, election_id: int,
                 selections: Mapping[int, Iterable[int]]) -> Union[ValidatedBallot, BallotError]:
        selections = normalize_selections(selections)

        positions = (
            self.db.query(models.Position)
            .filter(models.Position.election_id == election_id)
            .all()
        )
        if not positions:
            return validation_error(ErrorCode.NO_POSITIONS, "No positions found for this election.")
        positions_by_id = {p.position_id: p for p in positions}

        # capacity
        for position in positions:
            selected = selections.get(position.position_id, [])
            if len(selected) > position.max_votes:
                return validation_error(
                    ErrorCode.TOO_MANY_SELECTIONS,
                    f'You selected {len(selected)} candidates for "{position.title}" '
                    f"but the maximum is {position.max_votes}.",
                    position=position.title,
                    selected=len(selected),
                    max=position.max_votes,
                )

        requested: Set[int] = set()
        for candidate_ids in selections.values():
            requested.update(candidate_ids)
        if not requested:
            return validation_error(ErrorCode.NO_SELECTIONS, "You must select at least one candidate.")

        if any(position_id not in positions_by_id
               for position_id, candidate_ids in selections.items() if candidate_ids):
            return validation_error(ErrorCode.INVALID_CANDIDATE, "Invalid candidate selection.")

        candidates = (
            self.db.query(models.Candidate)
            .filter(
                models.Candidate.candidate_id.in_(requested),
                models.Candidate.election_id == election_id,
            )
            .all()
        )
        if len(candidates) != len(requested):
            return validation_error(ErrorCode.INVALID_CANDIDATE, "Invalid candidate selection.")
        candidates_by_id = {c.candidate_id: c for c in candidates}

        pairs = []
        for position_id, candidate_ids in selections.items():
            for candidate_id in candidate_ids:
                candidate = candidates_by_id[candidate_id]
                if candidate.position_id != position_id:
                    return validation_error(
                        ErrorCode.POSITION_MISMATCH,
                        "Candidate does not belong to the selected position.",
                        position=positions_by_id[position_id].title,
                    )
                if candidate.application_status != models.ApplicationStatusEnum.approved:
                    return validation_error(
                        ErrorCode.CANDIDATE_NOT_APPROVED,
                        "You can only vote for approved candidates.",
                    )
                pairs.append((position_id, candidate_id))

        return ValidatedBallot(election_id=election_id, selections=pairs)
