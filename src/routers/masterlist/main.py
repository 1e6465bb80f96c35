from . import controller
from . import schemas
from loguru import logger
from src.database import get_db
from sqlalchemy.orm import Session
from fastapi import APIRouter, Depends, status
from src.utils.jwt import CallerIdentity, require_officer

# Defining the router
router = APIRouter(
    prefix="/api/officer/elections",
    tags=["Voter Masterlist"],
    responses={404: {"description": "Not found"}},
)


@router.get("/{election_id}/voters", response_model=schemas.MasterlistResponse)
def list_voters(
    election_id: int,
    db: Session = Depends(get_db),
    officer: CallerIdentity = Depends(require_officer),
):
    """
    Voter rows of the election with voted / not-yet-voted totals.
    """
    summary = controller.masterlist_summary(db, election_id)
    return {
        "success": True,
        "status": status.HTTP_200_OK,
        "message": f"Fetched {summary['total']} voter(s).",
        "data": summary,
    }


@router.post("/{election_id}/voters", response_model=schemas.MasterlistChangeResponse)
def add_voters(
    election_id: int,
    payload: schemas.MasterlistAddRequest,
    db: Session = Depends(get_db),
    officer: CallerIdentity = Depends(require_officer),
):
    result = controller.add_to_masterlist(db, election_id, payload.student_ids)
    logger.info(f"Officer {officer.email} seeded masterlist of election {election_id}")
    return {
        "success": True,
        "status": status.HTTP_200_OK,
        "message": f"{result['added']} added, {result['skipped']} duplicates skipped",
        "data": result,
    }


@router.delete("/{election_id}/voters", response_model=schemas.MasterlistChangeResponse)
def clear_unvoted_voters(
    election_id: int,
    db: Session = Depends(get_db),
    officer: CallerIdentity = Depends(require_officer),
):
    """
    Remove voters who have not voted yet. Voters who already voted are kept.
    """
    removed = controller.clear_unvoted(db, election_id)
    return {
        "success": True,
        "status": status.HTTP_200_OK,
        "message": f"Removed {removed} voter(s).",
        "data": {"removed": removed},
    }


@router.delete("/{election_id}/voters/{voter_id}", response_model=schemas.MasterlistChangeResponse)
def delete_voter(
    election_id: int,
    voter_id: int,
    db: Session = Depends(get_db),
    officer: CallerIdentity = Depends(require_officer),
):
    controller.remove_voter(db, election_id, voter_id)
    return {
        "success": True,
        "status": status.HTTP_200_OK,
        "message": "Voter removed.",
        "data": {"voter_id": voter_id},
    }
