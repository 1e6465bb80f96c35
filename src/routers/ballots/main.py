from datetime import date
from typing import Optional
from . import controller
from . import schemas
from .outcomes import BallotError, ErrorCode, ErrorKind
from loguru import logger
from src.database import get_db
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError
from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from src.utils.jwt import CallerIdentity, get_current_caller

# Defining the router
router = APIRouter(
    prefix="/api/elections",
    tags=["Ballots"],
    responses={404: {"description": "Not found"}},
)

_KIND_STATUS = {
    ErrorKind.ADMISSION: status.HTTP_403_FORBIDDEN,
    ErrorKind.VALIDATION: 422,
    ErrorKind.RECORDING: status.HTTP_503_SERVICE_UNAVAILABLE,
}

_CODE_STATUS = {
    ErrorCode.ELECTION_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.ALREADY_VOTED: status.HTTP_409_CONFLICT,
    ErrorCode.STUDENT_ID_REQUIRED: status.HTTP_400_BAD_REQUEST,
    ErrorCode.NO_POSITIONS: status.HTTP_409_CONFLICT,
    ErrorCode.VOTER_REGISTRATION_FAILED: status.HTTP_503_SERVICE_UNAVAILABLE,
}


def today_override() -> Optional[date]:
    """Clock dependency; tests override it to pin the voting day."""
    return None


def error_response(error: BallotError) -> JSONResponse:
    status_code = _CODE_STATUS.get(error.code, _KIND_STATUS[error.kind])
    return JSONResponse(
        status_code=status_code,
        content={
            "success": False,
            "status": status_code,
            "message": error.message,
            "error": error.message,
            "code": error.code.value,
            "data": error.detail or None,
        },
    )


def _system_error(message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "success": False,
            "status": 500,
            "message": message,
            "error": message,
            "code": "system_error",
            "data": None,
        },
    )


@router.post("/{election_id}/ballot", status_code=status.HTTP_201_CREATED,
             response_model=schemas.BallotResponse,
             responses={400: {"model": schemas.ErrorResponse}, 403: {"model": schemas.ErrorResponse},
                        409: {"model": schemas.ErrorResponse}, 422: {"model": schemas.ErrorResponse},
                        503: {"model": schemas.ErrorResponse}})
def submit_ballot(
    election_id: int,
    submission: schemas.BallotSubmission,
    db: Session = Depends(get_db),
    caller: CallerIdentity = Depends(get_current_caller),
    today: Optional[date] = Depends(today_override),
):
    """
    Cast the caller's ballot. Each student ID may vote once per election.
    """
    try:
        outcome = controller.submit_ballot(
            db,
            election_id=election_id,
            student_id=submission.student_id,
            selections=submission.selections,
            caller=caller,
            today=today,
        )
    except SQLAlchemyError:
        logger.exception(f"Unexpected database error while submitting a ballot for election {election_id}")
        db.rollback()
        return _system_error("We could not process your ballot. Please try again.")

    if isinstance(outcome, BallotError):
        return error_response(outcome)

    return {
        "success": True,
        "status": status.HTTP_201_CREATED,
        "message": "Your ballot has been recorded.",
        "data": {"vote_id": outcome.vote_id},
    }


@router.get("/{election_id}/ballot", response_model=schemas.BallotSheetResponse)
def get_ballot(
    election_id: int,
    db: Session = Depends(get_db),
    caller: CallerIdentity = Depends(get_current_caller),
    today: Optional[date] = Depends(today_override),
):
    """
    Positions and approved candidates to render the ballot form.
    """
    try:
        sheet = controller.get_ballot_sheet(db, election_id, caller, today=today)
    except SQLAlchemyError:
        logger.exception(f"Unexpected database error while loading the ballot of election {election_id}")
        return _system_error("Could not load the ballot. Please try again.")

    if isinstance(sheet, BallotError):
        return error_response(sheet)

    return {
        "success": True,
        "status": status.HTTP_200_OK,
        "message": "Ballot loaded.",
        "data": sheet,
    }


@router.get("/{election_id}/results", response_model=schemas.ResultsResponse)
def get_results(election_id: int, db: Session = Depends(get_db)):
    """
    Vote counts per candidate per position, recomputed on every request.
    """
    try:
        tally = controller.get_election_results(db, election_id)
    except SQLAlchemyError:
        logger.exception(f"Unexpected database error while tallying election {election_id}")
        return _system_error("Could not fetch results. Please try again.")

    if isinstance(tally, BallotError):
        return error_response(tally)

    return {
        "success": True,
        "status": status.HTTP_200_OK,
        "message": f"Results for {len(tally.positions)} position(s).",
        "data": controller.results_payload(tally),
    }
