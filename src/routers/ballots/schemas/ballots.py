# src/routers/ballots/schemas/ballots.py
from pydantic import BaseModel, Field
from typing import Dict, List, Optional
from datetime import datetime


class BallotSubmission(BaseModel):
    student_id: str
    # position_id -> candidate_ids picked for it
    selections: Dict[int, List[int]] = Field(default_factory=dict)


class BallotReceiptData(BaseModel):
    vote_id: int


class BallotResponse(BaseModel):
    success: bool
    status: int
    message: str
    data: Optional[BallotReceiptData] = None


class ErrorResponse(BaseModel):
    success: bool = False
    status: int
    message: str
    error: str
    code: str


class PartylistOut(BaseModel):
    name: str
    acronym: str


class CandidateResult(BaseModel):
    candidate_id: int
    full_name: str
    partylist: Optional[PartylistOut] = None
    vote_count: int

    model_config = {"from_attributes": True}


class PositionResult(BaseModel):
    position_id: int
    title: str
    max_votes: int
    candidates: List[CandidateResult]

    model_config = {"from_attributes": True}


class ResultsData(BaseModel):
    results: List[PositionResult]
    totalVoters: int


class ResultsResponse(BaseModel):
    success: bool
    status: int
    message: str
    data: Optional[ResultsData] = None


class BallotCandidate(BaseModel):
    candidate_id: int
    full_name: str
    position_id: int
    partylist: Optional[PartylistOut] = None


class BallotPosition(BaseModel):
    position_id: int
    title: str
    max_votes: int
    candidates: List[BallotCandidate]


class BallotSheetData(BaseModel):
    election_id: int
    name: str
    election_type: str
    start_date: datetime
    end_date: datetime
    voting_open: bool
    already_voted: bool
    positions: List[BallotPosition]


class BallotSheetResponse(BaseModel):
    success: bool
    status: int
    message: str
    data: Optional[BallotSheetData] = None
