from pydantic import BaseModel
from typing import List, Optional
from src.routers.ballots.models import VoterSourceEnum


class MasterlistAddRequest(BaseModel):
    # student IDs separated by spaces, tabs or newlines
    student_ids: str


class VoterOut(BaseModel):
    voter_id: int
    student_id: str
    email: Optional[str] = None
    is_voted: bool
    source: VoterSourceEnum

    model_config = {"from_attributes": True}


class MasterlistSummary(BaseModel):
    total: int
    voted: int
    not_voted: int
    voters: List[VoterOut]


class MasterlistResponse(BaseModel):
    success: bool
    status: int
    message: str
    data: Optional[MasterlistSummary] = None


class MasterlistChangeResponse(BaseModel):
    success: bool
    status: int
    message: str
    data: Optional[dict] = None
