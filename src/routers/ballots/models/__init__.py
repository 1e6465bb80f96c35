# src/routers/ballots/models/__init__.py
from .ballots import (
    ElectionTypeEnum, ApplicationStatusEnum, VoterSourceEnum,
    Election, Position, Partylist, Candidate, Voter, Vote, VoteSelection,
)
__all__ = ["ElectionTypeEnum", "ApplicationStatusEnum", "VoterSourceEnum",
           "Election", "Position", "Partylist", "Candidate", "Voter", "Vote", "VoteSelection"]
