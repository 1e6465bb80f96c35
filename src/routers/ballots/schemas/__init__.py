from .ballots import (
    BallotSubmission, BallotReceiptData, BallotResponse, ErrorResponse,
    PartylistOut, CandidateResult, PositionResult, ResultsData, ResultsResponse,
    BallotCandidate, BallotPosition, BallotSheetData, BallotSheetResponse,
)

__all__ = ['BallotSubmission', 'BallotReceiptData', 'BallotResponse', 'ErrorResponse',
           'PartylistOut', 'CandidateResult', 'PositionResult', 'ResultsData', 'ResultsResponse',
           'BallotCandidate', 'BallotPosition', 'BallotSheetData', 'BallotSheetResponse']
