from .masterlist import (
    MasterlistAddRequest, VoterOut, MasterlistSummary,
    MasterlistResponse, MasterlistChangeResponse,
)

__all__ = ["MasterlistAddRequest", "VoterOut", "MasterlistSummary",
           "MasterlistResponse", "MasterlistChangeResponse"]
