"""
Error taxonomy for the election ledger.

Every error is a rejected operation: it is raised before any write of the
operation it belongs to, so nothing is left partially applied.
"""

from fastapi import status


class ElectionError(Exception):
    """Base class for all rejected election operations."""

    code: str = "ElectionError"
    message: str = "Election operation rejected"
    status_code: int = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str | None = None):
        super().__init__(message or self.message)

    def to_detail(self) -> dict:
        return {"code": self.code, "message": str(self)}


class PollStartInPast(ElectionError):
    code = "PollStartInPast"
    message = "Poll start time is in the past"


class PollEndInPast(ElectionError):
    code = "PollEndInPast"
    message = "Poll end time is in the past"


class PollEndBeforeStart(ElectionError):
    code = "PollEndBeforeStart"
    message = "Poll end time is before or equal to start time"


class InvalidTimestamp(ElectionError):
    code = "InvalidTimestamp"
    message = "Invalid Unix timestamp"


class PollNotStarted(ElectionError):
    code = "PollNotStarted"
    message = "Poll has not started yet"
    status_code = status.HTTP_403_FORBIDDEN


class PollEnded(ElectionError):
    code = "PollEnded"
    message = "Poll has ended"
    status_code = status.HTTP_403_FORBIDDEN


class AlreadyVoted(ElectionError):
    code = "AlreadyVoted"
    message = "You have already voted in this poll"
    status_code = status.HTTP_409_CONFLICT


# Lookup and key-collision failures reported by the storage layer


class PollNotFound(ElectionError):
    code = "PollNotFound"
    message = "Poll not found"
    status_code = status.HTTP_404_NOT_FOUND


class CandidateNotFound(ElectionError):
    code = "CandidateNotFound"
    message = "Candidate not found"
    status_code = status.HTTP_404_NOT_FOUND


class PollAlreadyExists(ElectionError):
    code = "PollAlreadyExists"
    message = "Poll already exists"
    status_code = status.HTTP_409_CONFLICT


class CandidateAlreadyExists(ElectionError):
    code = "CandidateAlreadyExists"
    message = "Candidate already exists"
    status_code = status.HTTP_409_CONFLICT


class DescriptionTooLong(ElectionError):
    code = "DescriptionTooLong"
    message = "Poll description exceeds 200 bytes"


class CandidateNameTooLong(ElectionError):
    code = "CandidateNameTooLong"
    message = "Candidate name exceeds 32 bytes"
