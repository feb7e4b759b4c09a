from typing import List

from pydantic import BaseModel, Field, field_validator

from .models import MAX_CANDIDATE_NAME_BYTES, MAX_DESCRIPTION_BYTES, Candidate, Poll, utf8_length

U64_MAX = 2**64 - 1


class PollCreate(BaseModel):
    poll_id: int = Field(ge=0, le=U64_MAX)
    description: str = Field(description=f"At most {MAX_DESCRIPTION_BYTES} bytes of UTF-8")
    poll_start: int = Field(ge=0, le=U64_MAX, description="Unix timestamp (seconds) voting opens")
    poll_end: int = Field(ge=0, le=U64_MAX, description="Unix timestamp (seconds) voting closes, inclusive")

    @field_validator("description")
    @classmethod
    def description_fits(cls, v: str) -> str:
        if utf8_length(v) > MAX_DESCRIPTION_BYTES:
            raise ValueError(f"description exceeds {MAX_DESCRIPTION_BYTES} bytes")
        return v


class CandidateCreate(BaseModel):
    candidate_name: str = Field(min_length=1, description=f"At most {MAX_CANDIDATE_NAME_BYTES} bytes of UTF-8")

    @field_validator("candidate_name")
    @classmethod
    def candidate_name_fits(cls, v: str) -> str:
        if utf8_length(v) > MAX_CANDIDATE_NAME_BYTES:
            raise ValueError(f"candidate_name exceeds {MAX_CANDIDATE_NAME_BYTES} bytes")
        return v


class VoteIn(CandidateCreate):
    pass


class PollResults(BaseModel):
    poll: Poll
    candidates: List[Candidate] = Field(description="Candidates of the poll with their tallies")
