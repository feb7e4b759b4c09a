from pydantic import BaseModel, Field

# Text limits are byte counts of the UTF-8 encoding
MAX_DESCRIPTION_BYTES = 200
MAX_CANDIDATE_NAME_BYTES = 32


def utf8_length(value: str) -> int:
    return len(value.encode("utf-8"))


class Poll(BaseModel):
    poll_id: int
    description: str
    poll_start: int
    poll_end: int
    candidate_amount: int = 0
    total_votes: int = 0

    @classmethod
    def from_item(cls, item: dict) -> "Poll":
        return cls(
            poll_id=int(item["poll_id"]),
            description=item["description"],
            poll_start=int(item["poll_start"]),
            poll_end=int(item["poll_end"]),
            candidate_amount=int(item.get("candidate_amount", 0)),
            total_votes=int(item.get("total_votes", 0)),
        )


class Candidate(BaseModel):
    poll_id: int
    candidate_name: str
    candidate_votes: int = 0

    @classmethod
    def from_item(cls, item: dict) -> "Candidate":
        return cls(
            poll_id=int(item["poll_id"]),
            candidate_name=item["candidate_name"],
            candidate_votes=int(item.get("candidate_votes", 0)),
        )


class VoterRecord(BaseModel):
    poll_id: int
    identity: str
    has_voted: bool = False

    @classmethod
    def from_item(cls, item: dict) -> "VoterRecord":
        return cls(
            poll_id=int(item["poll_id"]),
            identity=item["identity"],
            has_voted=bool(item.get("has_voted", False)),
        )


class VoteReceipt(BaseModel):
    """Diagnostic summary of a vote. Re-read the poll for authoritative counts."""

    status: str = "ok"
    poll_id: int
    candidate_name: str
    identity: str
    candidate_votes: int = Field(description="Candidate tally observed right after the vote")
    total_votes: int = Field(description="Poll tally observed right after the vote")
