import time
from typing import Annotated

from fastapi import FastAPI, Depends, HTTPException, status, Header, Path

from .auth import decode_token
from .ballots import cast_vote
from .candidates import register_candidate
from .db import get_election_table, create_election_table_if_not_exists
from .errors import ElectionError
from .log import get_logger
from .models import Candidate, Poll, VoteReceipt, VoterRecord
from .polls import create_poll
from .schemas import U64_MAX, CandidateCreate, PollCreate, PollResults, VoteIn
from .store import ElectionStore


app = FastAPI(title="Election Service")

logger = get_logger(__name__)

PollId = Annotated[int, Path(ge=0, le=U64_MAX)]


@app.on_event("startup")
async def on_startup():
    # Create DynamoDB table if it doesn't exist
    create_election_table_if_not_exists()


def get_current_username(authorization: Annotated[str | None, Header()] = None) -> str:
    if not authorization or not authorization.startswith("Bearer "):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Missing bearer token")
    token = authorization.split(" ", 1)[1]
    payload = decode_token(token)
    if not payload or "sub" not in payload:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token")
    return str(payload["sub"])


def current_time() -> int:
    """Trusted clock: Unix seconds."""
    return int(time.time())


def get_store() -> ElectionStore:
    return ElectionStore(get_election_table())


def _rejected(exc: ElectionError) -> HTTPException:
    logger.info("Rejected: %s (%s)", exc.code, exc)
    return HTTPException(status_code=exc.status_code, detail=exc.to_detail())


@app.post("/polls", response_model=Poll, status_code=status.HTTP_201_CREATED)
def create_poll_endpoint(
    data: PollCreate,
    current_username: str = Depends(get_current_username),
    now: int = Depends(current_time),
    store: ElectionStore = Depends(get_store),
):
    try:
        return create_poll(store, data.poll_id, data.description, data.poll_start, data.poll_end, now)
    except ElectionError as exc:
        raise _rejected(exc)


@app.get("/polls/{poll_id}", response_model=Poll)
def get_poll(poll_id: PollId, store: ElectionStore = Depends(get_store)):
    try:
        return store.get_poll(poll_id)
    except ElectionError as exc:
        raise _rejected(exc)


@app.post("/polls/{poll_id}/candidates", response_model=Candidate, status_code=status.HTTP_201_CREATED)
def register_candidate_endpoint(
    poll_id: PollId,
    data: CandidateCreate,
    current_username: str = Depends(get_current_username),
    store: ElectionStore = Depends(get_store),
):
    try:
        return register_candidate(store, poll_id, data.candidate_name)
    except ElectionError as exc:
        raise _rejected(exc)


@app.get("/polls/{poll_id}/candidates/{candidate_name}", response_model=Candidate)
def get_candidate(poll_id: PollId, candidate_name: str, store: ElectionStore = Depends(get_store)):
    try:
        return store.get_candidate(poll_id, candidate_name)
    except ElectionError as exc:
        raise _rejected(exc)


@app.post("/polls/{poll_id}/vote", response_model=VoteReceipt)
def vote_poll(
    poll_id: PollId,
    vote: VoteIn,
    current_username: str = Depends(get_current_username),
    now: int = Depends(current_time),
    store: ElectionStore = Depends(get_store),
):
    try:
        return cast_vote(store, poll_id, vote.candidate_name, current_username, now)
    except ElectionError as exc:
        raise _rejected(exc)


@app.get("/polls/{poll_id}/voter", response_model=VoterRecord)
def my_voter_record(
    poll_id: PollId,
    current_username: str = Depends(get_current_username),
    store: ElectionStore = Depends(get_store),
):
    try:
        store.get_poll(poll_id)
    except ElectionError as exc:
        raise _rejected(exc)
    return store.get_voter_record(poll_id, current_username)


@app.get("/polls/{poll_id}/results", response_model=PollResults)
def poll_results(poll_id: PollId, store: ElectionStore = Depends(get_store)):
    try:
        poll = store.get_poll(poll_id)
    except ElectionError as exc:
        raise _rejected(exc)
    return PollResults(poll=poll, candidates=store.list_candidates(poll_id))


@app.get("/health")
def health_check():
    return {"status": "ok", "service": "election"}
