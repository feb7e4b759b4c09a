"""Candidate roster: registers candidates under an existing poll."""

from .errors import CandidateNameTooLong
from .log import get_logger
from .models import MAX_CANDIDATE_NAME_BYTES, Candidate, utf8_length
from .store import ElectionStore

logger = get_logger(__name__)


def register_candidate(store: ElectionStore, poll_id: int, candidate_name: str) -> Candidate:
    """
    Create a candidate with zero votes and increment the poll's candidate_amount.

    Registration is accepted at any time, including after the poll has opened.
    A repeated name is rejected by the storage layer as a key collision.
    """
    if utf8_length(candidate_name) > MAX_CANDIDATE_NAME_BYTES:
        raise CandidateNameTooLong()
    candidate = Candidate(poll_id=poll_id, candidate_name=candidate_name, candidate_votes=0)
    store.insert_candidate(candidate)

    poll = store.get_poll(poll_id)
    logger.info("Candidate %s added to poll %s", candidate_name, poll_id)
    logger.info("Poll %s has %s candidates", poll_id, poll.candidate_amount)
    return candidate
