"""
Ballot ledger.

A (poll, identity) pair moves from never-voted to voted exactly once. Every
precondition is checked before the single transaction that marks the voter
record and increments the candidate and poll tallies.
"""

from .errors import AlreadyVoted, PollEnded, PollNotStarted
from .log import get_logger
from .models import Poll, VoteReceipt
from .store import ElectionStore

logger = get_logger(__name__)


def check_window(poll: Poll, now: int) -> None:
    """Voting is open for poll_start <= now <= poll_end."""
    if now < poll.poll_start:
        raise PollNotStarted()
    if now > poll.poll_end:
        raise PollEnded()


def cast_vote(
    store: ElectionStore,
    poll_id: int,
    candidate_name: str,
    identity: str,
    now: int,
) -> VoteReceipt:
    poll = store.get_poll(poll_id)
    check_window(poll, now)

    voter_record = store.get_voter_record(poll_id, identity)
    if voter_record.has_voted:
        raise AlreadyVoted()

    store.get_candidate(poll_id, candidate_name)
    store.commit_vote(poll_id, candidate_name, identity)

    # Counts observed after commit; concurrent votes may already have moved them
    candidate = store.get_candidate(poll_id, candidate_name)
    poll = store.get_poll(poll_id)
    logger.info("Voted for candidate: %s", candidate.candidate_name)
    logger.info("Votes: %s", candidate.candidate_votes)
    logger.info("Total votes in poll: %s", poll.total_votes)

    return VoteReceipt(
        poll_id=poll_id,
        candidate_name=candidate.candidate_name,
        identity=identity,
        candidate_votes=candidate.candidate_votes,
        total_votes=poll.total_votes,
    )
