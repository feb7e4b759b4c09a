"""Poll registry: creation-time validation of the voting window."""

from .errors import DescriptionTooLong, InvalidTimestamp, PollEndBeforeStart, PollEndInPast, PollStartInPast
from .log import get_logger
from .models import MAX_DESCRIPTION_BYTES, Poll, utf8_length
from .store import ElectionStore

logger = get_logger(__name__)


def validate_window(poll_start: int, poll_end: int, now: int) -> None:
    if poll_start <= now:
        raise PollStartInPast()
    if poll_end <= now:
        raise PollEndInPast()
    if poll_end <= poll_start:
        raise PollEndBeforeStart()
    # Unreachable while the checks above hold; guards against a zeroed timestamp
    if poll_end <= 0:
        raise InvalidTimestamp()


def create_poll(
    store: ElectionStore,
    poll_id: int,
    description: str,
    poll_start: int,
    poll_end: int,
    now: int,
) -> Poll:
    if utf8_length(description) > MAX_DESCRIPTION_BYTES:
        raise DescriptionTooLong()
    validate_window(poll_start, poll_end, now)
    poll = Poll(
        poll_id=poll_id,
        description=description,
        poll_start=poll_start,
        poll_end=poll_end,
        candidate_amount=0,
        total_votes=0,
    )
    store.put_poll(poll)
    logger.info("Poll %s created, open from %s to %s", poll_id, poll_start, poll_end)
    return poll
