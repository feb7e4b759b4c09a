import pytest

from election_service.ballots import cast_vote
from election_service.candidates import register_candidate
from election_service.errors import AlreadyVoted, CandidateNotFound, PollEnded, PollNotFound, PollNotStarted
from election_service.polls import create_poll

from conftest import T, voted_count


def tallies(store, poll_id=1):
    poll = store.get_poll(poll_id)
    return poll.total_votes, {c.candidate_name: c.candidate_votes for c in store.list_candidates(poll_id)}


def test_vote_updates_all_three_records(store, poll, table):
    receipt = cast_vote(store, 1, "Alice", "voter-a", now=T + 50)

    assert receipt.candidate_name == "Alice"
    assert receipt.identity == "voter-a"
    assert receipt.candidate_votes == 1
    assert receipt.total_votes == 1
    assert store.get_voter_record(1, "voter-a").has_voted is True
    assert tallies(store) == (1, {"Alice": 1, "Bob": 0})
    assert voted_count(table, 1) == 1


@pytest.mark.parametrize("now", [T + 10, T + 100])
def test_window_boundaries_are_inclusive(store, poll, now):
    cast_vote(store, 1, "Bob", "voter-a", now=now)
    assert store.get_candidate(1, "Bob").candidate_votes == 1


def test_vote_before_start(store, poll, table):
    with pytest.raises(PollNotStarted):
        cast_vote(store, 1, "Alice", "voter-a", now=T + 9)

    assert store.get_voter_record(1, "voter-a").has_voted is False
    assert voted_count(table, 1) == 0
    assert tallies(store) == (0, {"Alice": 0, "Bob": 0})


def test_vote_after_end(store, poll):
    with pytest.raises(PollEnded):
        cast_vote(store, 1, "Alice", "voter-a", now=T + 101)
    assert tallies(store) == (0, {"Alice": 0, "Bob": 0})


def test_second_vote_is_rejected_without_changes(store, poll, table):
    cast_vote(store, 1, "Alice", "voter-a", now=T + 50)

    for candidate_name in ("Bob", "Alice", "Bob"):
        with pytest.raises(AlreadyVoted):
            cast_vote(store, 1, candidate_name, "voter-a", now=T + 60)

    assert tallies(store) == (1, {"Alice": 1, "Bob": 0})
    assert voted_count(table, 1) == 1


def test_identity_may_vote_in_each_poll_once(store, poll):
    create_poll(store, 2, "Second poll", T + 10, T + 100, now=T)
    register_candidate(store, 2, "Alice")

    cast_vote(store, 1, "Alice", "voter-a", now=T + 50)
    cast_vote(store, 2, "Alice", "voter-a", now=T + 50)

    assert store.get_poll(1).total_votes == 1
    assert store.get_poll(2).total_votes == 1


def test_unknown_candidate_leaves_voter_unmarked(store, poll, table):
    with pytest.raises(CandidateNotFound):
        cast_vote(store, 1, "Mallory", "voter-a", now=T + 50)

    assert store.get_voter_record(1, "voter-a").has_voted is False
    assert voted_count(table, 1) == 0
    assert store.get_poll(1).total_votes == 0

    # The identity can still vote for a real candidate
    cast_vote(store, 1, "Alice", "voter-a", now=T + 51)
    assert store.get_poll(1).total_votes == 1


def test_unknown_poll(store):
    with pytest.raises(PollNotFound):
        cast_vote(store, 42, "Alice", "voter-a", now=T)


def test_commit_rejects_identity_that_already_voted(store, poll):
    # Bypasses the ledger's read check: the transaction condition still holds the line
    store.commit_vote(1, "Alice", "voter-a")

    with pytest.raises(AlreadyVoted):
        store.commit_vote(1, "Bob", "voter-a")

    assert tallies(store) == (1, {"Alice": 1, "Bob": 0})


def test_tallies_stay_consistent(store, poll, table):
    choices = ["Alice", "Bob", "Alice", "Alice", "Bob", "Alice", "Bob", "Alice"]
    for i, candidate_name in enumerate(choices):
        cast_vote(store, 1, candidate_name, f"voter-{i}", now=T + 20 + i)
        # Repeat attempts never count
        with pytest.raises(AlreadyVoted):
            cast_vote(store, 1, "Bob", f"voter-{i}", now=T + 20 + i)

    total, per_candidate = tallies(store)
    assert per_candidate == {"Alice": 5, "Bob": 3}
    assert total == sum(per_candidate.values()) == len(choices)
    assert voted_count(table, 1) == total
