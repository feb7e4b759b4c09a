"""
Keyed record storage for polls, candidates and voter records.

All records of a poll share the partition key P#{poll_id}; the sort key tells
them apart. Creation uses conditional puts so a key collision is rejected by
DynamoDB, and multi-record updates go through TransactWriteItems so they
commit or fail as a unit.
"""

import time
from decimal import Decimal
from typing import List, Optional

from boto3.dynamodb.conditions import Key

from .errors import (
    AlreadyVoted,
    CandidateAlreadyExists,
    CandidateNotFound,
    PollAlreadyExists,
    PollNotFound,
)
from .log import get_logger
from .models import Candidate, Poll, VoterRecord

logger = get_logger(__name__)

POLL_SK = "POLL"
CANDIDATE_PREFIX = "C#"
VOTER_PREFIX = "V#"

# Attempts for a transaction cancelled only because another transaction held the same items
TRANSACT_MAX_ATTEMPTS = 5
TRANSACT_BACKOFF_SECONDS = 0.05


def _poll_pk(poll_id: int) -> str:
    return f"P#{poll_id}"


def _candidate_sk(candidate_name: str) -> str:
    return f"{CANDIDATE_PREFIX}{candidate_name}"


def _voter_sk(identity: str) -> str:
    return f"{VOTER_PREFIX}{identity}"


def _cancellation_codes(exc) -> List[str]:
    reasons = exc.response.get("CancellationReasons") or []
    return [reason.get("Code", "None") for reason in reasons]


class ElectionStore:
    def __init__(self, table):
        self.table = table

    @property
    def client(self):
        return self.table.meta.client

    # Reads

    def _get_item(self, pk: str, sk: str) -> Optional[dict]:
        resp = self.table.get_item(Key={"pk": pk, "sk": sk}, ConsistentRead=True)
        return resp.get("Item")

    def find_poll(self, poll_id: int) -> Optional[Poll]:
        item = self._get_item(_poll_pk(poll_id), POLL_SK)
        return Poll.from_item(item) if item else None

    def get_poll(self, poll_id: int) -> Poll:
        poll = self.find_poll(poll_id)
        if poll is None:
            raise PollNotFound(f"Poll {poll_id} not found")
        return poll

    def find_candidate(self, poll_id: int, candidate_name: str) -> Optional[Candidate]:
        item = self._get_item(_poll_pk(poll_id), _candidate_sk(candidate_name))
        return Candidate.from_item(item) if item else None

    def get_candidate(self, poll_id: int, candidate_name: str) -> Candidate:
        candidate = self.find_candidate(poll_id, candidate_name)
        if candidate is None:
            raise CandidateNotFound(f"Candidate {candidate_name} not found in poll {poll_id}")
        return candidate

    def get_voter_record(self, poll_id: int, identity: str) -> VoterRecord:
        """Get-or-default: an identity that never voted has has_voted=False."""
        item = self._get_item(_poll_pk(poll_id), _voter_sk(identity))
        if not item:
            return VoterRecord(poll_id=poll_id, identity=identity, has_voted=False)
        return VoterRecord.from_item(item)

    def list_candidates(self, poll_id: int) -> List[Candidate]:
        candidates = []
        kwargs = {
            "KeyConditionExpression": Key("pk").eq(_poll_pk(poll_id)) & Key("sk").begins_with(CANDIDATE_PREFIX),
            "ConsistentRead": True,
        }
        while True:
            resp = self.table.query(**kwargs)
            candidates.extend(Candidate.from_item(item) for item in resp.get("Items", []))
            last_key = resp.get("LastEvaluatedKey")
            if not last_key:
                break
            kwargs["ExclusiveStartKey"] = last_key
        return candidates

    # Writes

    def put_poll(self, poll: Poll) -> None:
        item = {"pk": _poll_pk(poll.poll_id), "sk": POLL_SK, **poll.model_dump()}
        try:
            self.table.put_item(Item=item, ConditionExpression="attribute_not_exists(pk)")
        except self.client.exceptions.ConditionalCheckFailedException:
            raise PollAlreadyExists(f"Poll {poll.poll_id} already exists")

    def _transact(self, items: List[dict]) -> None:
        attempt = 1
        while True:
            try:
                self.client.transact_write_items(TransactItems=items)
                return
            except self.client.exceptions.TransactionCanceledException as exc:
                codes = _cancellation_codes(exc)
                contended = "TransactionConflict" in codes and "ConditionalCheckFailed" not in codes
                if not contended or attempt >= TRANSACT_MAX_ATTEMPTS:
                    raise
                logger.debug("Transaction conflict (attempt %d), retrying", attempt)
                time.sleep(TRANSACT_BACKOFF_SECONDS * attempt)
                attempt += 1

    def insert_candidate(self, candidate: Candidate) -> None:
        """Create the candidate and bump its poll's candidate_amount in one transaction."""
        pk = _poll_pk(candidate.poll_id)
        try:
            self._transact([
                {
                    "Put": {
                        "TableName": self.table.name,
                        "Item": {"pk": pk, "sk": _candidate_sk(candidate.candidate_name), **candidate.model_dump()},
                        "ConditionExpression": "attribute_not_exists(pk)",
                    }
                },
                {
                    "Update": {
                        "TableName": self.table.name,
                        "Key": {"pk": pk, "sk": POLL_SK},
                        "ConditionExpression": "attribute_exists(pk)",
                        "UpdateExpression": "ADD candidate_amount :one",
                        "ExpressionAttributeValues": {":one": Decimal(1)},
                    }
                },
            ])
        except self.client.exceptions.TransactionCanceledException:
            # Either poll missing or candidate already registered
            if self.find_poll(candidate.poll_id) is None:
                raise PollNotFound(f"Poll {candidate.poll_id} not found")
            if self.find_candidate(candidate.poll_id, candidate.candidate_name) is not None:
                raise CandidateAlreadyExists(
                    f"Candidate {candidate.candidate_name} already exists in poll {candidate.poll_id}"
                )
            raise

    def commit_vote(self, poll_id: int, candidate_name: str, identity: str) -> None:
        """
        Mark the voter record and increment both tallies in one transaction.

        The voter record is upserted with a has_voted precondition, so two
        concurrent votes by the same identity cannot both commit.
        """
        pk = _poll_pk(poll_id)
        try:
            self._transact([
                {
                    "Update": {
                        "TableName": self.table.name,
                        "Key": {"pk": pk, "sk": _voter_sk(identity)},
                        "ConditionExpression": "attribute_not_exists(#has_voted) OR #has_voted = :false",
                        "UpdateExpression": "SET #has_voted = :true, #poll_id = :poll_id, #identity = :identity",
                        "ExpressionAttributeNames": {
                            "#has_voted": "has_voted",
                            "#poll_id": "poll_id",
                            "#identity": "identity",
                        },
                        "ExpressionAttributeValues": {
                            ":true": True,
                            ":false": False,
                            ":poll_id": poll_id,
                            ":identity": identity,
                        },
                    }
                },
                {
                    "Update": {
                        "TableName": self.table.name,
                        "Key": {"pk": pk, "sk": _candidate_sk(candidate_name)},
                        "ConditionExpression": "attribute_exists(pk)",
                        "UpdateExpression": "ADD candidate_votes :one",
                        "ExpressionAttributeValues": {":one": Decimal(1)},
                    }
                },
                {
                    "Update": {
                        "TableName": self.table.name,
                        "Key": {"pk": pk, "sk": POLL_SK},
                        "ConditionExpression": "attribute_exists(pk)",
                        "UpdateExpression": "ADD total_votes :one",
                        "ExpressionAttributeValues": {":one": Decimal(1)},
                    }
                },
            ])
        except self.client.exceptions.TransactionCanceledException:
            # Determine which precondition failed
            if self.get_voter_record(poll_id, identity).has_voted:
                raise AlreadyVoted()
            if self.find_poll(poll_id) is None:
                raise PollNotFound(f"Poll {poll_id} not found")
            if self.find_candidate(poll_id, candidate_name) is None:
                raise CandidateNotFound(f"Candidate {candidate_name} not found in poll {poll_id}")
            raise
