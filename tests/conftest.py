import pytest
from boto3.dynamodb.conditions import Key
from fastapi.testclient import TestClient
from moto import mock_aws

from election_service.app import app, current_time
from election_service.auth import create_access_token
from election_service.candidates import register_candidate
from election_service.db import create_election_table_if_not_exists, get_dynamodb_resource, get_election_table
from election_service.polls import create_poll
from election_service.store import ElectionStore

# Fixed "now" all tests are anchored to
T = 1_700_000_000


@pytest.fixture(autouse=True)
def aws_env(monkeypatch):
    monkeypatch.delenv("DYNAMODB_URL", raising=False)
    monkeypatch.setenv("AWS_REGION", "us-east-1")
    monkeypatch.setenv("AWS_DEFAULT_REGION", "us-east-1")
    monkeypatch.setenv("AWS_ACCESS_KEY_ID", "testing")
    monkeypatch.setenv("AWS_SECRET_ACCESS_KEY", "testing")
    monkeypatch.setenv("DYNAMODB_ELECTION_TABLE", "ElectionsTest")


@pytest.fixture
def table():
    get_dynamodb_resource.cache_clear()
    with mock_aws():
        create_election_table_if_not_exists()
        yield get_election_table()
    get_dynamodb_resource.cache_clear()


@pytest.fixture
def store(table):
    return ElectionStore(table)


@pytest.fixture
def poll(store):
    """Poll 1 opening at T+10 and closing at T+100, with Alice and Bob registered."""
    created = create_poll(store, 1, "Who should chair the committee?", T + 10, T + 100, now=T)
    register_candidate(store, 1, "Alice")
    register_candidate(store, 1, "Bob")
    return created


class Clock:
    def __init__(self, now: int):
        self.now = now


@pytest.fixture
def clock():
    return Clock(T)


@pytest.fixture
def client(table, clock):
    app.dependency_overrides[current_time] = lambda: clock.now
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def bearer(identity: str) -> dict:
    return {"Authorization": f"Bearer {create_access_token(identity)}"}


def voted_count(table, poll_id: int) -> int:
    resp = table.query(
        KeyConditionExpression=Key("pk").eq(f"P#{poll_id}") & Key("sk").begins_with("V#"),
        ConsistentRead=True,
    )
    return sum(1 for item in resp["Items"] if item.get("has_voted"))
