import os
from functools import lru_cache

import boto3
from botocore.config import Config
from dotenv import load_dotenv

from .log import get_logger

# Load environment variables from .env file
load_dotenv()

logger = get_logger(__name__)


@lru_cache(maxsize=1)
def get_dynamodb_resource():
    """
    Directive: returns a cached DynamoDB resource connected to DynamoDB Local or AWS.
    Configure with:
      - DYNAMODB_URL (e.g., http://127.0.0.1:8000 for local; unset for AWS)
      - AWS_REGION (default: us-east-1)
      - AWS_ACCESS_KEY_ID / AWS_SECRET_ACCESS_KEY (dummy for local)
    """
    endpoint_url = os.getenv("DYNAMODB_URL") or None
    region = os.getenv("AWS_REGION", "us-east-1")
    # For DynamoDB Local, dummy credentials are required by the SDK
    aws_access_key_id = os.getenv("AWS_ACCESS_KEY_ID", "dummy")
    aws_secret_access_key = os.getenv("AWS_SECRET_ACCESS_KEY", "dummy")
    session = boto3.session.Session()
    return session.resource(
        "dynamodb",
        region_name=region,
        endpoint_url=endpoint_url,
        aws_access_key_id=aws_access_key_id,
        aws_secret_access_key=aws_secret_access_key,
        config=Config(retries={"max_attempts": 5, "mode": "standard"}),
    )


def election_table_name() -> str:
    return os.getenv("DYNAMODB_ELECTION_TABLE", "Elections")


def get_election_table():
    """
    Dependency: retrieve the election table object (single-table design).
    Table schema:
      - pk (HASH)
      - sk (RANGE)
    Denormalized items, all under pk= P#{poll_id}:
      - Poll item:        sk= POLL, attrs: description, poll_start, poll_end, candidate_amount, total_votes
      - Candidate item:   sk= C#{candidate_name}, attrs: candidate_votes
      - Voter record:     sk= V#{identity}, attrs: has_voted
    """
    dynamodb = get_dynamodb_resource()
    return dynamodb.Table(election_table_name())


def create_election_table_if_not_exists() -> bool:
    """Create the election table. Returns True if it was created by this call."""
    dynamodb = get_dynamodb_resource()
    table_name = election_table_name()

    existing = [t.name for t in dynamodb.tables.all()]
    if table_name in existing:
        logger.debug("Table %s already exists", table_name)
        return False

    table = dynamodb.create_table(
        TableName=table_name,
        KeySchema=[
            {"AttributeName": "pk", "KeyType": "HASH"},
            {"AttributeName": "sk", "KeyType": "RANGE"},
        ],
        AttributeDefinitions=[
            {"AttributeName": "pk", "AttributeType": "S"},
            {"AttributeName": "sk", "AttributeType": "S"},
        ],
        BillingMode="PAY_PER_REQUEST",
    )
    table.wait_until_exists()
    logger.info("Created table %s", table_name)
    return True
