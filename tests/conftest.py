import json

import boto3
import pytest
from moto import mock_aws
from unittest.mock import MagicMock

TABLE_NAME = "test-rides"


@pytest.fixture(autouse=True)
def aws_env(monkeypatch):
    """Fake credentials and region so boto3 never reaches a real account."""
    monkeypatch.setenv("AWS_ACCESS_KEY_ID", "testing")
    monkeypatch.setenv("AWS_SECRET_ACCESS_KEY", "testing")
    monkeypatch.setenv("AWS_SECURITY_TOKEN", "testing")
    monkeypatch.setenv("AWS_SESSION_TOKEN", "testing")
    monkeypatch.setenv("AWS_DEFAULT_REGION", "us-east-1")
    monkeypatch.setenv("RIDES_TABLE", TABLE_NAME)


@pytest.fixture
def rides_table():
    """In-memory DynamoDB rides table keyed by RideId."""
    with mock_aws():
        dynamodb = boto3.resource("dynamodb", region_name="us-east-1")
        table = dynamodb.create_table(
            TableName=TABLE_NAME,
            KeySchema=[{"AttributeName": "RideId", "KeyType": "HASH"}],
            AttributeDefinitions=[{"AttributeName": "RideId", "AttributeType": "S"}],
            BillingMode="PAY_PER_REQUEST",
        )
        yield table


@pytest.fixture
def lambda_context():
    return MagicMock(aws_request_id="c6af9ac6-7b61-11e6-9a41-93e8deadbeef")


@pytest.fixture
def ride_event():
    """Authorized POST /ride event as delivered by API Gateway."""
    return {
        "path": "/ride",
        "httpMethod": "POST",
        "headers": {"Accept": "*/*", "Authorization": "eyJraWQiOiJLTzRVMWZs"},
        "requestContext": {
            "authorizer": {
                "claims": {"cognito:username": "the_username"},
            },
        },
        "body": json.dumps({"PickupLocation": {"Latitude": 47.61, "Longitude": -122.28}}),
    }
