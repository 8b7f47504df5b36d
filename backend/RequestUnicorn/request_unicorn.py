"""backend.RequestUnicorn.request_unicorn

Lambda function that dispatches a unicorn to an authenticated rider.

The `lambda_handler` checks that the Cognito authorizer attached the caller's
identity, generates a ride id, picks a unicorn from the fleet, records the
ride in DynamoDB and returns an API Gateway-compatible response.

Notes:
- Reads environment variable `RIDES_TABLE` for the DynamoDB table name
  (default `Rides`). The table's partition key is `RideId` (string).
- `LOG_LEVEL` sets the level of this module's logger (default `INFO`).
"""
import os
import json
import base64
import secrets
import logging
from datetime import datetime, timezone

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from .fleet import find_unicorn

logger = logging.getLogger(__name__)


def resolve_log_level(value):
    """Map a `LOG_LEVEL` value to a logging level.

    Accepts level names (`"DEBUG"`, `"info"`) and the numeric scheme used by
    the other tools: `"0"` silences the logger, `"1"` is INFO, any other
    number is DEBUG. Unrecognized values fall back to INFO.
    """
    value = (value or "").strip()
    if value.isdigit():
        if value == "0":
            return logging.CRITICAL + 1
        return logging.INFO if value == "1" else logging.DEBUG
    level = logging.getLevelName(value.upper())
    return level if isinstance(level, int) else logging.INFO


logger.setLevel(resolve_log_level(os.environ.get("LOG_LEVEL", "INFO")))

ETA = "30 seconds"

CORS_HEADERS = {
    "Content-Type": "application/json",
    "Access-Control-Allow-Origin": "*",
}


class PickupLocationError(ValueError):
    """Raised when the request body does not carry a usable pickup location."""


def lambda_handler(event, context):
    """Handle POST /ride requests.

    Args:
        event (dict): API Gateway proxy event. The caller identity is read from
            `requestContext.authorizer.claims["cognito:username"]` and the
            pickup location from the JSON `body`.
        context: Lambda context; `aws_request_id` is echoed back in errors.

    Returns:
        dict: API Gateway-compatible response with `statusCode`, `headers`
        and `body`.
    """
    reference = getattr(context, "aws_request_id", None)

    # A missing authorizer means API Gateway was wired up without Cognito.
    username = get_username(event)
    if not username:
        logger.error("Authorization not configured; request %s rejected", reference)
        return error_response("Authorization not configured", reference)

    ride_id = to_url_string(secrets.token_bytes(16))
    logger.info("Received ride request (%s): %s", ride_id, event.get("body"))

    try:
        pickup_location = parse_pickup_location(event.get("body"))
        unicorn = find_unicorn(pickup_location)
        record_ride(ride_id, username, unicorn)
    except (json.JSONDecodeError, TypeError, PickupLocationError) as e:
        logger.exception("Could not parse ride request %s", ride_id)
        return error_response(str(e), reference)
    except (ClientError, BotoCoreError) as e:
        logger.exception("Failed to record ride %s", ride_id)
        return error_response(str(e), reference)
    except Exception as e:
        logger.exception("Unexpected error handling ride request %s", ride_id)
        return error_response(str(e), reference)

    response_body = {
        "RideId": ride_id,
        "Unicorn": unicorn.to_dict(),
        "Eta": ETA,
        "Rider": username,
    }
    return {
        "statusCode": 201,
        "headers": CORS_HEADERS,
        "body": json.dumps(response_body),
    }


def get_username(event):
    """Return the Cognito username attached by the authorizer, or None."""
    request_context = event.get("requestContext") or {}
    authorizer = request_context.get("authorizer") or {}
    claims = authorizer.get("claims") or {}
    return claims.get("cognito:username")


def to_url_string(buffer):
    """Encode bytes as URL-safe base64 with the `=` padding stripped."""
    return base64.urlsafe_b64encode(buffer).decode("ascii").rstrip("=")


def parse_pickup_location(raw_body):
    """Decode the request body and return its `PickupLocation` object.

    Only the presence of `Latitude` and `Longitude` is checked; their values
    are passed through as given.
    """
    if raw_body is None:
        raise PickupLocationError("Request body is missing")

    body = json.loads(raw_body)
    pickup_location = body.get("PickupLocation") if isinstance(body, dict) else None
    if not isinstance(pickup_location, dict):
        raise PickupLocationError("PickupLocation is missing or malformed")

    for key in ("Latitude", "Longitude"):
        if key not in pickup_location:
            raise PickupLocationError(f"PickupLocation.{key} is missing")

    return pickup_location


def get_rides_table():
    """Return the DynamoDB table resource that ride records are written to."""
    table_name = os.environ.get("RIDES_TABLE", "Rides")
    return boto3.resource("dynamodb").Table(table_name)


def record_ride(ride_id, username, unicorn):
    """Write a single ride record. Errors from DynamoDB propagate to the caller."""
    item = {
        "RideId": ride_id,
        "User": username,
        "Unicorn": unicorn.to_dict(),
        "UnicornName": unicorn.name,
        "RequestTime": utc_timestamp(),
    }
    get_rides_table().put_item(Item=item)
    return item


def utc_timestamp():
    """Current UTC time as ISO-8601 with millisecond precision, e.g. `...T12:00:00.000Z`."""
    now = datetime.now(timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def error_response(message, reference):
    """Build the uniform 500 response returned for every failure."""
    return {
        "statusCode": 500,
        "headers": CORS_HEADERS,
        "body": json.dumps({"Error": message, "Reference": reference}),
    }
