import xml.etree.ElementTree as ET

import pytest

from app.core.exceptions import MalformedPayloadError, PayloadValidationError
from app.models.user import User, UserCreate, UserPatch, validate_user_payload
from app.schemas.response import ApiResponse, UsersResponse
from app.schemas.xml import parse_user_xml, render_api_response, render_user, render_users

JANE = User(
    id=2,
    name="Jane Smith",
    email="jane.smith@example.com",
    phone="+1234567891",
    address="456 Oak Ave, City, Country",
    active=True,
)


def test_user_round_trip():
    parsed = User.model_validate(parse_user_xml(render_user(JANE)))
    assert parsed == JANE


def test_round_trip_with_null_fields():
    user = User(id=9, name="No Phone", email="nophone@example.com", active=False)
    root = ET.fromstring(render_user(user))

    assert [child.tag for child in root] == ["id", "name", "email", "active"]
    assert User.model_validate(parse_user_xml(render_user(user))) == user


def test_user_element_order():
    root = ET.fromstring(render_user(JANE))
    assert [child.tag for child in root] == ["id", "name", "email", "phone", "address", "active"]


def test_users_envelope():
    root = ET.fromstring(render_users(UsersResponse(users=[JANE, JANE])))

    assert root.tag == "users"
    assert root.get("count") == "2"
    assert [child.tag for child in root] == ["user", "user", "status"]
    assert root.findtext("status") == "success"


def test_count_follows_users():
    assert UsersResponse(users=[JANE], count=10).count == 1
    assert UsersResponse().count == 0


def test_status_envelope_with_payload():
    root = ET.fromstring(render_api_response(ApiResponse.success("ok", JANE)))

    assert [child.tag for child in root] == ["status", "message", "user", "timestamp"]
    assert root.findtext("status") == "success"
    assert root.find("user").findtext("email") == JANE.email


def test_error_envelope():
    envelope = ApiResponse.error("nope")
    root = ET.fromstring(render_api_response(envelope))

    assert root.findtext("status") == "error"
    assert root.findtext("message") == "nope"
    assert root.find("user") is None
    assert root.findtext("timestamp") == envelope.timestamp


def test_parse_distinguishes_absent_nil_and_empty():
    body = (
        b'<user xmlns:xsi="http://www.w3.org/2001/XMLSchema-instance">'
        b'<phone xsi:nil="true"/><address></address><unknown>x</unknown></user>'
    )
    assert parse_user_xml(body) == {"phone": None, "address": ""}


@pytest.mark.parametrize("body", [b"", b"   ", b"<user>", b"not xml", b"<users/>"])
def test_parse_rejects_malformed(body):
    with pytest.raises(MalformedPayloadError):
        parse_user_xml(body)


def test_patch_tracks_present_fields():
    patch = validate_user_payload(UserPatch, {"phone": "555", "address": None})
    assert patch.provided_fields() == {"phone": "555"}


def test_create_defaults_active_on_nil():
    candidate = validate_user_payload(UserCreate, {"name": "Jo Jo", "email": "jo@example.com", "active": None})
    assert candidate.active is True


@pytest.mark.parametrize("fields, expected", [
    ({"email": "a@example.com"}, ("name", "Name is required")),
    ({"name": "   ", "email": "a@example.com"}, ("name", "Name is required")),
    ({"name": "x" * 101, "email": "a@example.com"}, ("name", "Name must be between 2 and 100 characters")),
    ({"name": "Jo Jo", "email": ""}, ("email", "Email is required")),
    ({"name": "Jo Jo", "email": "jo.example.com"}, ("email", "Email should be valid")),
    ({"name": "Jo Jo", "email": "jo@example.com", "address": "a" * 201}, ("address", "Address cannot exceed 200 characters")),
    ({"name": "Jo Jo", "email": "jo@example.com", "active": "maybe"}, ("active", "Active must be true or false")),
])
def test_validation_messages(fields, expected):
    with pytest.raises(PayloadValidationError) as exc_info:
        validate_user_payload(UserCreate, fields)

    assert exc_info.value.status_code == 422
    assert expected in exc_info.value.details
    assert f"{expected[0]}: {expected[1]}" in exc_info.value.message
