"""
app/schemas/xml.py

Purpose: XML wire format for user records and envelopes

- Renders <user>, <users count="N"> and <response> documents
- Parses <user> request bodies into raw field maps (absent / nil / value)
- XMLResponse for returning rendered documents from handlers
"""

import xml.etree.ElementTree as ET
from typing import Dict, Optional

from fastapi.responses import Response

from app.core.exceptions import MalformedPayloadError
from app.models.user import User, USER_FIELDS
from app.schemas.response import ApiResponse, UsersResponse

XML_MEDIA_TYPE = "application/xml"
XSI_NIL = "{http://www.w3.org/2001/XMLSchema-instance}nil"

USER_ELEMENT = "user"
USERS_ELEMENT = "users"
RESPONSE_ELEMENT = "response"


class XMLResponse(Response):
    media_type = XML_MEDIA_TYPE


def _text(value) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _local_name(tag: str) -> str:
    return tag.rsplit("}", 1)[-1]


def user_to_element(user: User) -> ET.Element:
    """Builds a <user> element; null fields are omitted."""
    element = ET.Element(USER_ELEMENT)
    for field in ("id",) + USER_FIELDS:
        value = getattr(user, field)
        if value is None:
            continue
        ET.SubElement(element, field).text = _text(value)
    return element


def users_to_element(envelope: UsersResponse) -> ET.Element:
    element = ET.Element(USERS_ELEMENT, {"count": str(envelope.count)})
    for user in envelope.users:
        element.append(user_to_element(user))
    ET.SubElement(element, "status").text = envelope.status
    return element


def api_response_to_element(envelope: ApiResponse) -> ET.Element:
    element = ET.Element(RESPONSE_ELEMENT)
    ET.SubElement(element, "status").text = envelope.status
    ET.SubElement(element, "message").text = envelope.message
    if envelope.data is not None:
        element.append(user_to_element(envelope.data))
    ET.SubElement(element, "timestamp").text = envelope.timestamp
    return element


def to_xml(element: ET.Element) -> bytes:
    return ET.tostring(element, encoding="utf-8", xml_declaration=True)


def render_user(user: User) -> bytes:
    return to_xml(user_to_element(user))


def render_users(envelope: UsersResponse) -> bytes:
    return to_xml(users_to_element(envelope))


def render_api_response(envelope: ApiResponse) -> bytes:
    return to_xml(api_response_to_element(envelope))


def parse_user_xml(body: bytes) -> Dict[str, Optional[str]]:
    """
    Reads a <user> document into a field map.

    Only elements that appear in the document become keys, so callers can
    tell an absent field from one sent with xsi:nil="true" (value None)
    or sent empty (value ""). Unknown elements are ignored.

    Raises:
        MalformedPayloadError: body is not XML or the root is not <user>
    """
    if not body or not body.strip():
        raise MalformedPayloadError("Request body is empty")

    try:
        root = ET.fromstring(body)
    except ET.ParseError as e:
        raise MalformedPayloadError(f"Malformed XML payload: {e}") from e

    if _local_name(root.tag) != USER_ELEMENT:
        raise MalformedPayloadError(
            f"Expected root element <{USER_ELEMENT}>, got <{_local_name(root.tag)}>"
        )

    fields: Dict[str, Optional[str]] = {}
    for child in root:
        name = _local_name(child.tag)
        if name != "id" and name not in USER_FIELDS:
            continue
        if child.get(XSI_NIL, "").strip().lower() == "true":
            fields[name] = None
            continue
        text = child.text or ""
        fields[name] = text.strip() if name in ("id", "active") else text

    return fields


def user_response(user: User, status_code: int = 200) -> XMLResponse:
    return XMLResponse(content=render_user(user), status_code=status_code)


def users_response(envelope: UsersResponse, status_code: int = 200) -> XMLResponse:
    return XMLResponse(content=render_users(envelope), status_code=status_code)


def api_response(envelope: ApiResponse, status_code: int = 200, headers: Optional[Dict[str, str]] = None) -> XMLResponse:
    return XMLResponse(content=render_api_response(envelope), status_code=status_code, headers=headers)


def error_response(message: str, status_code: int, headers: Optional[Dict[str, str]] = None) -> XMLResponse:
    return api_response(ApiResponse.error(message), status_code=status_code, headers=headers)
