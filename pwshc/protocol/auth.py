"""Master-key authorization for the Cosmos DB REST API."""

from __future__ import annotations

import base64
import hashlib
import hmac
from dataclasses import dataclass
from datetime import datetime, timezone
from email.utils import format_datetime
from typing import Optional
from urllib.parse import quote

from .constants import ACCOUNT_KEY, ENDPOINT_KEY, TOKEN_TYPE, TOKEN_VERSION

__all__ = [
    "ConnectionDescriptor",
    "build_auth_token",
    "build_connection_string",
    "build_signing_string",
    "compute_signature",
    "parse_connection_string",
    "rfc1123_date",
]


@dataclass(frozen=True)
class ConnectionDescriptor:
    endpoint: str
    key: str


def build_connection_string(endpoint: str, key: str) -> str:
    return f"{ENDPOINT_KEY}={endpoint};{ACCOUNT_KEY}={key};"


def parse_connection_string(connection_string: Optional[str]) -> Optional[ConnectionDescriptor]:
    """
    Split ``Name=Value;...`` pairs.

    Names compare case-insensitively, surrounding whitespace is dropped and
    only the first ``=`` of a pair separates name from value.  Returns
    ``None`` unless both the endpoint and the key are present.
    """
    if not connection_string:
        return None
    endpoint: Optional[str] = None
    key: Optional[str] = None
    for part in connection_string.split(";"):
        if not part:
            continue
        name, sep, value = part.partition("=")
        if not sep:
            continue
        name = name.strip().casefold()
        if name == ENDPOINT_KEY.casefold():
            endpoint = value.strip()
        elif name == ACCOUNT_KEY.casefold():
            key = value.strip()
    if not endpoint or not key:
        return None
    return ConnectionDescriptor(endpoint=endpoint, key=key)


def rfc1123_date(moment: Optional[datetime] = None) -> str:
    moment = moment or datetime.now(timezone.utc)
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return format_datetime(moment.astimezone(timezone.utc), usegmt=True)


def build_signing_string(verb: str, resource_type: str, resource_link: str, date: str) -> str:
    return f"{verb.lower()}\n{resource_type.lower()}\n{resource_link}\n{date.lower()}\n\n"


def compute_signature(key: str, payload: str) -> str:
    """Base64 HMAC-SHA256 of ``payload`` under the base64-encoded ``key``.

    Raises ``binascii.Error`` when ``key`` is not valid base64.
    """
    secret = base64.b64decode(key, validate=True)
    digest = hmac.new(secret, payload.encode("utf-8"), hashlib.sha256).digest()
    return base64.b64encode(digest).decode("ascii")


def build_auth_token(verb: str, resource_type: str, resource_link: str, date: str, key: str) -> str:
    signature = compute_signature(key, build_signing_string(verb, resource_type, resource_link, date))
    return quote(f"type={TOKEN_TYPE}&ver={TOKEN_VERSION}&sig={signature}", safe="")
