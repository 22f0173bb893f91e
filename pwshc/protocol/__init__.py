"""Cosmos DB master-key REST protocol."""

from .auth import (
    ConnectionDescriptor,
    build_auth_token,
    build_connection_string,
    build_signing_string,
    compute_signature,
    parse_connection_string,
    rfc1123_date,
)
from .client import build_query_request, client_options, read_first_item_via_rest
from .payload import build_partition_key_header, build_query_payload, encode_json_string, first_document_text

__all__ = [
    "ConnectionDescriptor",
    "build_auth_token",
    "build_connection_string",
    "build_signing_string",
    "compute_signature",
    "parse_connection_string",
    "rfc1123_date",
    "build_query_request",
    "client_options",
    "read_first_item_via_rest",
    "build_partition_key_header",
    "build_query_payload",
    "encode_json_string",
    "first_document_text",
]
