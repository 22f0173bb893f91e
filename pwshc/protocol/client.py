"""Async Cosmos DB query client built on httpx."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Dict, Optional

import httpx

from .auth import ConnectionDescriptor, build_auth_token, parse_connection_string, rfc1123_date
from .constants import (
    ACCEPT_MEDIA_TYPE,
    API_VERSION,
    FAILURE_PREFIX,
    HEADER_ACCEPT,
    HEADER_AUTHORIZATION,
    HEADER_CONTENT_TYPE,
    HEADER_CROSS_PARTITION,
    HEADER_DATE,
    HEADER_IS_QUERY,
    HEADER_PARTITION_KEY,
    HEADER_VERSION,
    INVALID_CONNECTION_STRING,
    NO_ITEMS_FOUND,
    QUERY_MEDIA_TYPE,
    RESOURCE_TYPE,
    REST_ERROR_PREFIX,
    VERB,
    resource_link,
)
from .payload import build_partition_key_header, build_query_payload, first_document_text

logger = logging.getLogger(__name__)

__all__ = ["build_query_request", "client_options", "read_first_item_via_rest"]


def client_options(timeout: Optional[float] = None) -> Dict[str, Any]:
    """Keyword arguments for ``httpx.AsyncClient``; ``None`` keeps httpx defaults."""
    if timeout is None:
        return {}
    return {"timeout": httpx.Timeout(timeout)}


def build_query_request(
    connection: ConnectionDescriptor,
    database_name: str,
    container_name: str,
    query: str,
    partition_key: Optional[str],
    *,
    date: str,
) -> httpx.Request:
    link = resource_link(database_name, container_name)
    authorization = build_auth_token(VERB, RESOURCE_TYPE, link, date, connection.key)
    url = httpx.URL(connection.endpoint).join(f"{link}/docs")

    headers = [
        (HEADER_DATE, date),
        (HEADER_VERSION, API_VERSION),
        (HEADER_AUTHORIZATION, authorization),
        (HEADER_IS_QUERY, "true"),
    ]
    if partition_key is None or not partition_key.strip():
        headers.append((HEADER_CROSS_PARTITION, "true"))
    else:
        headers.append((HEADER_PARTITION_KEY, build_partition_key_header(partition_key)))
    headers.append((HEADER_ACCEPT, ACCEPT_MEDIA_TYPE))
    headers.append((HEADER_CONTENT_TYPE, QUERY_MEDIA_TYPE))

    body = build_query_payload(query).encode("utf-8")
    return httpx.Request(VERB.upper(), url, headers=headers, content=body)


async def read_first_item_via_rest(
    connection_string: str,
    database_name: str,
    container_name: str,
    query: str,
    partition_key: Optional[str] = None,
    *,
    client: Optional[httpx.AsyncClient] = None,
    now: Optional[datetime] = None,
    timeout: Optional[float] = None,
) -> str:
    """
    Run ``query`` against one container and describe the outcome as text.

    The result is the raw JSON of the first returned document or one of
    the fixed messages in :mod:`pwshc.protocol.constants`.  Failures of any
    kind are folded into the returned string.

    Parameters
    ----------
    client : httpx.AsyncClient, optional
        Client to send through; a private one is opened and closed per call
        when omitted.
    now : datetime, optional
        Request time used for ``x-ms-date`` and the signature.
    """
    try:
        connection = parse_connection_string(connection_string)
        if connection is None:
            return INVALID_CONNECTION_STRING

        request = build_query_request(
            connection,
            database_name,
            container_name,
            query,
            partition_key,
            date=rfc1123_date(now),
        )
        logger.debug("POST %s", request.url)
        if client is None:
            async with httpx.AsyncClient(**client_options(timeout)) as owned:
                response = await owned.send(request)
        else:
            response = await client.send(request)

        content = response.text
        if not response.is_success:
            return f"{REST_ERROR_PREFIX} {response.status_code}: {response.reason_phrase} {content}"

        document = first_document_text(content)
        if document is None:
            return NO_ITEMS_FOUND
        return document
    except Exception as exc:
        logger.debug("Cosmos query failed: %s", exc, exc_info=True)
        return f"{FAILURE_PREFIX}: {exc}"
