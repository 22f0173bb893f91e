import binascii
from datetime import datetime, timedelta, timezone

import pytest

from pwshc.protocol import (
    ConnectionDescriptor,
    build_auth_token,
    build_connection_string,
    build_signing_string,
    compute_signature,
    parse_connection_string,
    rfc1123_date,
)

DATE = "Mon, 19 Oct 2026 12:00:00 GMT"


def test_signing_string_layout():
    assert build_signing_string("POST", "Docs", "dbs/Db/colls/Items", DATE) == (
        "post\ndocs\ndbs/Db/colls/Items\nmon, 19 oct 2026 12:00:00 gmt\n\n"
    )


@pytest.mark.parametrize(
    "resource_link, signature",
    [
        ("dbs/testdb/colls/testcoll", "RPkah0nGvTp43PdutwPutEOSNo2F65deaf3nrkKG5oo="),
        ("dbs/orders/colls/items", "Wp9LtaV61757mx2GXgYXVR8iqGMfFN1hVmz8lm7NHXk="),
    ],
)
def test_golden_signature(master_key, resource_link, signature):
    payload = build_signing_string("post", "docs", resource_link, DATE)
    assert compute_signature(master_key, payload) == signature


def test_golden_auth_token(master_key):
    token = build_auth_token("post", "docs", "dbs/testdb/colls/testcoll", DATE, master_key)
    assert token == "type%3Dmaster%26ver%3D1.0%26sig%3DRPkah0nGvTp43PdutwPutEOSNo2F65deaf3nrkKG5oo%3D"


def test_invalid_key_raises():
    with pytest.raises(binascii.Error):
        compute_signature("not base64!", "payload")


def test_rfc1123_date():
    moment = datetime(2026, 10, 19, 14, 0, 0, tzinfo=timezone(timedelta(hours=2)))
    assert rfc1123_date(moment) == DATE
    assert rfc1123_date(datetime(2026, 10, 19, 12, 0, 0)) == DATE
    assert rfc1123_date().endswith(" GMT")


def test_parse_connection_string():
    parsed = parse_connection_string(" accountendpoint = https://a.documents.azure.com:443/ ;;AccountKey=abc==;Extra")
    assert parsed == ConnectionDescriptor(endpoint="https://a.documents.azure.com:443/", key="abc==")


@pytest.mark.parametrize(
    "value",
    [None, "", "   ", "AccountEndpoint=https://a/", "AccountKey=abc", "AccountEndpoint=;AccountKey=  ;"],
)
def test_parse_connection_string_rejects(value):
    assert parse_connection_string(value) is None


def test_connection_string_round_trip():
    text = build_connection_string("https://a.documents.azure.com:443/", "k==")
    assert text == "AccountEndpoint=https://a.documents.azure.com:443/;AccountKey=k==;"
    assert parse_connection_string(text).key == "k=="
