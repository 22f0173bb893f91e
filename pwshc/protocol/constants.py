"""
Cosmos DB REST protocol constants.

Both the Python client in :mod:`pwshc.protocol.client` and the C# helper
rendered by :mod:`pwshc.codegen.csharp` read these values, so a change
here reaches generated code and live execution together.
"""

API_VERSION = "2018-12-31"
VERB = "post"
RESOURCE_TYPE = "docs"
TOKEN_TYPE = "master"
TOKEN_VERSION = "1.0"

HEADER_DATE = "x-ms-date"
HEADER_VERSION = "x-ms-version"
HEADER_AUTHORIZATION = "Authorization"
HEADER_IS_QUERY = "x-ms-documentdb-isquery"
HEADER_CROSS_PARTITION = "x-ms-documentdb-query-enablecrosspartition"
HEADER_PARTITION_KEY = "x-ms-documentdb-partitionkey"
HEADER_ACCEPT = "Accept"
HEADER_CONTENT_TYPE = "Content-Type"

ACCEPT_MEDIA_TYPE = "application/json"
QUERY_MEDIA_TYPE = "application/query+json"

ENDPOINT_KEY = "AccountEndpoint"
ACCOUNT_KEY = "AccountKey"

DOCUMENTS_PROPERTY = "Documents"

INVALID_CONNECTION_STRING = "Invalid Cosmos connection string."
NO_ITEMS_FOUND = "No items found."
REST_ERROR_PREFIX = "Cosmos REST error"
FAILURE_PREFIX = "Failed to read Cosmos DB item via REST"


def resource_link(database_name: str, container_name: str) -> str:
    return f"dbs/{database_name}/colls/{container_name}"


def as_template_context() -> dict:
    """Upper-case names of this module, for the C# templates."""
    return {name: value for name, value in globals().items() if name.isupper()}
