"""Async gateway to the OpenSearch Serverless backend.

The gateway owns the single shared ``AsyncOpenSearch`` client. Construction
is two-phase: :func:`build_client` wires the endpoint and SigV4 signing
without touching the network, and :func:`connect` runs a probe request and
reports the outcome. Every request helper translates ``opensearchpy``
failures into :class:`~aoss_rag.errors.BackendError` with the backend's
status code and payload preserved.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, List, Sequence

import boto3
from opensearchpy import AsyncHttpConnection, AsyncOpenSearch, AWSV4SignerAsyncAuth
from opensearchpy.exceptions import OpenSearchException

from aoss_rag.config import opensearch
from aoss_rag.errors import AossRagError, BackendError, ConfigurationError

logger = logging.getLogger(__name__)

_client: AsyncOpenSearch | None = None


@dataclass(slots=True)
class ConnectionStatus:
    """Outcome of :func:`connect`."""

    ok: bool
    endpoint: str
    error: AossRagError | None = None


def _signer() -> AWSV4SignerAsyncAuth:
    """Return SigV4 auth backed by the default boto3 credential chain."""

    session = boto3.Session(region_name=opensearch.AWS_REGION)
    credentials = session.get_credentials()
    if credentials is None:
        raise ConfigurationError("No AWS credentials found in the default provider chain")
    return AWSV4SignerAsyncAuth(credentials, opensearch.AWS_REGION, opensearch.OPENSEARCH_SERVICE)


def build_client(endpoint: str | None = None) -> AsyncOpenSearch:
    """Create the shared client without issuing any request.

    :param endpoint: Collection URL; defaults to ``OPENSEARCH_ENDPOINT``.
    :returns: The newly installed ``AsyncOpenSearch`` instance.
    """

    global _client

    url = (endpoint or opensearch.OPENSEARCH_ENDPOINT).strip()
    if not url:
        raise ConfigurationError("OPENSEARCH_ENDPOINT is not set")

    _client = AsyncOpenSearch(
        hosts=[url],
        http_auth=_signer(),
        use_ssl=not url.startswith("http://"),
        verify_certs=True,
        connection_class=AsyncHttpConnection,
        timeout=opensearch.OPENSEARCH_TIMEOUT,
    )
    return _client


def get_client() -> AsyncOpenSearch:
    """Return the shared client, building it on first use."""

    if _client is None:
        return build_client()
    return _client


async def connect() -> ConnectionStatus:
    """Verify the backend is reachable with a cheap existence probe."""

    endpoint = opensearch.OPENSEARCH_ENDPOINT
    logger.info("Connecting to OpenSearch at %s", endpoint or "<unset>")
    try:
        get_client()
        await _request("probe", lambda c: c.indices.exists(index=opensearch.OPENSEARCH_PROBE_INDEX))
    except AossRagError as e:
        logger.error("OpenSearch connection check failed: %s", e)
        return ConnectionStatus(ok=False, endpoint=endpoint, error=e)
    logger.info("Connected to OpenSearch")
    return ConnectionStatus(ok=True, endpoint=endpoint)


async def close() -> None:
    """Release the shared client."""

    global _client
    if _client is not None:
        await _client.close()
        _client = None


async def _request(action: str, call: Callable[[AsyncOpenSearch], Awaitable[Any]]) -> Any:
    try:
        return await call(get_client())
    except OpenSearchException as e:
        status = getattr(e, "status_code", None)
        info = getattr(e, "info", None)
        raise BackendError(f"OpenSearch {action} failed: {e}", status_code=status, info=info) from e


# ----------------------------- Index operations ----------------------------- #


async def index_exists(name: str) -> bool:
    return bool(await _request("indices.exists", lambda c: c.indices.exists(index=name)))


async def create_index(name: str, body: Dict[str, Any]) -> Dict[str, Any]:
    return await _request("indices.create", lambda c: c.indices.create(index=name, body=body))


async def delete_index(name: str) -> Dict[str, Any]:
    return await _request("indices.delete", lambda c: c.indices.delete(index=name))


async def list_indices() -> List[Dict[str, Any]]:
    """Return the ``_cat/indices`` rows as dicts."""

    rows = await _request("cat.indices", lambda c: c.cat.indices(format="json"))
    return list(rows or [])


# ----------------------------- Document operations ----------------------------- #


async def bulk(payload: Sequence[Dict[str, Any]]) -> Dict[str, Any]:
    return await _request("bulk", lambda c: c.bulk(body=list(payload)))


async def search(indices: str, body: Dict[str, Any]) -> Dict[str, Any]:
    """Run ``body`` against ``indices`` (one name or a comma-joined list)."""

    return await _request("search", lambda c: c.search(index=indices, body=body))


async def delete_document(index: str, doc_id: str) -> Dict[str, Any]:
    return await _request("delete", lambda c: c.delete(index=index, id=doc_id))
