import pytest
from opensearchpy import AsyncOpenSearch
from opensearchpy.exceptions import NotFoundError

from aoss_rag.clients import aoss
from aoss_rag.config import opensearch
from aoss_rag.errors import BackendError, ConfigurationError


def test_build_client_requires_endpoint(monkeypatch):
    monkeypatch.setattr(opensearch, "OPENSEARCH_ENDPOINT", "")
    monkeypatch.setattr(aoss, "_client", None)

    with pytest.raises(ConfigurationError):
        aoss.build_client()


@pytest.mark.asyncio
async def test_build_client_does_no_io(monkeypatch):
    monkeypatch.setattr(aoss, "_client", None)

    client = aoss.build_client("https://example.us-west-2.aoss.amazonaws.com")

    assert isinstance(client, AsyncOpenSearch)
    assert aoss.get_client() is client
    await aoss.close()
    assert aoss._client is None


@pytest.mark.asyncio
async def test_connect_probes_backend(fake_backend):
    status = await aoss.connect()

    assert status.ok
    assert status.error is None
    assert fake_backend.calls == [("indices.exists", opensearch.OPENSEARCH_PROBE_INDEX)]


@pytest.mark.asyncio
async def test_connect_reports_failure(fake_backend):
    fake_backend.fail.add("indices.exists")

    status = await aoss.connect()

    assert not status.ok
    assert isinstance(status.error, BackendError)
    assert status.error.status_code == 500


@pytest.mark.asyncio
async def test_connect_reports_missing_endpoint(monkeypatch):
    monkeypatch.setattr(aoss, "_client", None)
    monkeypatch.setattr(opensearch, "OPENSEARCH_ENDPOINT", "")

    status = await aoss.connect()

    assert not status.ok
    assert isinstance(status.error, ConfigurationError)
    assert aoss._client is None


@pytest.mark.asyncio
async def test_errors_keep_backend_payload(fake_backend):
    with pytest.raises(BackendError) as excinfo:
        await aoss.delete_index("missing")

    err = excinfo.value
    assert err.not_found
    assert err.info["error"]["type"] == "index_not_found_exception"
    assert isinstance(err.__cause__, NotFoundError)


@pytest.mark.asyncio
async def test_close_releases_client(fake_backend):
    await aoss.close()

    assert fake_backend.closed
    assert aoss._client is None
