import os, sys
import itertools
from pathlib import Path

import numpy as np
import pytest
from opensearchpy.exceptions import NotFoundError, RequestError, TransportError

# Add project root to sys.path for imports
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

# Settings read when aoss_rag.config is imported
os.environ.setdefault("OPENAI_API_KEY", "test-openai")
os.environ.setdefault("OPENSEARCH_ENDPOINT", "https://test-collection.us-west-2.aoss.amazonaws.com")
os.environ.setdefault("AWS_REGION", "us-west-2")
os.environ.setdefault("AWS_ACCESS_KEY_ID", "test-access-key")
os.environ.setdefault("AWS_SECRET_ACCESS_KEY", "test-secret-key")
os.environ.setdefault("AOSS_RAG_CONFIG", str(Path(__file__).resolve().parent / "no-such-config.toml"))

from aoss_rag.clients import aoss, oai
from aoss_rag.config import rag


class _FakeIndices:
    def __init__(self, backend: "FakeOpenSearch"):
        self._backend = backend

    async def exists(self, index):
        self._backend.calls.append(("indices.exists", index))
        self._backend._maybe_fail("indices.exists")
        return index in self._backend.store

    async def create(self, index, body=None):
        self._backend.calls.append(("indices.create", index))
        if index in self._backend.store:
            raise RequestError(
                400,
                "resource_already_exists_exception",
                {"error": {"type": "resource_already_exists_exception", "index": index}},
            )
        self._backend.store[index] = {"body": body, "docs": {}}
        return {"acknowledged": True, "index": index}

    async def delete(self, index):
        self._backend.calls.append(("indices.delete", index))
        if index not in self._backend.store:
            raise NotFoundError(
                404,
                "index_not_found_exception",
                {"error": {"type": "index_not_found_exception", "index": index}},
            )
        del self._backend.store[index]
        return {"acknowledged": True}


class _FakeCat:
    def __init__(self, backend: "FakeOpenSearch"):
        self._backend = backend

    async def indices(self, format=None):
        self._backend.calls.append(("cat.indices", format))
        self._backend._maybe_fail("cat.indices")
        return [
            {
                "health": "green",
                "status": "open",
                "index": name,
                "docs.count": str(len(entry["docs"])),
                "store.size": "0b",
            }
            for name, entry in self._backend.store.items()
        ]


class FakeOpenSearch:
    """In-memory stand-in for ``AsyncOpenSearch`` covering the calls the gateway makes."""

    def __init__(self):
        self.store: dict[str, dict] = {}
        self.calls: list[tuple] = []
        self.fail: set[str] = set()
        self.fail_delete_ids: set[str] = set()
        self._ids = itertools.count(1)
        self.indices = _FakeIndices(self)
        self.cat = _FakeCat(self)
        self.closed = False

    def _maybe_fail(self, op: str) -> None:
        if op in self.fail:
            raise TransportError(500, "internal_server_error", {"error": f"{op} unavailable"})

    def docs(self, index: str) -> dict:
        return self.store[index]["docs"]

    async def bulk(self, body):
        self.calls.append(("bulk", len(body)))
        self._maybe_fail("bulk")
        items = []
        errors = False
        for action, source in zip(body[0::2], body[1::2]):
            (op, meta), = action.items()
            index = meta["_index"]
            if index not in self.store:
                errors = True
                items.append({op: {"_index": index, "status": 404,
                                   "error": {"type": "index_not_found_exception"}}})
                continue
            doc_id = meta.get("_id") or f"doc-{next(self._ids)}"
            self.store[index]["docs"][doc_id] = dict(source)
            items.append({op: {"_index": index, "_id": doc_id, "status": 201, "result": "created"}})
        return {"took": 1, "errors": errors, "items": items}

    async def search(self, index, body):
        self.calls.append(("search", index, body))
        self._maybe_fail("search")
        targets = [name for name in index.split(",") if name]
        for name in targets:
            if name not in self.store:
                raise NotFoundError(404, "index_not_found_exception", {"error": {"index": name}})

        size = body.get("size", 10)
        query = body.get("query", {})
        hits = []
        if "term" in query:
            (field, cond), = query["term"].items()
            stored_field = field.removesuffix(".keyword")
            for name in targets:
                for doc_id, src in self.store[name]["docs"].items():
                    if src.get(stored_field) == cond["value"]:
                        hits.append({"_index": name, "_id": doc_id, "_score": 1.0, "_source": src})
        elif "knn" in query:
            (field, cond), = query["knn"].items()
            qvec = np.asarray(cond["vector"], dtype=np.float32)
            for name in targets:
                for doc_id, src in self.store[name]["docs"].items():
                    dvec = np.asarray(src[field], dtype=np.float32)
                    score = 1.0 / (1.0 + float(np.sum((qvec - dvec) ** 2)))
                    hits.append({"_index": name, "_id": doc_id, "_score": score, "_source": src})
            hits.sort(key=lambda h: h["_score"], reverse=True)
            size = min(size, cond["k"])
        hits = hits[: max(size, 0)]
        return {"hits": {"total": {"value": len(hits)}, "hits": hits}}

    async def delete(self, index, id):
        self.calls.append(("delete", index, id))
        if id in self.fail_delete_ids:
            raise TransportError(500, "internal_server_error", {"error": "delete unavailable"})
        if index not in self.store:
            raise NotFoundError(
                404,
                "index_not_found_exception",
                {"error": {"type": "index_not_found_exception", "index": index}, "status": 404},
            )
        docs = self.store[index]["docs"]
        if id not in docs:
            raise NotFoundError(404, "not_found", {"_index": index, "_id": id, "result": "not_found"})
        del docs[id]
        return {"_index": index, "_id": id, "result": "deleted"}

    async def close(self):
        self.closed = True


def fake_vector(text: str) -> np.ndarray:
    """Deterministic embedding of ``rag.EMB_DIM`` floats derived from ``text``."""
    seed = sum(ord(ch) for ch in text)
    return np.random.default_rng(seed).random(rag.EMB_DIM, dtype=np.float32)


@pytest.fixture
def fake_backend(monkeypatch):
    backend = FakeOpenSearch()
    monkeypatch.setattr(aoss, "_client", backend)
    return backend


@pytest.fixture
def fake_embeddings(monkeypatch):
    queries = []

    async def fake_embed_text(text: str, model: str | None = None) -> np.ndarray:
        queries.append(text)
        return fake_vector(text)

    monkeypatch.setattr(oai, "embed_text", fake_embed_text)
    return queries


@pytest.fixture
def make_vector():
    return fake_vector
