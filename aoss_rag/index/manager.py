"""Index lifecycle: existence checks, creation with the fixed schema, deletion."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List

from aoss_rag.clients import aoss
from aoss_rag.config import rag
from aoss_rag.errors import BackendError

from .schema import index_body

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class IndexProbe:
    """Two-valued existence check: either an answer or the error that prevented one."""

    name: str
    exists: bool = False
    error: BackendError | None = None

    @property
    def indeterminate(self) -> bool:
        return self.error is not None


@dataclass(slots=True)
class IndexSummary:
    """One row of ``_cat/indices``."""

    name: str
    health: str | None = None
    status: str | None = None
    docs_count: int | None = None
    store_size: str | None = None
    raw: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_cat(cls, row: Dict[str, Any]) -> "IndexSummary":
        docs = row.get("docs.count")
        try:
            docs_count = int(docs) if docs is not None else None
        except (TypeError, ValueError):
            docs_count = None
        return cls(
            name=str(row.get("index", "")),
            health=row.get("health"),
            status=row.get("status"),
            docs_count=docs_count,
            store_size=row.get("store.size"),
            raw=dict(row),
        )


async def probe_index(name: str) -> IndexProbe:
    """Ask the backend whether ``name`` exists, keeping any failure."""

    try:
        return IndexProbe(name=name, exists=await aoss.index_exists(name))
    except BackendError as e:
        return IndexProbe(name=name, error=e)


async def index_exists(name: str) -> bool:
    """
    Return ``True`` if ``name`` exists.

    A backend failure is reported as ``False`` so callers default to creating
    the index; the failure itself is logged.
    """
    probe = await probe_index(name)
    if probe.indeterminate:
        logger.warning("Existence check for index %s failed; treating as absent: %s", name, probe.error)
        return False
    return probe.exists


async def create_index(name: str) -> Dict[str, Any]:
    """
    Create ``name`` with the k-NN schema at ``rag.EMB_DIM`` dimensions.

    Not idempotent: an existing name raises :class:`BackendError`. Use
    :func:`ensure_index` for create-if-missing.
    """
    await aoss.create_index(name, index_body(rag.EMB_DIM))
    logger.info("Created index %s (dim=%d)", name, rag.EMB_DIM)
    return {"message": "successfully created"}


async def ensure_index(name: str) -> bool:
    """Create ``name`` unless it already exists. Returns ``True`` if created."""

    if await index_exists(name):
        return False
    await create_index(name)
    return True


async def drop(name: str) -> Dict[str, Any]:
    """Delete index ``name``; a missing index raises :class:`BackendError`."""

    await aoss.delete_index(name)
    logger.info("Deleted index %s", name)
    return {"message": f"successfully deleted {name}"}


async def list_indices() -> List[IndexSummary]:
    """Return every index currently present, in backend order."""

    rows = await aoss.list_indices()
    return [IndexSummary.from_cat(row) for row in rows]


async def list_index_names() -> List[str]:
    return [summary.name for summary in await list_indices() if summary.name]
