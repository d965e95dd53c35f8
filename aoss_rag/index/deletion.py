"""
Delete documents by originating file name.

Each run enumerates every index, issues one ``term`` search on
``langchain_file_name.keyword`` across all of them, then deletes the matched
ids. Deletes run concurrently up to ``opensearch.DELETE_CONCURRENCY`` and are
all awaited before the report is returned; a failed delete never cancels the
others and nothing is rolled back.

Two targeting modes exist:

* :func:`delete_by_file_name` deletes every match from the caller-named
  index. Matches that live in a different index are therefore left in place
  and show up as ``not_found`` in the report.
* :func:`purge_file_name` deletes every match from the index that owns it.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Tuple

from aoss_rag.clients import aoss
from aoss_rag.config import opensearch
from aoss_rag.errors import BackendError

from .manager import list_index_names
from .retrieval import SearchHit, find_by_file_name

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class DeleteFailure:
    index: str
    id: str
    error: BackendError


@dataclass(slots=True)
class DeletionReport:
    """Outcome of one deletion run."""

    file_name: str
    matched: int = 0
    deleted: int = 0
    not_found: int = 0
    failed: List[DeleteFailure] = field(default_factory=list)
    # target index -> ids a delete was issued for
    targets: Dict[str, List[str]] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.failed

    def as_dict(self) -> dict:
        return {
            "file_name": self.file_name,
            "matched": self.matched,
            "deleted": self.deleted,
            "not_found": self.not_found,
            "failed": [
                {"index": f.index, "id": f.id, "error": str(f.error)} for f in self.failed
            ],
            "targets": {k: list(v) for k, v in self.targets.items()},
        }


async def _locate(file_name: str) -> List[SearchHit]:
    indices = await list_index_names()
    if not indices:
        logger.info("No indices present; nothing to delete for %s", file_name)
        return []
    return await find_by_file_name(file_name, indices, size=opensearch.DELETE_SEARCH_CAP)


async def _delete_all(report: DeletionReport, pairs: List[Tuple[str, str]]) -> DeletionReport:
    """Delete each ``(index, id)`` pair with bounded concurrency."""

    sem = asyncio.Semaphore(opensearch.DELETE_CONCURRENCY)

    async def _delete_bounded(index: str, doc_id: str) -> None:
        async with sem:
            await aoss.delete_document(index, doc_id)

    for index, doc_id in pairs:
        report.targets.setdefault(index, []).append(doc_id)

    results = await asyncio.gather(
        *(_delete_bounded(index, doc_id) for index, doc_id in pairs),
        return_exceptions=True,
    )

    for (index, doc_id), result in zip(pairs, results):
        if result is None:
            report.deleted += 1
        elif isinstance(result, BackendError) and result.document_missing:
            report.not_found += 1
        elif isinstance(result, BackendError):
            logger.warning("Failed to delete %s from %s: %s", doc_id, index, result)
            report.failed.append(DeleteFailure(index=index, id=doc_id, error=result))
        else:
            raise result

    logger.info(
        "Deletion for %s: matched=%d deleted=%d not_found=%d failed=%d",
        report.file_name, report.matched, report.deleted, report.not_found, len(report.failed),
    )
    return report


async def delete_by_file_name(index: str, file_name: str) -> DeletionReport:
    """
    Remove documents whose originating file name is ``file_name``.

    The search spans every index, but each delete targets ``index``.

    :param index: Index the deletes are issued against.
    :param file_name: Exact originating file name to match.
    :raises BackendError: Enumeration or the search step failed; nothing was deleted.
    """
    hits = await _locate(file_name)
    report = DeletionReport(file_name=file_name, matched=len(hits))
    return await _delete_all(report, [(index, hit.id) for hit in hits])


async def purge_file_name(file_name: str) -> DeletionReport:
    """Remove every document named ``file_name`` from the index that owns it."""

    hits = await _locate(file_name)
    report = DeletionReport(file_name=file_name, matched=len(hits))
    return await _delete_all(report, [(hit.index, hit.id) for hit in hits])
